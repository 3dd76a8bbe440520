"""
Helpers for building combinations and feeding rows in tests
"""
from indsketch.core.fingerprint import hash_row
from indsketch.models.combinations import ColumnCombination


def cc(table, *columns):
    """Shorthand for a column combination"""
    return ColumnCombination(table=table, columns=columns)


def hashed(rows):
    """Hash raw rows into cell-hash rows"""
    return [hash_row(row) for row in rows]


def column(values):
    """Single-column raw rows"""
    return [[value] for value in values]


def stream(tester, table, rows):
    """Stream raw rows of one table through a fresh cursor"""
    cursor = tester.start_table(table)
    for row_count, row in enumerate(hashed(rows), start=1):
        tester.insert_row(cursor, row, row_count)
    return cursor
