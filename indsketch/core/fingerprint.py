"""
Cell hashing and row fingerprinting

Every cell is reduced to an unsigned 64-bit hash before it reaches the
tester. A column combination's fingerprint folds the hashes of its columns
in declared order; a NULL cell anywhere makes the row unusable for that
combination.
"""
from typing import Any, List, Optional, Sequence

import mmh3

NULL_HASH = 0  # sentinel for NULL cells
HASH_MASK = (1 << 64) - 1


def cell_hash(value: Any) -> int:
    """
    Hash a raw cell value to an unsigned 64-bit integer

    Args:
        value: Cell value; None is NULL

    Returns:
        NULL_HASH for None, otherwise a non-zero 64-bit hash
    """
    if value is None:
        return NULL_HASH

    if isinstance(value, bytes):
        data = value
    else:
        data = str(value).encode('utf-8')

    hash_value = mmh3.hash64(data, signed=False)[0]

    # Keep real values off the NULL sentinel
    return hash_value or 1


def hash_row(values: Sequence[Any]) -> List[int]:
    """Hash every cell of a raw row"""
    return [cell_hash(value) for value in values]


def rotate_left(value: int, distance: int = 1) -> int:
    """64-bit rotate left (signed input is read as two's complement)"""
    value &= HASH_MASK
    distance %= 64
    return ((value << distance) | (value >> (64 - distance))) & HASH_MASK


def combine(row: Sequence[int], columns: Sequence[int]) -> Optional[int]:
    """
    Fingerprint a row for one column combination

    acc = rotl(acc, 1) ^ hash for each column in order, so swapping two
    columns generally changes the fingerprint.

    Args:
        row: Per-column 64-bit cell hashes, signed or unsigned
        columns: Column positions of the combination, in declared order

    Returns:
        The fingerprint, or None if any participating cell is NULL
    """
    acc = 0
    for column in columns:
        hash_value = row[column]
        if hash_value == NULL_HASH:
            return None
        # Signed 64-bit hashes (e.g. Java longs) fold as their unsigned view
        acc = rotate_left(acc, 1) ^ (hash_value & HASH_MASK)
    return acc
