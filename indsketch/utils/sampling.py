"""
Row sampling utilities
"""
import random
from typing import Iterable, List, Optional, TypeVar

T = TypeVar('T')


def reservoir_sample(items: Iterable[T], k: int, seed: Optional[int] = 42) -> List[T]:
    """
    Uniform sample of at most k items in one pass (Algorithm R)

    Args:
        items: Items to sample from (consumed once)
        k: Sample size
        seed: Seed for reproducible samples (None = random)

    Returns:
        Up to k items; all of them if there are fewer than k
    """
    if k < 0:
        raise ValueError("Sample size cannot be negative")

    rnd = random.Random(seed)
    reservoir: List[T] = []
    if k == 0:
        return reservoir

    for i, item in enumerate(items, start=1):
        if i <= k:
            reservoir.append(item)
        else:
            j = rnd.randint(1, i)
            if j <= k:
                reservoir[j - 1] = item
    return reservoir
