"""Evenly spaced index selection for axis labels."""

from fractions import Fraction
from math import floor
from typing import Tuple


def select_indices(label_count: int, capacity: int) -> Tuple[int, ...]:
    """
    Pick ``capacity`` indices out of ``label_count``, always keeping both ends.

    Interior indices sit at ``round((n - 1) / (capacity - 1) * i)`` with halves
    rounded up. Exact fractions keep the choice identical on every platform.
    """
    if label_count <= 0:
        return ()
    if label_count <= capacity:
        return tuple(range(label_count))
    if capacity <= 1:
        return (0,)

    last = label_count - 1
    step = Fraction(last, capacity - 1)
    chosen = [0]
    for i in range(1, capacity - 1):
        index = floor(step * i + Fraction(1, 2))
        if chosen[-1] < index < last:
            chosen.append(index)
    chosen.append(last)
    return tuple(chosen)


__all__ = ["select_indices"]
