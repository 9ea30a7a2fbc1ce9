"""
Perfection test by trial division.

A number is perfect when it equals the sum of its proper divisors.
Divisors come in pairs (d, value // d) with d <= sqrt(value), so trial
division only needs to run up to the integer square root.
"""

import math

from .search_state import MAX_VALUE


# isqrt(2^32 - 1): every trial divisor fits in 16 bits.
MAX_DIVISOR = 0xFFFF


def max_divisor(value: int) -> int:
    """Return the trial-division bound floor(sqrt(value))."""
    return math.isqrt(value)


def divisor_sum(value: int, max_divisor: int) -> int:
    """
    Sum the proper divisors of value (1 included, value itself excluded).

    Args:
        value: Number to examine (1 .. 2^32 - 1)
        max_divisor: Largest trial divisor, normally floor(sqrt(value))

    Returns:
        Sum of proper divisors found up to max_divisor and their cofactors

    Raises:
        ValueError: If value or max_divisor is out of range

    Example:
        >>> divisor_sum(28, 5)
        28
        >>> divisor_sum(9, 3)
        4
    """
    if not 0 < value <= MAX_VALUE:
        raise ValueError(f"Value must be in 1..{MAX_VALUE}, got {value}")
    if not 0 < max_divisor <= MAX_DIVISOR:
        raise ValueError(f"Max divisor must be in 1..{MAX_DIVISOR}, got {max_divisor}")

    if value == 1:
        return 0

    total = 1
    for divisor in range(2, max_divisor + 1):
        if value % divisor == 0:
            total += divisor
            cofactor = value // divisor
            # a square root divisor is its own cofactor
            if cofactor != divisor:
                total += cofactor
    return total


def is_perfect(value: int, max_divisor: int) -> bool:
    """
    Check whether value equals the sum of its proper divisors.

    Example:
        >>> is_perfect(6, 2)
        True
        >>> is_perfect(12, 3)
        False
    """
    return divisor_sum(value, max_divisor) == value
