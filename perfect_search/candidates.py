"""
Candidate generator for the perfect number search.

The known perfect numbers below 2^32 all have the form 2^h - 2^l with
h > l (6 = 2^3 - 2^1, 28 = 2^5 - 2^2, ...), so only those values are
tested instead of every integer.

Within one hi_power band lo_power runs from hi_power-1 down to 1, which
makes the candidate values ascend. Every band starts above the largest
value of the previous band, so the full sequence is strictly increasing
and perfect numbers are discovered in ascending order.
"""

from typing import Iterator, Optional

from .search_state import SearchPosition, WORD_BITS


# Candidate 4 = 2^3 - 2^2 is the smallest value the search considers.
FIRST_HI_POWER = 3


def initialize(start_position: Optional[SearchPosition] = None) -> SearchPosition:
    """
    Return the position the search should start from.

    Args:
        start_position: Saved position to resume at, if any

    Returns:
        The saved position unchanged, or the first position (3, 2)
    """
    if start_position is not None:
        return start_position
    return SearchPosition(hi_power=FIRST_HI_POWER, lo_power=FIRST_HI_POWER - 1)


def advance(position: SearchPosition) -> Optional[SearchPosition]:
    """
    Step to the next candidate.

    Decrements lo_power; once it would reach 0, moves to the next hi_power
    band with lo_power = hi_power - 1.

    Returns:
        Next position, or None when the 32-bit range is exhausted
    """
    if position.lo_power > 1:
        return SearchPosition(position.hi_power, position.lo_power - 1)

    hi_power = position.hi_power + 1
    if hi_power >= WORD_BITS:
        return None
    return SearchPosition(hi_power, hi_power - 1)


def iter_positions(start: Optional[SearchPosition] = None,
                   limit: int = WORD_BITS) -> Iterator[SearchPosition]:
    """
    Yield positions from start (inclusive) while hi_power < limit.

    Args:
        start: Position to start at (default: the first position)
        limit: Exclusive upper bound on hi_power (default: 32)
    """
    position: Optional[SearchPosition] = initialize(start)
    while position is not None and position.hi_power < limit:
        yield position
        position = advance(position)
