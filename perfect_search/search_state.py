"""
State classes for the perfect number search.

This module defines the dataclasses that make up the resumable search
state. The search loop, the candidate generator and the checkpoint store
all pass a single SearchState object around instead of sharing globals.
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Tuple

from .errors import CapacityExceededError


# Candidates are 32-bit unsigned values: hi_power must stay below this.
WORD_BITS = 32
MAX_VALUE = (1 << WORD_BITS) - 1

# Only five perfect numbers lie below 2^32 (6, 28, 496, 8128, 33550336).
# 32 slots leaves ample headroom; running out means something is wrong.
MAX_PERFECTS = 32


class PositionValidation:
    """Mixin providing validation of (hi_power, lo_power) pairs."""

    def _validate_powers(self, hi_power: int, lo_power: int) -> None:
        """Validate 0 < lo_power < hi_power < WORD_BITS."""
        if not 0 < lo_power < hi_power < WORD_BITS:
            raise ValueError(
                f"Invalid search position: need 0 < lo_power < hi_power < {WORD_BITS}, "
                f"got hi_power={hi_power}, lo_power={lo_power}"
            )


@dataclass(frozen=True)
class SearchPosition(PositionValidation):
    """
    Resumable cursor of the search.

    The candidate under test is 2^hi_power - 2^lo_power. The value and its
    trial-division bound are derived on access, so they always agree with
    the two exponents.
    """

    hi_power: int
    lo_power: int

    def __post_init__(self):
        """Validate exponents after initialization."""
        self._validate_powers(self.hi_power, self.lo_power)

    @property
    def current_value(self) -> int:
        """Candidate value 2^hi_power - 2^lo_power."""
        return (1 << self.hi_power) - (1 << self.lo_power)

    @property
    def max_divisor(self) -> int:
        """Largest trial divisor for the candidate, floor(sqrt(value))."""
        return math.isqrt(self.current_value)

    def __str__(self) -> str:
        return f"2^{self.hi_power} - 2^{self.lo_power} = {self.current_value}"


class PerfectNumberList:
    """
    Fixed-capacity, ascending list of discovered perfect numbers.

    Values arrive in ascending order because the candidate generator is
    strictly increasing. The container never grows past its capacity:
    appending to a full list raises CapacityExceededError.
    """

    def __init__(self, values: Iterable[int] = (), capacity: int = MAX_PERFECTS):
        if capacity <= 0:
            raise ValueError(f"Capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._values: list = []
        for value in values:
            self.append(value)

    def append(self, value: int) -> None:
        """
        Append a newly discovered perfect number.

        Raises:
            CapacityExceededError: If the list is already full
            ValueError: If the value is out of range or not ascending
        """
        if len(self._values) >= self.capacity:
            raise CapacityExceededError(
                f"Cannot record {value}: all {self.capacity} result slots are in use"
            )
        if not 0 < value <= MAX_VALUE:
            raise ValueError(f"Perfect number out of 32-bit range: {value}")
        if self._values and value <= self._values[-1]:
            raise ValueError(
                f"Perfect numbers must be ascending: {value} after {self._values[-1]}"
            )
        self._values.append(value)

    @property
    def values(self) -> Tuple[int, ...]:
        return tuple(self._values)

    @property
    def is_full(self) -> bool:
        return len(self._values) >= self.capacity

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[int]:
        return iter(self._values)

    def __contains__(self, value) -> bool:
        return value in self._values

    def __getitem__(self, index: int) -> int:
        return self._values[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, PerfectNumberList):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"PerfectNumberList({self._values!r})"


@dataclass
class SearchState:
    """
    Everything needed to resume a search.

    Attributes:
        elapsed_seconds: Cumulative compute time across all sessions
        records: Perfect numbers found so far
        position: Next untested candidate, or None once the 32-bit range
            has been exhausted
    """

    elapsed_seconds: float = 0.0
    records: PerfectNumberList = field(default_factory=PerfectNumberList)
    position: Optional[SearchPosition] = None

    def __post_init__(self):
        """Validate elapsed time."""
        if not math.isfinite(self.elapsed_seconds) or self.elapsed_seconds < 0:
            raise ValueError(f"Elapsed time must be a non-negative number, got {self.elapsed_seconds}")

    @classmethod
    def fresh(cls) -> 'SearchState':
        """State for a search that has not started yet."""
        from .candidates import initialize
        return cls(elapsed_seconds=0.0, records=PerfectNumberList(), position=initialize())

    @property
    def exhausted(self) -> bool:
        return self.position is None

    @property
    def next_index(self) -> int:
        """Ordinal of the perfect number currently being searched for."""
        return len(self.records) + 1
