"""
The perfect number search loop.

PerfectNumberSearch walks the candidate sequence, tests each candidate and
records every perfect number it finds. It owns the SearchState while
running; the checkpoint store only reads it at save time, and the operator
console only reaches it through the entry points below.

Before each candidate the loop polls the command channel without blocking,
so an operator request is served within one perfection test.
"""

import enum
import logging
from typing import Optional, Tuple

from .candidates import advance
from .checkpoint_store import CheckpointStore
from .commands import CommandChannel, OperatorConsole
from .errors import CheckpointWriteError
from .perfection import is_perfect
from .search_state import SearchPosition, SearchState, WORD_BITS
from .timing import ElapsedClock
from .user_output import UserOutput


class SearchOutcome(enum.Enum):
    """How a call to PerfectNumberSearch.run() ended."""
    COMPLETED = "completed"          # whole 32-bit range searched
    LIMIT_REACHED = "limit_reached"  # stopped at the configured hi_power limit
    CHECKPOINTED = "checkpointed"    # saved and exited on request
    CANCELLED = "cancelled"          # exited on request without saving

    @property
    def finished(self) -> bool:
        return self in (SearchOutcome.COMPLETED, SearchOutcome.LIMIT_REACHED)


class PerfectNumberSearch:
    """
    Runs the search from the state's position until exhaustion or exit.

    Usage:
        state = store.load() or SearchState.fresh()
        search = PerfectNumberSearch(state, store, ElapsedClock(state.elapsed_seconds))
        outcome = search.run()
    """

    def __init__(
        self,
        state: SearchState,
        store: CheckpointStore,
        clock: Optional[ElapsedClock] = None,
        output: Optional[UserOutput] = None,
        commands: Optional[CommandChannel] = None,
        console: Optional[OperatorConsole] = None,
        max_hi_power: int = WORD_BITS,
        autosave_seconds: float = 0.0,
    ):
        if not 3 < max_hi_power <= WORD_BITS:
            raise ValueError(f"max_hi_power must be in 4..{WORD_BITS}, got {max_hi_power}")
        if autosave_seconds < 0:
            raise ValueError(f"autosave_seconds must be >= 0, got {autosave_seconds}")

        self.state = state
        self.store = store
        self.clock = clock or ElapsedClock(state.elapsed_seconds)
        self.output = output or UserOutput()
        self.commands = commands
        self.console = console or OperatorConsole(self.output)
        self.max_hi_power = max_hi_power
        self.autosave_seconds = autosave_seconds
        self.logger = logging.getLogger(f"{__name__}.PerfectNumberSearch")

        # Perfect numbers found during this run (not restored ones)
        self.discovered: list = []
        self.candidates_tested = 0

        self._checkpoint_requested = False
        self._exit_requested: Optional[bool] = None  # None, or whether to save
        self._last_save_elapsed = self.clock.elapsed

    # ==================== Operator Entry Points ====================

    @property
    def position(self) -> Optional[SearchPosition]:
        return self.state.position

    @property
    def elapsed(self) -> float:
        return self._sync_elapsed()

    @property
    def records(self) -> Tuple[int, ...]:
        return self.state.records.values

    def request_checkpoint(self) -> None:
        """Ask for a checkpoint before the next candidate is tested."""
        self._checkpoint_requested = True

    def request_exit(self, save: bool = True) -> None:
        """
        Ask the loop to stop before the next candidate.

        Args:
            save: Save a checkpoint first; if that save fails the search
                keeps running so no progress is lost
        """
        self._exit_requested = save

    def report_status(self) -> None:
        """Print the current candidate and elapsed time."""
        position = self.state.position
        self.output.status(
            position.current_value if position else None,
            self.state.next_index,
            self._sync_elapsed(),
        )

    def report_records(self) -> None:
        """Print all perfect numbers found so far."""
        self.output.records(self.state.records)

    def checkpoint(self) -> bool:
        """
        Save the current state.

        Returns:
            True if the checkpoint was written, False if it failed (the
            search state in memory is unaffected either way)
        """
        self._sync_elapsed()
        try:
            self.store.save(self.state)
        except CheckpointWriteError as e:
            self.output.error(str(e))
            self.output.warning(
                "Data will be lost if the program ends before a successful save."
            )
            return False
        self._last_save_elapsed = self.state.elapsed_seconds
        self.output.info(f"Context saved to {self.store.path}.")
        return True

    # ==================== Main Loop ====================

    def run(self) -> SearchOutcome:
        """
        Search until the range is exhausted or the operator stops it.

        Returns:
            SearchOutcome describing how the run ended

        Raises:
            CapacityExceededError: If the result store overflows
        """
        self.clock.start()
        self.logger.info(
            f"Search starting at {self.state.position or 'exhausted range'}, "
            f"{len(self.state.records)} perfect number(s) known, hi_power limit {self.max_hi_power}"
        )

        try:
            outcome = self._loop()
        except KeyboardInterrupt:
            self.logger.info("Search interrupted by user")
            self.output.blank()
            outcome = SearchOutcome.CHECKPOINTED if self.checkpoint() else SearchOutcome.CANCELLED

        self._sync_elapsed()
        if outcome.finished:
            self.output.elapsed(self.state.elapsed_seconds)
            self.output.success("Done.")
            try:
                self.checkpoint()
            except KeyboardInterrupt:
                self.logger.info("Final checkpoint interrupted by user")
                self.output.blank()
                self.output.warning(
                    f"Final save interrupted; {self.store.path} still holds the previous checkpoint."
                )
        elif outcome is SearchOutcome.CANCELLED:
            self.output.elapsed(self.state.elapsed_seconds)
            self.output.info("Cancelled.", log=True)

        self.logger.info(
            f"Search ended ({outcome.value}) after {self.candidates_tested} candidate(s); "
            f"found {len(self.discovered)} new perfect number(s)"
        )
        return outcome

    def _loop(self) -> SearchOutcome:
        while True:
            outcome = self._service_requests()
            if outcome is not None:
                return outcome

            position = self.state.position
            if position is None:
                return SearchOutcome.COMPLETED
            if position.hi_power >= self.max_hi_power:
                return SearchOutcome.LIMIT_REACHED

            value = position.current_value
            if is_perfect(value, position.max_divisor):
                self._record(value)

            self.state.position = advance(position)
            self.candidates_tested += 1

    def _service_requests(self) -> Optional[SearchOutcome]:
        """Handle pending operator commands, checkpoints and exits."""
        if self.commands is not None:
            command = self.commands.poll()
            while command is not None:
                self.console.handle(command, self)
                command = self.commands.poll()

        if self._checkpoint_requested:
            self._checkpoint_requested = False
            self.checkpoint()
        elif self._autosave_due():
            self.logger.info("Autosave interval reached")
            self.checkpoint()

        if self._exit_requested is None:
            return None

        save = self._exit_requested
        self._exit_requested = None
        if not save:
            return SearchOutcome.CANCELLED
        if self.checkpoint():
            return SearchOutcome.CHECKPOINTED
        self.output.warning("Search continues. Use Q to quit without saving.")
        return None

    def _autosave_due(self) -> bool:
        if not self.autosave_seconds:
            return False
        return self.clock.update() - self._last_save_elapsed >= self.autosave_seconds

    def _record(self, value: int) -> None:
        # Legacy checkpoints restart the scan but keep their results
        if value in self.state.records:
            self.logger.debug(f"Skipping already recorded perfect number {value}")
            return

        self.state.records.append(value)
        self.discovered.append(value)
        self.output.discovery(len(self.state.records), value, self._sync_elapsed())
        self.output.bell()

    def _sync_elapsed(self) -> float:
        self.state.elapsed_seconds = self.clock.update()
        return self.state.elapsed_seconds
