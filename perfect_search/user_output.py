"""
Console messages for the perfect number search.

Everything the operator reads (banner, status, discoveries, menu, errors)
is printed here; the log file gets the significant events. Tests pass
StringIO streams to capture the text.
"""

import logging
import sys
from typing import Any, Iterable, Optional, TextIO

from .timing import format_elapsed


class UserOutput:
    """
    Prints search messages to stdout and errors to stderr.

    Quiet mode silences everything except errors.

    Usage:
        output = UserOutput()
        output.banner("1.15.0")
        output.start_status(4, 1)
        output.discovery(1, 6, 0.001)
        output.error("Cannot write checkpoint")
    """

    def __init__(
        self,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        quiet: bool = False,
        bell_enabled: bool = True,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize output handler.

        Args:
            stdout: Output stream for normal messages (default: sys.stdout)
            stderr: Output stream for errors (default: sys.stderr)
            quiet: If True, suppress all non-error output
            bell_enabled: If False, bell() is a no-op
            logger: Optional logger for debug messages
        """
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.quiet = quiet
        self.bell_enabled = bell_enabled
        self.logger = logger or logging.getLogger(__name__)

    def _print(self, message: str = "", end: str = "\n") -> None:
        if not self.quiet:
            print(message, file=self.stdout, end=end, flush=True)

    def info(self, message: str, log: bool = False) -> None:
        """
        Print informational message to user.

        Args:
            message: Message to display
            log: If True, also log to info logger
        """
        self._print(message)
        if log:
            self.logger.info(message)

    def success(self, message: str, log: bool = True) -> None:
        """Print success message to user."""
        self._print(message)
        if log:
            self.logger.info(message)

    def warning(self, message: str, log: bool = True) -> None:
        """Print warning message to user."""
        self._print(f"Warning: {message}")
        if log:
            self.logger.warning(message)

    def error(self, message: str, log: bool = True) -> None:
        """
        Print error message to user (always shown, even in quiet mode).

        Args:
            message: Error message to display
            log: If True, also log to error logger
        """
        print(f"Error: {message}", file=self.stderr, flush=True)
        if log:
            self.logger.error(message)

    def section(self, title: str) -> None:
        """Print a section header."""
        self._print(f"\n{title}")

    def item(self, label: str, value: Any, indent: int = 2) -> None:
        """Print a labeled item (key-value pair)."""
        self._print(f"{' ' * indent}{label}: {value}")

    def blank(self) -> None:
        """Print a blank line."""
        self._print()

    # ==================== Search Messages ====================

    def banner(self, version: str) -> None:
        """Print the startup banner."""
        self._print(f"PerfectNumbers -- perfect number generator, v{version}")
        self._print()

    def start_status(self, current_value: Optional[int], next_index: int) -> None:
        """Print where the search starts or resumes."""
        if current_value is None:
            self.info(f"Search already complete, {next_index - 1} perfect number(s) found", log=True)
        else:
            self.info(f"Currently at {current_value}, working on perfect #{next_index}", log=True)

    def status(self, current_value: Optional[int], next_index: int, seconds: float) -> None:
        """Print computation status and elapsed time."""
        if current_value is None:
            self._print(f"Search complete, {next_index - 1} perfect number(s) found.")
        else:
            self._print(f"Currently at {current_value}, working on perfect #{next_index}.")
        self.elapsed(seconds)

    def elapsed(self, seconds: float) -> None:
        """Print elapsed compute time."""
        self._print(f"Elapsed time: {format_elapsed(seconds)}.")

    def discovery(self, index: int, value: int, seconds: float) -> None:
        """Announce a newly found perfect number."""
        message = f"Perfect number #{index} is {value}."
        self._print(f"{message} ", end="")
        self.elapsed(seconds)
        self.logger.info(f"{message} Elapsed {seconds:.3f}s")

    def records(self, values: Iterable[int]) -> None:
        """List the perfect numbers found so far."""
        values = list(values)
        if not values:
            self._print("No perfect numbers found yet.")
            return
        for index, value in enumerate(values, start=1):
            self._print(f"#{index} = {value}")

    def menu(self) -> None:
        """Print the operator menu."""
        self._print()
        self._print("Perfect Numbers Menu:")
        self._print("    T - Display elapsed Time/computation status only")
        self._print("    S - Display status and Summary")
        self._print("    C - Save context and Continue")
        self._print("    X - Save context and eXit")
        self._print("    Q - Quit without saving context")
        self._print("Enter your choice (then press Enter): ")

    def bell(self) -> None:
        """Sound the terminal bell."""
        if self.bell_enabled:
            self._print("\a", end="")
