"""
Operator interaction for a running search.

The search loop never blocks on the keyboard. A StdinListener thread reads
lines from the terminal and drops them into a CommandChannel; the loop
polls the channel before each candidate and only when something is
pending hands it to the OperatorConsole, which maps the command onto the
search's entry points.

Commands (first character, case-insensitive):
    T  status only
    S  summary: list of perfect numbers, then status
    C  save checkpoint and continue
    X  save checkpoint and exit
    Q  quit without saving
    anything else prints the menu
"""

import enum
import logging
import queue
import sys
import threading
from typing import TYPE_CHECKING, Optional, TextIO

from .user_output import UserOutput

if TYPE_CHECKING:
    from .search import PerfectNumberSearch

logger = logging.getLogger(__name__)


class Command(enum.Enum):
    STATUS = "T"
    SUMMARY = "S"
    CHECKPOINT = "C"
    CHECKPOINT_EXIT = "X"
    QUIT = "Q"
    HELP = "?"


def parse_command(text: str) -> Command:
    """
    Map operator input onto a Command.

    Only the first non-blank character counts; unknown or empty input
    maps to HELP.
    """
    stripped = text.strip()
    if not stripped:
        return Command.HELP
    key = stripped[0].upper()
    for command in Command:
        if command.value == key and command is not Command.HELP:
            return command
    return Command.HELP


class CommandChannel:
    """
    Thread-safe mailbox between the operator and the search loop.

    Usage:
        channel = CommandChannel()
        channel.submit("t")          # from any thread
        command = channel.poll()     # from the search loop, never blocks
    """

    def __init__(self):
        self._queue: "queue.Queue[Command]" = queue.Queue()

    def submit(self, text: str) -> Command:
        """Parse operator input and queue the resulting command."""
        command = parse_command(text)
        self._queue.put(command)
        return command

    def poll(self) -> Optional[Command]:
        """Return the next pending command, or None if there is none."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def pending(self) -> bool:
        return not self._queue.empty()


class StdinListener:
    """
    Background reader that forwards terminal lines to a CommandChannel.

    Runs as a daemon thread so it never keeps the process alive; stops at
    end of input.
    """

    def __init__(self, channel: CommandChannel, stream: Optional[TextIO] = None):
        self.channel = channel
        self.stream = stream or sys.stdin
        self._thread: Optional[threading.Thread] = None
        self.logger = logging.getLogger(f"{__name__}.StdinListener")

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="stdin-listener", daemon=True)
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        try:
            for line in self.stream:
                command = self.channel.submit(line)
                self.logger.debug(f"Operator command: {command.name}")
        except (OSError, ValueError) as e:
            # ValueError: stream closed underneath us at shutdown
            self.logger.debug(f"Stopped reading operator input: {e}")


class OperatorConsole:
    """
    Carries out operator commands against a running search.

    Each command is an explicit composition of search entry points:
        SUMMARY         = records + status
        CHECKPOINT      = status + save
        CHECKPOINT_EXIT = save + exit (the search keeps running if the save fails)
        QUIT            = exit without saving
    """

    def __init__(self, output: Optional[UserOutput] = None):
        self.output = output or UserOutput()

    def handle(self, command: Command, search: 'PerfectNumberSearch') -> None:
        logger.info(f"Handling operator command {command.name}")

        if command is Command.STATUS:
            search.report_status()

        elif command is Command.SUMMARY:
            search.report_records()
            search.report_status()

        elif command is Command.CHECKPOINT:
            search.report_status()
            search.checkpoint()

        elif command is Command.CHECKPOINT_EXIT:
            search.request_exit(save=True)

        elif command is Command.QUIT:
            search.request_exit(save=False)

        else:
            self.output.menu()
