#!/usr/bin/env python3
"""
Exception types for the perfect number search.

Checkpoint read/write problems and result-capacity overflow each get their
own type so callers can apply the right recovery policy:
- CheckpointUnavailableError: treated as "no prior state"
- MalformedCheckpointError: aborts startup
- CheckpointWriteError: reported, search keeps running
- CapacityExceededError: aborts the search
"""


class PerfectSearchError(Exception):
    """Base class for all search errors."""


class CheckpointError(PerfectSearchError):
    """Base class for checkpoint I/O errors."""

    def __init__(self, message: str, path=None):
        self.path = path
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message)


class CheckpointUnavailableError(CheckpointError):
    """Checkpoint file exists but cannot be opened for reading."""


class MalformedCheckpointError(CheckpointError):
    """Checkpoint file is truncated or internally inconsistent."""


class CheckpointWriteError(CheckpointError):
    """Checkpoint could not be written completely."""


class CapacityExceededError(PerfectSearchError):
    """More perfect numbers found than the result store can hold."""
