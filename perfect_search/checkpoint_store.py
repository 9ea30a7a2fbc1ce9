"""
Binary checkpoint file for the perfect number search.

Since a full search runs for a long time, the complete context is saved to
a flat file for restoral and continuance.

File layout (little-endian, no padding):
    [0]       double   elapsed seconds
    [8]       uint16   number of perfect numbers found (0..32)
    [10]      uint32[] perfect numbers, ascending
    [10+4n]   uint8    hi_power of the next untested candidate
    [11+4n]   uint8    lo_power of the next untested candidate

A (0, 0) position marks a search that has exhausted the 32-bit range.
Files that end right after the perfect numbers come from versions before
1.15, which did not save the search position; they load with the position
reset to the first candidate.

Every stored value must be perfect and, when a position is saved, lie
below the position's candidate; anything else is a damaged file.
"""

import logging
import math
import os
import struct
from pathlib import Path
from typing import Optional, Union

from .candidates import initialize
from .errors import (
    CheckpointUnavailableError, CheckpointWriteError, MalformedCheckpointError
)
from .perfection import is_perfect, max_divisor
from .search_state import MAX_PERFECTS, PerfectNumberList, SearchPosition, SearchState

logger = logging.getLogger(__name__)


ELAPSED = struct.Struct('<d')
COUNT = struct.Struct('<H')
RECORD = struct.Struct('<I')
POSITION = struct.Struct('<BB')

EXHAUSTED_MARKER = (0, 0)


def encode_state(state: SearchState) -> bytes:
    """
    Serialize a search state into the checkpoint layout.

    Args:
        state: State to encode

    Returns:
        Checkpoint bytes
    """
    parts = [ELAPSED.pack(state.elapsed_seconds), COUNT.pack(len(state.records))]
    parts.extend(RECORD.pack(value) for value in state.records)
    if state.position is None:
        parts.append(POSITION.pack(*EXHAUSTED_MARKER))
    else:
        parts.append(POSITION.pack(state.position.hi_power, state.position.lo_power))
    return b''.join(parts)


def decode_state(data: bytes, source: Optional[Path] = None) -> SearchState:
    """
    Parse checkpoint bytes back into a search state.

    Args:
        data: Raw checkpoint contents
        source: File the bytes came from (used in error messages)

    Returns:
        Decoded SearchState

    Raises:
        MalformedCheckpointError: If any field is short or inconsistent
    """
    offset = 0

    if len(data) < offset + ELAPSED.size:
        raise MalformedCheckpointError("Cannot read elapsed time", source)
    (elapsed,) = ELAPSED.unpack_from(data, offset)
    offset += ELAPSED.size
    if not math.isfinite(elapsed) or elapsed < 0:
        raise MalformedCheckpointError(f"Invalid elapsed time {elapsed!r}", source)

    if len(data) < offset + COUNT.size:
        raise MalformedCheckpointError("Cannot read number of perfects found", source)
    (count,) = COUNT.unpack_from(data, offset)
    offset += COUNT.size
    if count > MAX_PERFECTS:
        raise MalformedCheckpointError(
            f"Number of perfects found ({count}) exceeds capacity ({MAX_PERFECTS})", source
        )

    if len(data) < offset + count * RECORD.size:
        raise MalformedCheckpointError("Cannot read perfect numbers", source)
    values = [RECORD.unpack_from(data, offset + i * RECORD.size)[0] for i in range(count)]
    offset += count * RECORD.size
    try:
        records = PerfectNumberList(values)
    except ValueError as e:
        raise MalformedCheckpointError(f"Invalid perfect numbers: {e}", source) from e
    for value in records:
        if not is_perfect(value, max_divisor(value)):
            raise MalformedCheckpointError(f"Invalid perfect numbers: {value} is not perfect", source)

    remaining = len(data) - offset
    if remaining == 0:
        logger.warning(
            f"Checkpoint {source or 'data'} has no search position; "
            "rescanning candidates from the start"
        )
        return SearchState(elapsed_seconds=elapsed, records=records, position=initialize())

    if remaining < POSITION.size:
        raise MalformedCheckpointError("Cannot read search position", source)
    if remaining > POSITION.size:
        raise MalformedCheckpointError(
            f"Unexpected {remaining - POSITION.size} trailing byte(s)", source
        )

    hi_power, lo_power = POSITION.unpack_from(data, offset)
    if (hi_power, lo_power) == EXHAUSTED_MARKER:
        position = None
    else:
        try:
            position = SearchPosition(hi_power, lo_power)
        except ValueError as e:
            raise MalformedCheckpointError(str(e), source) from e
        # records are found in candidate order, so all lie below the next one
        if records and records[-1] >= position.current_value:
            raise MalformedCheckpointError(
                f"Invalid perfect numbers: {records[-1]} is not below the search position {position}",
                source,
            )

    return SearchState(elapsed_seconds=elapsed, records=records, position=position)


class CheckpointStore:
    """
    Save and restore search state in a single checkpoint file.

    Saves go to a temporary file next to the checkpoint and are moved into
    place with os.replace, so an interrupted or failed save never damages
    the previous checkpoint.

    Usage:
        store = CheckpointStore("PerfectNumbers.dat")
        state = store.load() or SearchState.fresh()
        ...
        store.save(state)
    """

    def __init__(self, path: Union[str, Path] = "PerfectNumbers.dat"):
        self.path = Path(path)
        self.tmp_path = self.path.with_name(self.path.name + ".tmp")
        self.logger = logging.getLogger(f"{__name__}.CheckpointStore")

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, state: SearchState) -> None:
        """
        Write the state to the checkpoint file.

        Raises:
            CheckpointWriteError: If the file could not be written completely;
                the previous checkpoint (if any) is left in place
        """
        data = encode_state(state)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self.tmp_path.exists():
                self.logger.debug(f"Removing incomplete temp file: {self.tmp_path}")
                self.tmp_path.unlink()

            with open(self.tmp_path, 'xb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())

            os.replace(self.tmp_path, self.path)
        except OSError as e:
            self._discard_tmp()
            raise CheckpointWriteError(f"Cannot write checkpoint: {e}", self.path) from e

        self.logger.info(
            f"Saved checkpoint {self.path}: {len(state.records)} perfect number(s), "
            f"elapsed {state.elapsed_seconds:.3f}s, position "
            f"{'exhausted' if state.position is None else state.position}"
        )

    def load(self) -> Optional[SearchState]:
        """
        Read the checkpoint file.

        Returns:
            Restored SearchState, or None if there is no usable prior state

        Raises:
            MalformedCheckpointError: If the file is truncated or inconsistent
        """
        try:
            data = self._read_bytes()
        except CheckpointUnavailableError as e:
            self.logger.warning(f"{e}; starting from scratch")
            return None

        if data is None:
            self.logger.info(f"No checkpoint file at {self.path}; starting from scratch")
            return None

        state = decode_state(data, self.path)
        self.logger.info(
            f"Loaded checkpoint {self.path}: {len(state.records)} perfect number(s), "
            f"elapsed {state.elapsed_seconds:.3f}s"
        )
        return state

    def _read_bytes(self) -> Optional[bytes]:
        """Return file contents, None if missing, or raise if unreadable."""
        try:
            with open(self.path, 'rb') as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CheckpointUnavailableError(f"Cannot open checkpoint file: {e}", self.path) from e

    def _discard_tmp(self) -> None:
        try:
            self.tmp_path.unlink(missing_ok=True)
        except OSError as e:
            self.logger.warning(f"Could not remove temp file {self.tmp_path}: {e}")
