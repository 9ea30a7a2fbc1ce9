"""
Tests for the binary checkpoint store.

Tests cover:
- Exact byte layout
- Save/load of search state, including exhausted searches
- Files written without a search position
- Truncated and inconsistent files
- Failed saves leaving the previous checkpoint intact
"""
import struct
from unittest.mock import patch

import pytest

from perfect_search.checkpoint_store import CheckpointStore, decode_state, encode_state
from perfect_search.errors import CheckpointWriteError, MalformedCheckpointError
from perfect_search.search_state import PerfectNumberList, SearchPosition, SearchState


def make_state(elapsed=12.25, values=(6, 28), position=SearchPosition(5, 1)):
    return SearchState(
        elapsed_seconds=elapsed,
        records=PerfectNumberList(values),
        position=position,
    )


@pytest.fixture
def store(checkpoint_path):
    return CheckpointStore(checkpoint_path)


class TestLayout:
    def test_encode_layout(self):
        data = encode_state(make_state(elapsed=1.5))
        expected = struct.pack('<dH', 1.5, 2) + struct.pack('<II', 6, 28) + bytes([5, 1])
        assert data == expected
        assert len(data) == 8 + 2 + 2 * 4 + 2

    def test_encode_exhausted(self):
        data = encode_state(make_state(position=None))
        assert data[-2:] == b'\x00\x00'

    def test_empty_records(self):
        data = encode_state(make_state(values=(), position=SearchPosition(3, 2)))
        assert data == struct.pack('<dH', 12.25, 0) + bytes([3, 2])


class TestSaveLoad:
    @pytest.mark.parametrize("values,position", [
        ((), SearchPosition(3, 2)),
        ((6, 28), SearchPosition(5, 1)),
        ((6, 28, 496, 8128, 33550336), SearchPosition(26, 25)),
        ((6, 28, 496, 8128, 33550336), None),
    ])
    def test_load_returns_saved_state(self, store, values, position):
        state = make_state(values=values, position=position)
        store.save(state)
        assert store.load() == state

    def test_exhausted_search(self, store):
        state = make_state(values=(6, 28, 496, 8128, 33550336), position=None)
        store.save(state)
        loaded = store.load()
        assert loaded.position is None
        assert loaded.exhausted

    def test_double_save_is_byte_identical(self, store, checkpoint_path):
        state = make_state()
        store.save(state)
        first = checkpoint_path.read_bytes()
        store.save(state)
        assert checkpoint_path.read_bytes() == first

    def test_missing_file(self, store):
        assert not store.exists()
        assert store.load() is None

    def test_unreadable_file_means_no_prior_state(self, checkpoint_path):
        checkpoint_path.mkdir()
        assert CheckpointStore(checkpoint_path).load() is None

    def test_stale_temp_file_replaced(self, store):
        store.tmp_path.write_bytes(b'garbage')
        store.save(make_state())
        assert not store.tmp_path.exists()
        assert store.load() == make_state()

    def test_creates_parent_directory(self, tmp_path):
        store = CheckpointStore(tmp_path / "nested" / "dir" / "ctx.dat")
        store.save(make_state())
        assert store.load() == make_state()

    def test_file_without_position_restarts_scan(self, store, checkpoint_path):
        checkpoint_path.write_bytes(struct.pack('<dHII', 99.0, 2, 6, 28))
        loaded = store.load()
        assert loaded.elapsed_seconds == 99.0
        assert loaded.records.values == (6, 28)
        assert loaded.position == SearchPosition(3, 2)


class TestMalformed:
    @pytest.mark.parametrize("data,message", [
        (b'', "elapsed time"),
        (struct.pack('<d', 1.0), "number of perfects"),
        (struct.pack('<dHI', 1.0, 2, 6), "perfect numbers"),
        (struct.pack('<dHI', 1.0, 1, 6) + b'\x05', "search position"),
        (struct.pack('<dHI', 1.0, 1, 6) + b'\x05\x01\x00', "trailing"),
        (struct.pack('<dH', 1.0, 33) + b'\x00' * (33 * 4 + 2), "capacity"),
        (struct.pack('<dHII', 1.0, 2, 28, 6) + b'\x05\x01', "ascending"),
        (struct.pack('<dH', 1.0, 0) + b'\x03\x05', "search position"),
        (struct.pack('<dH', -1.0, 0) + b'\x03\x02', "elapsed time"),
        (struct.pack('<dHII', 1.0, 2, 6, 500) + b'\x0a\x09', "500 is not perfect"),
        (struct.pack('<dHII', 1.0, 2, 6, 500), "500 is not perfect"),
        (struct.pack('<dH', 1.0, 32) + struct.pack('<32I', *range(1, 33)) + b'\x1f\x01', "1 is not perfect"),
        (struct.pack('<dHII', 1.0, 2, 6, 28) + b'\x05\x02', "28 is not below the search position"),
        (struct.pack('<dHI', 1.0, 1, 496) + b'\x05\x01', "496 is not below the search position"),
    ])
    def test_decode_errors(self, data, message):
        with pytest.raises(MalformedCheckpointError) as exc_info:
            decode_state(data)
        assert message in str(exc_info.value)

    def test_load_reports_path(self, store, checkpoint_path):
        checkpoint_path.write_bytes(b'\x00\x01')
        with pytest.raises(MalformedCheckpointError) as exc_info:
            store.load()
        assert str(checkpoint_path) in str(exc_info.value)


class TestSaveFailure:
    def test_failed_sync_discards_temp_file(self, store, checkpoint_path):
        store.save(make_state())
        before = checkpoint_path.read_bytes()

        with patch('perfect_search.checkpoint_store.os.fsync', side_effect=OSError("I/O error")):
            with pytest.raises(CheckpointWriteError) as exc_info:
                store.save(make_state(values=(6, 28, 496), position=SearchPosition(10, 9)))

        assert "I/O error" in str(exc_info.value)
        assert checkpoint_path.read_bytes() == before
        assert not store.tmp_path.exists()

    def test_failed_replace_keeps_previous_checkpoint(self, store, checkpoint_path):
        old = make_state(values=(6,), position=SearchPosition(5, 3))
        store.save(old)
        before = checkpoint_path.read_bytes()

        with patch('perfect_search.checkpoint_store.os.replace', side_effect=OSError("disk full")):
            with pytest.raises(CheckpointWriteError) as exc_info:
                store.save(make_state())

        assert "disk full" in str(exc_info.value)
        assert checkpoint_path.read_bytes() == before
        assert not store.tmp_path.exists()

    def test_unwritable_location(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")
        store = CheckpointStore(blocker / "ctx.dat")
        with pytest.raises(CheckpointWriteError):
            store.save(make_state())
