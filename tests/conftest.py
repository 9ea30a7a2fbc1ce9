"""Shared fixtures for perfect number search tests."""
import io
import sys
from pathlib import Path

import pytest
import yaml

# Add repository root to path so tests run without installing the package
sys.path.insert(0, str(Path(__file__).parent.parent))

from perfect_search.user_output import UserOutput


@pytest.fixture
def output():
    """UserOutput writing into in-memory streams, bell disabled."""
    return UserOutput(stdout=io.StringIO(), stderr=io.StringIO(), bell_enabled=False)


@pytest.fixture
def checkpoint_path(tmp_path):
    return tmp_path / "PerfectNumbers.dat"


@pytest.fixture
def config_file(tmp_path):
    """Write a perfect.yaml that keeps all files inside tmp_path."""
    def _write(**search_overrides):
        search = {
            'checkpoint_file': str(tmp_path / "PerfectNumbers.dat"),
            'bell': False,
            'listen_stdin': False,
        }
        search.update(search_overrides)
        config = {
            'search': search,
            'logging': {'file': str(tmp_path / "logs" / "perfect.log"), 'level': 'INFO'},
        }
        path = tmp_path / "perfect.yaml"
        path.write_text(yaml.safe_dump(config), encoding='utf-8')
        return path
    return _write
