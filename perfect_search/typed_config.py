"""
Typed view of perfect.yaml.

Each YAML section maps onto a dataclass that checks its own values, so a
bad setting is reported when the file is loaded rather than mid-search.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Union

from .search_state import WORD_BITS

logger = logging.getLogger(__name__)


@dataclass
class SearchConfig:
    """Search and checkpoint configuration."""
    checkpoint_file: str = "PerfectNumbers.dat"
    max_hi_power: int = WORD_BITS  # exclusive; 32 covers the full 32-bit range
    bell: bool = True
    autosave_seconds: float = 0.0  # 0 = only save on request and at exit
    listen_stdin: bool = True

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not 3 < self.max_hi_power <= WORD_BITS:
            raise ValueError(f"max_hi_power must be in 4..{WORD_BITS}, got {self.max_hi_power}")
        if self.autosave_seconds < 0:
            raise ValueError(f"autosave_seconds must be >= 0, got {self.autosave_seconds}")


@dataclass
class LoggingConfig:
    """Logging configuration."""
    file: str = "data/logs/perfect_numbers.log"
    level: str = "INFO"

    def __post_init__(self):
        """Normalize and validate the level name."""
        self.level = str(self.level).upper()
        if not isinstance(logging.getLevelName(self.level), int):
            raise ValueError(f"Unknown logging level: {self.level}")

    def ensure_log_dir_exists(self) -> None:
        """Create log directory if it doesn't exist."""
        Path(self.file).parent.mkdir(parents=True, exist_ok=True)


@dataclass
class OutputConfig:
    """Console output configuration."""
    quiet: bool = False


@dataclass
class AppConfig:
    """
    Root configuration object containing all settings.

    Usage:
        config = TypedConfigLoader().load("perfect.yaml")
        print(config.search.checkpoint_file)
    """
    search: SearchConfig = field(default_factory=SearchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config back to dictionary format."""
        return {
            'search': {
                'checkpoint_file': self.search.checkpoint_file,
                'max_hi_power': self.search.max_hi_power,
                'bell': self.search.bell,
                'autosave_seconds': self.search.autosave_seconds,
                'listen_stdin': self.search.listen_stdin,
            },
            'logging': {
                'file': self.logging.file,
                'level': self.logging.level,
            },
            'output': {
                'quiet': self.output.quiet,
            },
        }


class TypedConfigLoader:
    """
    Builds an AppConfig from perfect.yaml (plus perfect.local.yaml).

    Missing keys take the dataclass defaults.

    Usage:
        loader = TypedConfigLoader()
        config = loader.load("perfect.yaml")
        print(config.search.max_hi_power)
    """

    def load(self, config_path: Union[str, Path]) -> AppConfig:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to configuration file

        Returns:
            Typed AppConfig instance

        Raises:
            FileNotFoundError: If the base config file doesn't exist
            ValueError: If a value fails validation
        """
        from .config_manager import ConfigManager

        manager = ConfigManager()
        raw_config = manager.load_config(config_path)

        return self.parse(raw_config)

    def parse(self, raw: Dict[str, Any]) -> AppConfig:
        """Parse raw dictionary into typed config."""
        return AppConfig(
            search=self._parse_search(raw.get('search') or {}),
            logging=self._parse_logging(raw.get('logging') or {}),
            output=self._parse_output(raw.get('output') or {}),
        )

    def _parse_search(self, raw: Dict[str, Any]) -> SearchConfig:
        """Parse search configuration."""
        return SearchConfig(
            checkpoint_file=str(raw.get('checkpoint_file', 'PerfectNumbers.dat')),
            max_hi_power=int(raw.get('max_hi_power', WORD_BITS)),
            bell=bool(raw.get('bell', True)),
            autosave_seconds=float(raw.get('autosave_seconds', 0)),
            listen_stdin=bool(raw.get('listen_stdin', True)),
        )

    def _parse_logging(self, raw: Dict[str, Any]) -> LoggingConfig:
        """Parse logging configuration."""
        return LoggingConfig(
            file=raw.get('file', 'data/logs/perfect_numbers.log'),
            level=raw.get('level', 'INFO'),
        )

    def _parse_output(self, raw: Dict[str, Any]) -> OutputConfig:
        """Parse output configuration."""
        return OutputConfig(
            quiet=bool(raw.get('quiet', False)),
        )
