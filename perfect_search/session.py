#!/usr/bin/env python3
"""
Session setup shared by the client entry point and tests.

A SearchSession loads configuration, sets up logging and console output,
and builds the checkpoint store and search loop from them.
"""
import argparse
import logging
from pathlib import Path
from typing import Optional, TextIO, Union

from .arg_parser import apply_overrides
from .checkpoint_store import CheckpointStore
from .commands import CommandChannel, OperatorConsole
from .errors import MalformedCheckpointError
from .search import PerfectNumberSearch
from .search_state import SearchState
from .timing import ElapsedClock, format_elapsed
from .typed_config import AppConfig, TypedConfigLoader
from .user_output import UserOutput


class SearchSession:
    """Wires configuration, logging, output and persistence together."""

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        config: Optional[AppConfig] = None,
        args: Optional[argparse.Namespace] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ):
        """
        Initialize session.

        Args:
            config_path: YAML config file; ignored if config is given
            config: Already-built configuration
            args: Parsed command-line arguments to apply over the config
            stdout: Stream for user output (default: sys.stdout)
            stderr: Stream for error output (default: sys.stderr)

        Raises:
            ValueError: If the configuration is invalid
            yaml.YAMLError: If the configuration file cannot be parsed
        """
        self._config_path = config_path
        self._missing_config = False
        if config is None:
            config = self._load_config(config_path)
        if args is not None:
            config = apply_overrides(config, args)
        self.config = config

        self.setup_logging()
        if self._missing_config:
            self.logger.warning(f"Configuration file not found: {config_path}; using defaults")

        self.output = UserOutput(
            stdout=stdout,
            stderr=stderr,
            quiet=self.config.output.quiet,
            bell_enabled=self.config.search.bell,
        )
        self.store = CheckpointStore(self.config.search.checkpoint_file)

    def _load_config(self, config_path: Optional[Union[str, Path]]) -> AppConfig:
        if config_path is None:
            return AppConfig()
        try:
            return TypedConfigLoader().load(config_path)
        except FileNotFoundError:
            self._missing_config = True
            return AppConfig()

    def setup_logging(self) -> None:
        """Set up logging configuration."""
        log_config = self.config.logging
        log_config.ensure_log_dir_exists()

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)

        logging.basicConfig(
            level=getattr(logging, log_config.level),
            format='%(asctime)s - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler(log_config.file),
                console_handler
            ]
        )
        self.logger = logging.getLogger(__name__)

    def restore_state(self, fresh: bool = False) -> SearchState:
        """
        Load prior progress from the checkpoint, or start a new search.

        Args:
            fresh: Ignore any existing checkpoint

        Raises:
            MalformedCheckpointError: If the checkpoint exists but is damaged
        """
        if fresh:
            if self.store.exists():
                self.output.warning(
                    f"Ignoring existing checkpoint {self.store.path}; it will be overwritten on the next save"
                )
            return SearchState.fresh()

        state = self.store.load()
        if state is None:
            self.output.info(f"No usable context file '{self.store.path}'.")
            self.output.info("Starting from scratch...")
            return SearchState.fresh()
        return state

    def create_search(self, state: SearchState,
                      commands: Optional[CommandChannel] = None) -> PerfectNumberSearch:
        """Build a search loop for the given state using this session's settings."""
        search_config = self.config.search
        return PerfectNumberSearch(
            state=state,
            store=self.store,
            clock=ElapsedClock(state.elapsed_seconds),
            output=self.output,
            commands=commands if commands is not None else CommandChannel(),
            console=OperatorConsole(self.output),
            max_hi_power=search_config.max_hi_power,
            autosave_seconds=search_config.autosave_seconds,
        )

    def show_checkpoint(self) -> int:
        """
        Print the checkpoint contents.

        Returns:
            Process exit status: 0 if shown, 1 if missing or damaged
        """
        try:
            state = self.store.load()
        except MalformedCheckpointError as e:
            self.output.error(str(e))
            return 1
        if state is None:
            self.output.error(f"No checkpoint file at {self.store.path}", log=False)
            return 1

        self.output.section(f"Checkpoint {self.store.path}")
        self.output.item("Elapsed time", format_elapsed(state.elapsed_seconds))
        if state.position is None:
            self.output.item("Position", "search complete")
        else:
            self.output.item("Position", str(state.position))
        self.output.item("Perfect numbers found", len(state.records))
        self.output.records(state.records)
        return 0
