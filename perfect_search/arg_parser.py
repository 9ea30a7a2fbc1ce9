#!/usr/bin/env python3
"""
Argument parsing for the perfect number search client.
"""
import argparse

from .search_state import WORD_BITS
from .typed_config import AppConfig


def parse_hi_power(value: str) -> int:
    """
    Parse the exclusive hi_power limit.

    Raises:
        argparse.ArgumentTypeError: If value is not an integer in 4..32
    """
    try:
        result = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value}") from e
    if not 3 < result <= WORD_BITS:
        raise argparse.ArgumentTypeError(f"hi_power limit must be in 4..{WORD_BITS}: {value}")
    return result


def parse_non_negative_float(value: str) -> float:
    """Parse a number of seconds (>= 0)."""
    try:
        result = float(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid number: {value}") from e
    if result < 0:
        raise argparse.ArgumentTypeError(f"Value must be >= 0: {value}")
    return result


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the perfect number client."""
    parser = argparse.ArgumentParser(
        description='Find the perfect numbers below 2^32 by trial division, with checkpoint/resume',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
While running, type a letter and press Enter:
  T  status        S  status and summary
  C  save, continue   X  save and exit   Q  quit without saving
Ctrl+C saves and exits.

Examples:
  # Start or resume the search
  perfect-numbers

  # Ignore the existing checkpoint and start over
  perfect-numbers --fresh

  # Unattended run, saving every 10 minutes
  perfect-numbers --no-input --autosave 600

  # Inspect a checkpoint file
  perfect-numbers --show-checkpoint --checkpoint PerfectNumbers.dat
        """
    )

    # Configuration
    parser.add_argument('--config', default='perfect.yaml', help='Config file path (default: perfect.yaml)')
    parser.add_argument('--checkpoint', help='Checkpoint file path (overrides config)')

    # Search control
    parser.add_argument('--fresh', action='store_true',
                        help='Ignore any existing checkpoint and start from the first candidate')
    parser.add_argument('--max-hi-power', type=parse_hi_power,
                        help=f'Stop before candidates 2^h - 2^l with h >= this value (4..{WORD_BITS})')
    parser.add_argument('--autosave', type=parse_non_negative_float,
                        help='Save a checkpoint every N seconds of compute time (0 = disabled)')
    parser.add_argument('--show-checkpoint', action='store_true',
                        help='Print the contents of the checkpoint file and exit')

    # Console
    parser.add_argument('--no-input', action='store_true', help='Do not read operator commands from stdin')
    parser.add_argument('--no-bell', action='store_true', help='Do not ring the bell on discoveries')
    parser.add_argument('-q', '--quiet', action='store_true', help='Suppress non-error console output')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log at DEBUG level')

    return parser


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """
    Apply command-line overrides on top of file configuration.

    Args:
        config: Configuration loaded from YAML
        args: Parsed command-line arguments

    Returns:
        The same config object, updated in place
    """
    if args.checkpoint:
        config.search.checkpoint_file = args.checkpoint
    if args.max_hi_power is not None:
        config.search.max_hi_power = args.max_hi_power
    if args.autosave is not None:
        config.search.autosave_seconds = args.autosave
    if args.no_input:
        config.search.listen_stdin = False
    if args.no_bell:
        config.search.bell = False
    if args.quiet:
        config.output.quiet = True
    if args.verbose:
        config.logging.level = 'DEBUG'
    return config
