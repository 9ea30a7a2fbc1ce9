#!/usr/bin/env python3
"""
Perfect Number Client - find the perfect numbers below 2^32

Tests every candidate of the form 2^h - 2^l by trial division. Progress
is checkpointed to a flat binary file so a multi-day run can be stopped
and resumed:
- Type T, S, C, X or Q followed by Enter while it runs (anything else
  shows the menu)
- Ctrl+C saves a checkpoint and exits
- Rerunning resumes from the checkpoint (--fresh starts over)

Usage:
    python3 perfect_client.py [--config perfect.yaml] [--fresh] ...
"""

import sys
from typing import List, Optional

import yaml

from perfect_search import __version__
from perfect_search.arg_parser import create_parser
from perfect_search.commands import CommandChannel, StdinListener
from perfect_search.errors import CapacityExceededError, MalformedCheckpointError
from perfect_search.session import SearchSession


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the perfect number client."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        session = SearchSession(config_path=args.config, args=args)
    except (ValueError, yaml.YAMLError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 2

    output = session.output

    if args.show_checkpoint:
        return session.show_checkpoint()

    output.banner(__version__)

    try:
        state = session.restore_state(fresh=args.fresh)
    except MalformedCheckpointError as e:
        output.error(str(e))
        output.error("Refusing to resume from a damaged checkpoint. Move it aside or run with --fresh.")
        return 1

    position = state.position
    output.start_status(position.current_value if position else None, state.next_index)
    output.elapsed(state.elapsed_seconds)

    commands = CommandChannel()
    search = session.create_search(state, commands=commands)

    if session.config.search.listen_stdin:
        StdinListener(commands).start()
        output.info("Type T, S, C, X or Q and press Enter (any other key for the menu).")

    try:
        outcome = search.run()
    except CapacityExceededError as e:
        output.error(str(e))
        return 2

    output.section("Perfect numbers found:")
    output.records(search.records)
    session.logger.info(f"Exiting with outcome {outcome.value}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
