"""Main entry point for minishell.

This module provides the entry point for running the interactive interpreter.
"""

import logging
import sys

from minishell.config import FAREWELL_MESSAGE, LOG_LEVEL
from minishell.executor import SpawnError
from minishell.shell import Shell

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger("minishell")


def main():
    """Entry point for the minishell CLI."""
    try:
        Shell().run()
    except SpawnError as e:
        logger.error(f"Cannot create processes, terminating: {e}")
        print(f"Error - fork failed: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received. Shutting down...")
        print()
        print(FAREWELL_MESSAGE)


if __name__ == "__main__":
    main()
