"""
Main entry point for trimkit.

This script configures the logger for start-up, then hands over to the CLI,
which parses the command-line arguments, reconfigures logging to the requested
level and runs the chosen sub-command.
"""

import sys

from loguru import logger

from trimkit.cli import main
from trimkit.config.common import LOGGER_FORMAT

# Configure the logger for initial setup.
# The level is overridden by --log-level once the arguments are parsed.
logger.remove()
log_level = "DEBUG" if __debug__ else "INFO"
logger.add(sys.stderr, level=log_level, format=LOGGER_FORMAT)


if __name__ == "__main__":
    sys.exit(main())
