"""
Logging setup for the deskew command.
Modules log through children of the package logger; this configures it.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from .config import DebugConfig


def setup_script_logging(
    script_name: str,
    config: Optional[DebugConfig] = None,
    verbose: bool = False,
) -> logging.Logger:
    """
    Set up logging for a script based on configuration.

    Console output goes to stderr; stdout is reserved for the per-file report.

    Args:
        script_name: Logger name, the package name so that module loggers inherit it
        config: Debug settings (log target and log file)
        verbose: Whether to enable verbose console output

    Returns:
        Configured logger instance
    """
    config = config or DebugConfig()

    # Create logger for this script
    logger = logging.getLogger(script_name)

    # Remove handlers left from an earlier setup
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    if config.log_target == "file":
        log_file = Path(config.log_file)

        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

        # Errors still reach the console; everything does when verbose
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if verbose else logging.ERROR)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console_handler)

        logger.setLevel(logging.DEBUG)
        logger.debug("Detailed logging to: %s", log_file)

    else:
        # Console logging only
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console_handler)
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    return logger
