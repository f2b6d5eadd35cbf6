"""Process-wide logging configuration for the `caterflow` logger tree."""

import logging
import sys

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def config_configure_logging(log_level: str = "INFO") -> logging.Logger:
    """Attach a console handler to the package logger once.

    Args:
        log_level: Log level name applied to the package logger and its handler.

    Returns:
        logging.Logger: Configured `caterflow` package logger.

    Raises:
        ValueError: Raised when the level name is unknown.
    """

    resolved_level = logging.getLevelName(log_level.strip().upper())
    if not isinstance(resolved_level, int):
        raise ValueError(f"unsupported log_level={log_level}")

    logger = logging.getLogger("caterflow")
    logger.setLevel(resolved_level)
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(resolved_level)
    console_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(console_handler)
    return logger
