import logging
import sys

from league_scheduler.core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers kept quieter than the application
LIBRARY_LOG_LEVELS = {
    "uvicorn": logging.WARNING,
    "fastapi": logging.WARNING,
    "celery": logging.INFO,
    "kombu": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "postgrest": logging.WARNING,
}


def resolve_log_level(level=None) -> int:
    """Accept a level number or name; fall back to LOG_LEVEL, then INFO."""
    if level is None:
        level = LOG_LEVEL
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(log_level=None):
    log_level = resolve_log_level(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root_logger.addHandler(console_handler)

    for name, level in LIBRARY_LOG_LEVELS.items():
        logging.getLogger(name).setLevel(level)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Module name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
