"""
Logging setup for the layout scripts.
"""

from pathlib import Path
from typing import Iterable, Optional
import logging
import sys

LOG_FORMATS = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "json": '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}',
}

# Third-party loggers that flood DEBUG output while rendering previews and files
NOISY_LOGGERS = ("matplotlib", "PIL", "h5py")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_style: str = "detailed",
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> logging.Logger:
    """
    Route layout logs to stdout and, optionally, a file.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL), any case
        log_file: Extra file handler target; parent directories are created
        format_style: One of LOG_FORMATS; unknown styles fall back to detailed
        quiet: Logger names held at WARNING or above whatever ``level`` is

    Returns:
        The configured root logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMATS.get(format_style, LOG_FORMATS["detailed"]))

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    for name in quiet:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    return logging.getLogger()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
