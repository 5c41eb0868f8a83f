"""
Logging configuration for the catalog pipeline.

Uses loguru for all catalog logs. httpx and httpcore log each request through
the standard logging module; they are held at WARNING so the PostgREST and
gallery traffic does not drown the pipeline's own messages.
"""

import logging
import os
import sys
from pathlib import Path

from loguru import logger

from catalog.config import settings

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

# Standard-library loggers of the HTTP stack
_NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    level: str | None = None,
    log_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "1 week",
    json_logs: bool | None = None,
) -> None:
    """
    Configure catalog logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR); defaults to LOG_LEVEL
        log_file: Optional file sink; defaults to LOG_FILE
        rotation: Log rotation setting (e.g., "10 MB", "1 day")
        retention: Log retention setting (e.g., "1 week", "10 files")
        json_logs: Emit one JSON object per line instead of the colored format
    """
    level = (level or settings.pipeline.log_level).upper()
    log_file = log_file or settings.pipeline.log_file
    json_logs = settings.pipeline.log_json if json_logs is None else json_logs

    logger.remove()

    if json_logs:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=_CONSOLE_FORMAT, colorize=True)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=level,
            format=_FILE_FORMAT,
            serialize=json_logs,
            rotation=rotation,
            retention=retention,
            compression="gz",
        )

    http_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    logger.debug(f"Logging configured: level={level} json={json_logs}")


if os.environ.get("DISABLE_LOGGING") != "1":
    setup_logging()
