import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from . import settings

CONSOLE_FORMAT = "%(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _import_log_file(log_dir: Path | None = None) -> Path:
    log_dir = settings.LOG_DIR if log_dir is None else Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / settings.LOG_FILENAME


def setup_logger(
    name: str | None = None, log_level: int = logging.INFO, log_dir: Path | None = None
) -> logging.Logger:
    """
    Console output for the operator plus a rotating import log on disk.
    Calling it again on a configured logger only updates the level.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    file_handler = RotatingFileHandler(
        _import_log_file(log_dir),
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(file_handler)

    return logger
