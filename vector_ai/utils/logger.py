"""
Logging Configuration

Sets up the "vector_ai" logger with console output and daily-rotated log files.
Rotated logs are zipped to save disk space and pruned after the retention period.
"""

import logging
import logging.handlers
import os
import sys
import zipfile
from pathlib import Path
from typing import Optional

LOGGER_NAME = "vector_ai"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ZipRotatingFileHandler(logging.handlers.TimedRotatingFileHandler):
    """
    Midnight-rotating file handler that stores each rotated file as a .zip
    and keeps at most backupCount archives.
    """

    def __init__(self, filename, backupCount=30, encoding='utf-8', delay=True):
        super().__init__(
            filename=filename,
            when='midnight',
            interval=1,
            backupCount=backupCount,
            encoding=encoding,
            delay=delay
        )
        self.namer = self._zip_name
        self.rotator = self._zip_rotate

    @staticmethod
    def _zip_name(default_name: str) -> str:
        return f"{default_name}.zip"

    @staticmethod
    def _zip_rotate(source: str, dest: str):
        with zipfile.ZipFile(dest, 'w', zipfile.ZIP_DEFLATED) as zipf:
            zipf.write(source, Path(dest).stem)
        os.remove(source)

    def getFilesToDelete(self):
        """Prune old .zip archives, which the base class pattern does not match."""
        if self.backupCount <= 0:
            return []
        base = Path(self.baseFilename)
        archives = sorted(base.parent.glob(f"{base.name}.*.zip"))
        if len(archives) <= self.backupCount:
            return []
        return [str(path) for path in archives[:len(archives) - self.backupCount]]


def setup_logger(
    name: str = LOGGER_NAME,
    level: str = "INFO",
    log_dir: Optional[str] = None,
    log_to_console: bool = True,
    log_to_file: bool = True,
    retention_days: int = 30
) -> logging.Logger:
    """
    Configure the application logger.

    Args:
        name: Logger name
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files (default: logs/ in the project root)
        log_to_console: Whether to log to stdout
        log_to_file: Whether to write app.log and error.log
        retention_days: Number of zipped daily logs to keep

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_to_file:
        directory = Path(log_dir) if log_dir else Path(__file__).parent.parent.parent / "logs"
        directory.mkdir(parents=True, exist_ok=True)

        # All levels
        file_handler = ZipRotatingFileHandler(str(directory / "app.log"), backupCount=retention_days)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        # Errors only
        error_handler = ZipRotatingFileHandler(str(directory / "error.log"), backupCount=retention_days)
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        logger.addHandler(error_handler)

    return logger


def configure_from_settings(settings) -> logging.Logger:
    """Set up the application logger from Settings."""
    return setup_logger(
        level=settings.LOG_LEVEL,
        log_dir=settings.LOG_DIR,
        log_to_console=settings.LOG_TO_CONSOLE,
        log_to_file=settings.LOG_TO_FILE,
        retention_days=settings.LOG_RETENTION_DAYS
    )
