"""Logging setup: console handler plus an optional time-rotated file handler."""

import logging
import secrets
import sys
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from authcore.logging.formatters import ConsoleFormatter, JSONFormatter

DEFAULT_LOG_DIR = Path("logs")
DEFAULT_ROTATION_WHEN = "midnight"
DEFAULT_ROTATION_INTERVAL = 1
DEFAULT_BACKUP_COUNT = 7
DEFAULT_CONSOLE_LEVEL = logging.INFO
DEFAULT_FILE_LEVEL = logging.DEBUG

PLAIN_FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"

# HTTP client internals log every connection at DEBUG
NOISY_LOGGERS = [
    "aiohttp",
    "aiohttp.access",
    "aiohttp.client",
    "urllib3",
    "asyncio",
]


def get_log_file_path(log_dir: Path, name: str = "connectors") -> Path:
    """
    Log file path inside a per-day folder.

    Structure: {log_dir}/{YYYY-MM-DD}/{name}_{MMDD}_{HHMM}.log
    """
    now = datetime.now()
    return log_dir / now.strftime("%Y-%m-%d") / f"{name}_{now:%m%d}_{now:%H%M}.log"


def _file_handler(
    log_file: Path,
    level: int,
    json_format: bool,
    rotation_when: str,
    rotation_interval: int,
    backup_count: int,
) -> TimedRotatingFileHandler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        log_file,
        when=rotation_when,
        interval=rotation_interval,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(PLAIN_FILE_FORMAT))
    return handler


def setup_logging(
    name: str = "connectors",
    log_dir: Path | None = None,
    json_format: bool = True,
    console_level: int = DEFAULT_CONSOLE_LEVEL,
    file_level: int = DEFAULT_FILE_LEVEL,
    rotation_when: str = DEFAULT_ROTATION_WHEN,
    rotation_interval: int = DEFAULT_ROTATION_INTERVAL,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    suppress_noisy: bool = True,
    log_to_stdout: bool = False,
) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        name: Logger name and log file prefix
        log_dir: Directory for log files (default: ./logs)
        json_format: JSON lines in the log file instead of plain text
        console_level: Console handler level
        file_level: File handler level; also the console level when log_to_stdout is set
        rotation_when: TimedRotatingFileHandler 'when' ('midnight', 'H', 'M', ...)
        rotation_interval: Rotation interval in units of rotation_when
        backup_count: Rotated files to keep
        suppress_noisy: Raise HTTP client loggers to WARNING
        log_to_stdout: Log everything to stdout and write no file (containers)

    Returns:
        The logger named `name`
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ConsoleFormatter())
    console_handler.setLevel(file_level if log_to_stdout else console_level)
    root_logger.addHandler(console_handler)

    log_file = None
    if not log_to_stdout:
        log_file = get_log_file_path(log_dir or DEFAULT_LOG_DIR, name)
        root_logger.addHandler(
            _file_handler(log_file, file_level, json_format, rotation_when, rotation_interval, backup_count)
        )

    if suppress_noisy:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger = logging.getLogger(name)
    logger.debug(f"Logging initialized ({log_file or 'stdout only'})")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger; use __name__ so records carry the module path."""
    return logging.getLogger(name)


def generate_trace_id() -> str:
    """
    Trace identifier for correlating the log lines of one flow.

    Format: t-YYYYMMDD-HHMMSS-XXXX where XXXX is random hex.
    """
    return f"t-{datetime.now():%Y%m%d-%H%M%S}-{secrets.token_hex(2)}"
