from __future__ import annotations

from pathlib import Path

import platformdirs
from loguru import logger

LOG_FILE_NAME = "loupe.log"
LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function} | {message} | {extra}"
)


def log_directory() -> Path:
    return Path(platformdirs.user_log_dir(appname="loupe", ensure_exists=True))


def setup_logger(level: str = "INFO", *, log_dir: Path | None = None) -> Path:
    """Send loguru output to a rotating file.

    The default stderr handler is removed since the TUI owns the terminal.
    Returns the log file path.
    """
    logger.remove()
    log_file = (log_dir or log_directory()) / LOG_FILE_NAME
    logger.add(
        str(log_file),
        level=level.upper(),
        format=LOG_FORMAT,
        rotation="10 MB",
        retention="7 days",
    )
    logger.debug(
        "Logger initialized", operation="setup_logger", log_file=str(log_file)
    )
    return log_file
