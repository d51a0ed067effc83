"""
Optional log file sink.

When enabled, every projectshell log record is appended to a dated file
``projectshell-YYYY-MM-DD.log`` in the chosen directory.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"

_handler: logging.FileHandler | None = None


def log_file_path(log_dir: Path | str, day: date | None = None) -> Path:
    day = day or date.today()
    return Path(log_dir) / f"projectshell-{day.isoformat()}.log"


def enable_file_logging(log_dir: Path | str, level: int = logging.INFO) -> Path:
    """
    Attach a file handler to the ``projectshell`` logger.

    Calling it again replaces the previous handler.

    Returns:
        Path of the log file being written.
    """
    global _handler
    disable_file_logging()

    path = log_file_path(log_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(level)

    package_logger = logging.getLogger("projectshell")
    package_logger.addHandler(handler)
    if package_logger.level == logging.NOTSET or package_logger.level > level:
        package_logger.setLevel(level)
    _handler = handler
    return path


def disable_file_logging() -> None:
    """Detach and close the file handler, if any."""
    global _handler
    if _handler is None:
        return
    logging.getLogger("projectshell").removeHandler(_handler)
    _handler.close()
    _handler = None
