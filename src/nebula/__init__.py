"""Nebula - Markdown and NebulaXML document conversion engine.

Keeps authoring markup, rendered HTML and canonical NebulaXML views of a
document in step, with text-quote annotations layered on the render.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

__version__ = "0.1.0"


_HANDLER_NAME = "nebula"


def setup_logging(log_dir: Path | None = None, console_level: str = "INFO") -> Path:
    """Send ``nebula.*`` records to the console and a rotating file.

    Only the package logger is configured, so host applications keep their
    own root logging. Calling it again replaces the handlers installed by
    the previous call instead of stacking duplicates.

    Args:
        log_dir: Directory for log files; defaults to ``./logs``.
        console_level: Minimum level shown on the console.

    Returns:
        Path of the log file.
    """
    log_dir = log_dir or Path("logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"nebula.{os.getpid()}.log"

    package_logger = logging.getLogger(__name__)
    package_logger.setLevel(logging.DEBUG)
    for handler in list(package_logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            package_logger.removeHandler(handler)
            handler.close()

    # File handler - conversions log sizes at DEBUG (10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    # Console handler - stderr, so converted output on stdout stays clean
    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    for handler in (file_handler, console_handler):
        handler.set_name(_HANDLER_NAME)
        package_logger.addHandler(handler)

    package_logger.info("Logging configured. Log file: %s", log_file.absolute())
    return log_file
