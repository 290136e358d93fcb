"""Logging configuration for taskman."""
import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOG_FILE_NAME = "taskman.log"

# Top-level modules and packages that belong to the application.
_APP_LOGGERS = (
    "app",
    "business_logic",
    "task_codec",
    "task_storage",
    "ui",
)


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - allow application logs
    - suppress Textual and other third-party noise unless ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.split(".", 1)[0] in _APP_LOGGERS:
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    log_dir: Union[str, Path],
    file_level: Union[int, str] = logging.DEBUG,
    console_level: Optional[Union[int, str]] = None,
) -> Path:
    """
    Configure logging with:
    - File handler: full logs for debugging
    - Console handler: only when console_level is given, since the TUI owns
      the terminal while it runs

    Call this once, before the first log call.

    Args:
        log_dir: Directory for the log file (created if missing)
        file_level: Level for the file handler
        console_level: Level for stderr output, or None to disable it

    Returns:
        Path of the log file
    """
    log_dir = Path(log_dir).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    if console_level is not None:
        ch = logging.StreamHandler(sys.stderr)
        ch.setLevel(console_level)
        ch.setFormatter(fmt)
        ch.addFilter(_ConsoleNoiseFilter())
        root.addHandler(ch)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)

    return log_file
