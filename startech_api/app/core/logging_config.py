"""
Logging configuration for the application.

Two kinds of output are configured here:

* the application log, set up by ``setup_logging`` on the root logger
  with a console handler and, when ``LOG_FILE`` is set, a file handler;
* the activity file log, set up by ``setup_activity_log`` on the
  ``startech.activity`` logger.  Each record is one JSON line in
  ``activity-<YYYY-MM-DD>.log`` and the file changes with the UTC day.

Files are appended to and never rotated or cleaned up; point the paths
at a location managed by logrotate or your container runtime if you
need that.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

ACTIVITY_LOGGER_NAME = "startech.activity"
ACTIVITY_FILE_PREFIX = "activity-"
ACTIVITY_FILE_SUFFIX = ".log"


def activity_file_name(day: str) -> str:
    return f"{ACTIVITY_FILE_PREFIX}{day}{ACTIVITY_FILE_SUFFIX}"


def _utc_day() -> str:
    return datetime.now(timezone.utc).date().isoformat()


class DailyActivityFileHandler(logging.FileHandler):
    """Append records to ``activity-<day>.log`` inside ``directory``.

    The stream is opened lazily and reopened on the first record of a new
    UTC day.
    """

    def __init__(self, directory: str) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.day = _utc_day()
        super().__init__(self.directory / activity_file_name(self.day), encoding="utf-8", delay=True)

    def emit(self, record: logging.LogRecord) -> None:
        day = _utc_day()
        if day != self.day:
            if self.stream:
                self.stream.close()
                self.stream = None
            self.day = day
            self.baseFilename = str((self.directory / activity_file_name(day)).resolve())
        super().emit(record)


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure root logger.

    If no handlers are attached to the root logger, attach a
    console handler and optionally a file handler.  The root
    logger's level is set based on the provided ``level``.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive.
    logfile : Optional[str]
        Path to the application log file (``LOG_FILE``).  If omitted, no
        file handler is added.
    """
    logger = logging.getLogger()
    if logger.handlers:
        # Already configured (tests build several apps in one process).
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if logfile:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)


def setup_activity_log(directory: Optional[str]) -> logging.Logger:
    """Point the activity logger at ``directory``.

    Handlers from a previous call are closed and replaced, so the most
    recently created app decides where activity lines go.  With an empty
    ``directory`` the logger is left without handlers and drops records.
    """
    logger = logging.getLogger(ACTIVITY_LOGGER_NAME)
    logger.propagate = False
    logger.setLevel(logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    if directory:
        handler = DailyActivityFileHandler(directory)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    else:
        logger.addHandler(logging.NullHandler())
    return logger
