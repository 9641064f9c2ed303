"""Append-only daily log files.

One plain text file per day, ``<log_dir>/<yyyy-MM-dd>.txt``, one line per
despawn. Files are never rewritten, only appended to or deleted by
retention.
"""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Callable

from .models import DAY_FORMAT, LogLine

logger = logging.getLogger(__name__)

LOG_SUFFIX = ".txt"


class LogWriter:
    """Writes despawn lines to the current day's file."""

    def __init__(self, log_dir: Path, clock: Callable[[], datetime] = datetime.now):
        """Initialize the writer.

        Args:
            log_dir: Directory holding the day files (created if missing)
            clock: Returns local "now"; the day file is picked per append
        """
        self.log_dir = log_dir
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        # Serializes appends if the host ever delivers events on several threads
        self._lock = threading.Lock()

    def path_for(self, day: date) -> Path:
        """Path of the log file for a given day."""
        return self.log_dir / f"{day.strftime(DAY_FORMAT)}{LOG_SUFFIX}"

    def current_path(self) -> Path:
        return self.path_for(self._clock().date())

    def append(self, line: LogLine | str, ts: datetime | None = None) -> bool:
        """Append one line to the day file.

        The file is opened and closed within the call.

        Args:
            line: Formatted line
            ts: Instant the line was stamped with; picks the day file so a
                line stamped before midnight stays in that day. Defaults to now.

        Returns:
            True on success, False if the write failed (already logged)
        """
        path = self.path_for(ts.date()) if ts is not None else self.current_path()
        with self._lock:
            try:
                with open(path, "a", encoding="utf-8") as f:
                    f.write(f"{line}\n")
            except OSError as e:
                logger.error(f"Failed to write to log file {path}: {e}")
                return False
        return True

    def log_files(self) -> list[Path]:
        """All day files currently in the log directory."""
        if not self.log_dir.exists():
            return []
        return sorted(p for p in self.log_dir.glob(f"*{LOG_SUFFIX}") if p.is_file())

    def enforce_retention(self, max_files: int) -> Path | None:
        """Delete the oldest day file if there are more than max_files.

        Removes at most one file per call, the one with the smallest
        modification time.

        Returns:
            The deleted path, or None if nothing was deleted
        """
        files = self.log_files()
        if len(files) <= max_files:
            return None

        try:
            oldest = min(files, key=lambda p: p.stat().st_mtime)
        except OSError as e:
            logger.error(f"Failed to inspect log files in {self.log_dir}: {e}")
            return None

        try:
            oldest.unlink()
        except OSError as e:
            logger.error(f"Failed to delete old log file {oldest.name}: {e}")
            return None

        logger.info(f"Deleted oldest log file: {oldest.name}")
        return oldest

    def read_day(self, day: date) -> list[str]:
        """Lines of one day's file, empty if there is none."""
        path = self.path_for(day)
        if not path.exists():
            return []
        return path.read_text(encoding="utf-8").splitlines()
