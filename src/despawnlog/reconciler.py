"""Detection of entities lost across a restart.

On shutdown, every living entity is written to the "before" snapshot.
On the next startup, the live set is written to the "after" snapshot and
every id present before but missing after is logged as lost. Both files
are then deleted, so running the startup step twice never double-logs.
If the after snapshot cannot be written, nothing is diffed and the before
file stays for the next startup to retry.

States per process:
    IDLE -> SNAPSHOTTING_BEFORE_SHUTDOWN -> IDLE
    IDLE -> SNAPSHOTTING_AFTER_RESTART -> DIFFING -> CLEANUP -> IDLE
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable

from .config import RetentionConfig
from .host import HostRuntime
from .logwriter import LogWriter
from .models import LogLine
from .snapshot import Snapshot, SnapshotError, SnapshotStore

logger = logging.getLogger(__name__)

BEFORE_SHUTDOWN_FILENAME = "entities_before_shutdown.yml"
AFTER_RESTART_FILENAME = "entities_after_restart.yml"


class ReconcilerState(Enum):
    IDLE = "idle"
    SNAPSHOTTING_BEFORE_SHUTDOWN = "snapshotting_before_shutdown"
    SNAPSHOTTING_AFTER_RESTART = "snapshotting_after_restart"
    DIFFING = "diffing"
    CLEANUP = "cleanup"


class RestartReconciler:
    """Two-phase snapshot/diff across a process restart."""

    def __init__(
        self,
        config: RetentionConfig,
        host: HostRuntime,
        writer: LogWriter,
        before_store: SnapshotStore,
        after_store: SnapshotStore,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config
        self.host = host
        self.writer = writer
        self.before_store = before_store
        self.after_store = after_store
        self._clock = clock
        self.state = ReconcilerState.IDLE

    @classmethod
    def in_directory(
        cls,
        data_dir: Path,
        config: RetentionConfig,
        host: HostRuntime,
        writer: LogWriter,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "RestartReconciler":
        """Build a reconciler using the standard snapshot file names."""
        return cls(
            config=config,
            host=host,
            writer=writer,
            before_store=SnapshotStore(data_dir / BEFORE_SHUTDOWN_FILENAME),
            after_store=SnapshotStore(data_dir / AFTER_RESTART_FILENAME),
            clock=clock,
        )

    def on_shutdown(self) -> bool:
        """Record all living entities before the process goes down.

        Returns:
            True if the before snapshot was written
        """
        if not self.config.restart_check_enabled:
            return False

        self.state = ReconcilerState.SNAPSHOTTING_BEFORE_SHUTDOWN
        try:
            snapshot = Snapshot.capture(self.host.entities())
            self.before_store.write(snapshot)
        except SnapshotError as e:
            logger.error(f"Failed to save entities before shutdown: {e}")
            return False
        finally:
            self.state = ReconcilerState.IDLE

        logger.info(f"Saved {len(snapshot)} entities before shutdown.")
        return True

    def on_startup(self) -> list[LogLine]:
        """Compare the live set against the snapshot taken before shutdown.

        If the after snapshot cannot be written, the check is aborted and the
        before file is left in place for the next startup. Once the diff has
        been attempted, both files are deleted whatever its outcome.

        Returns:
            The lost-during-restart lines that were appended to the log
        """
        if not self.config.restart_check_enabled:
            return []
        if not self.before_store.exists():
            return []

        self.state = ReconcilerState.SNAPSHOTTING_AFTER_RESTART
        try:
            after = Snapshot.capture(self.host.entities())
            self.after_store.write(after)
        except SnapshotError as e:
            logger.error(f"Restart check aborted, keeping {self.before_store.path.name}: {e}")
            self.state = ReconcilerState.IDLE
            return []

        written: list[LogLine] = []
        try:
            self.state = ReconcilerState.DIFFING
            before = self.before_store.read()
            now = self._clock()
            for line in self.diff(before, after, now=now):
                if self.writer.append(line, ts=now):
                    written.append(line)
        except SnapshotError as e:
            logger.error(f"Restart check aborted: {e}")
        finally:
            self.state = ReconcilerState.CLEANUP
            self._cleanup()
            self.state = ReconcilerState.IDLE

        if written:
            logger.info(f"{len(written)} entities were lost during restart.")
        return written

    def diff(self, before: Snapshot, after: Snapshot, now: datetime | None = None) -> list[LogLine]:
        """Lines for every entity in before that is absent from after."""
        if now is None:
            now = self._clock()
        return [LogLine.lost_during_restart(now, record) for _, record in before.missing_from(after)]

    def _cleanup(self) -> None:
        for store in (self.before_store, self.after_store):
            try:
                store.delete()
            except SnapshotError as e:
                logger.error(str(e))
