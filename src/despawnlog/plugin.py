"""Plugin lifecycle - wires config, writer, handler and reconciler together."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Sequence

from .causes import SyntheticCause
from .config import CONFIG_FILENAME, RetentionConfig, load_config
from .handler import DespawnEventHandler
from .host import HostRuntime
from .logwriter import LogWriter
from .reconciler import RestartReconciler

logger = logging.getLogger(__name__)

LOG_DIRNAME = "logs"
DIAGNOSTIC_LOG_FILENAME = "despawnlog.log"


def configure_logging(data_dir: Path, level: int = logging.INFO) -> None:
    """Send diagnostics to <data_dir>/despawnlog.log and stderr."""
    data_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.FileHandler(data_dir / DIAGNOSTIC_LOG_FILENAME, encoding="utf-8"),
            logging.StreamHandler(sys.stderr),
        ],
    )


@dataclass(frozen=True)
class CommandResult:
    """Acknowledgement sent back to whoever issued a command."""

    success: bool
    message: str


class DespawnLogger:
    """The plugin: one instance per host process.

    Call enable() at host startup and disable() at host shutdown. The host
    adapter forwards notifications to ``self.handler``.
    """

    def __init__(
        self,
        host: HostRuntime,
        data_dir: Path,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.host = host
        self.data_dir = data_dir
        self._clock = clock
        self.config: RetentionConfig | None = None
        self.writer: LogWriter | None = None
        self.handler: DespawnEventHandler | None = None
        self.reconciler: RestartReconciler | None = None

    @property
    def enabled(self) -> bool:
        return self.handler is not None

    def enable(self) -> None:
        """Load config, apply retention once, then run the restart check."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.config = load_config(self.data_dir / CONFIG_FILENAME)
        self.writer = LogWriter(self.data_dir / LOG_DIRNAME, clock=self._clock)
        self.handler = DespawnEventHandler(self.config, self.writer, self.host, clock=self._clock)
        self.reconciler = RestartReconciler.in_directory(
            self.data_dir, self.config, self.host, self.writer, clock=self._clock
        )

        self.writer.enforce_retention(self.config.max_log_files)
        self.reconciler.on_startup()
        logger.info(
            f"DespawnLogger enabled (data_dir={self.data_dir}, "
            f"{len(self.config.loggable_entities)} loggable entity types)"
        )

    def disable(self) -> None:
        """Snapshot living entities for the next startup's restart check."""
        if self.reconciler is None:
            return
        self.reconciler.on_shutdown()

    def remove_entity(self, args: Sequence[str]) -> CommandResult:
        """Handle ``/removeentity <uuid>``: log and remove one entity."""
        if not args:
            return CommandResult(False, "Please provide an entity ID.")
        if self.handler is None:
            raise RuntimeError("DespawnLogger is not enabled")

        entity_id = args[0]
        entity = self.host.find_entity(entity_id)
        if entity is None or not entity.is_living:
            return CommandResult(False, "Entity not found.")

        self.handler.log_despawn(entity, SyntheticCause.COMMAND_KILL)
        entity.remove()
        return CommandResult(True, f"Entity {entity_id} removed.")
