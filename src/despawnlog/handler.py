"""Lifecycle notification handling.

Receives death/removal/unload/command notifications from the host adapter,
filters by the configured allow-list, classifies the cause and writes one
line per removal.

A death followed by a generic removal for the same entity is logged twice;
whether both fire is up to the host.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable

from .causes import SyntheticCause, classify
from .config import RetentionConfig
from .host import EntityRef, HostRuntime
from .logwriter import LogWriter
from .models import EntityObservation, LogLine

logger = logging.getLogger(__name__)

BULK_KILL_COMMANDS = frozenset({"kill", "minecraft:kill"})

# The command's effects are applied after the command event is delivered
BULK_KILL_SCAN_DELAY_TICKS = 1


def is_bulk_kill_command(command_line: str) -> bool:
    """Check whether a command line is a bulk entity kill."""
    parts = command_line.strip().lstrip("/").split()
    return bool(parts) and parts[0].lower() in BULK_KILL_COMMANDS


class DespawnEventHandler:
    """Turns host lifecycle notifications into despawn log lines."""

    def __init__(
        self,
        config: RetentionConfig,
        writer: LogWriter,
        host: HostRuntime,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config
        self.writer = writer
        self.host = host
        self._clock = clock

    # ─────────────────────────────────────────────────────────────────────────
    # Notifications
    # ─────────────────────────────────────────────────────────────────────────

    def on_entity_death(self, entity: EntityRef) -> LogLine | None:
        """An entity died; its last damage cause is the removal cause."""
        return self.log_despawn(entity, entity.last_damage_cause)

    def on_entity_remove(self, entity: EntityRef, cause: object | None = None) -> LogLine | None:
        """An entity left the world for any reason, dead or not."""
        return self.log_despawn(entity, cause)

    def on_chunk_unload(self, entities: Iterable[EntityRef]) -> list[LogLine]:
        """A region is unloading; its living entities go with it."""
        lines = []
        for entity in entities:
            if not entity.is_living:
                continue
            line = self.log_despawn(entity, SyntheticCause.UNLOAD_MARKER)
            if line is not None:
                lines.append(line)
        return lines

    def on_command(self, command_line: str) -> bool:
        """An operator ran a command.

        For bulk kills, schedules a scan for dead entities once the host
        has applied the command.

        Returns:
            True if a scan was scheduled
        """
        if not is_bulk_kill_command(command_line):
            return False
        logger.debug(f"Bulk kill command seen, scanning in {BULK_KILL_SCAN_DELAY_TICKS} tick(s)")
        self.host.run_later(BULK_KILL_SCAN_DELAY_TICKS, self.scan_dead_entities)
        return True

    def scan_dead_entities(self) -> list[LogLine]:
        """Log every entity the host now reports as dead, cause Command."""
        lines = []
        for entity in self.host.entities():
            if not entity.is_dead:
                continue
            line = self.log_despawn(entity, SyntheticCause.COMMAND_KILL)
            if line is not None:
                lines.append(line)
        return lines

    # ─────────────────────────────────────────────────────────────────────────
    # Formatting
    # ─────────────────────────────────────────────────────────────────────────

    def log_despawn(self, entity: EntityRef, cause: object | None) -> LogLine | None:
        """Filter, classify, format and write a single removal.

        Returns:
            The line handed to the writer, or None if the removal was discarded
        """
        if not self.config.is_loggable(str(entity.type_tag)):
            return None

        obs = EntityObservation.capture(entity, cause)
        classification = classify(obs.cause, chunk_unload_logging=self.config.chunk_unload_logging)
        if classification is None:
            return None

        now = self._clock()
        nametag = obs.display_name if self.config.log_nametags else None
        line = LogLine.despawn(
            ts=now,
            subject=obs.type_tag,
            outcome=classification.outcome,
            cause_label=classification.label,
            position=obs.position,
            nametag=nametag,
        )
        self.writer.append(line, ts=now)
        return line
