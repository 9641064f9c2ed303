"""Restart snapshots.

A snapshot maps entity id -> (type, "x,y,z") for every living entity at
one point in time. It is persisted as a flat YAML mapping::

    3f2b...-...: [ZOMBIE, "5,64,5"]
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

import yaml

from .host import EntityRef
from .models import EntityObservation, SnapshotRecord

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """A snapshot file could not be written, read or deleted."""


class Snapshot(Mapping[str, SnapshotRecord]):
    """Immutable id -> SnapshotRecord mapping."""

    def __init__(self, records: Mapping[str, SnapshotRecord] | None = None):
        self._records = MappingProxyType(dict(records or {}))

    @classmethod
    def capture(cls, entities: Iterable[EntityRef]) -> "Snapshot":
        """Snapshot the living entities among the given ones."""
        records = {}
        for entity in entities:
            if not entity.is_living:
                continue
            try:
                obs = EntityObservation.capture(entity)
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable entity in snapshot: {e}")
                continue
            records[obs.entity_id] = SnapshotRecord.from_observation(obs)
        return cls(records)

    def __getitem__(self, entity_id: str) -> SnapshotRecord:
        return self._records[entity_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"Snapshot({len(self)} entities)"

    def missing_from(self, other: "Snapshot") -> list[tuple[str, SnapshotRecord]]:
        """Entries present here but absent from other, in insertion order."""
        return [(eid, rec) for eid, rec in self._records.items() if eid not in other]

    def to_document(self) -> dict[str, list[str]]:
        return {eid: rec.to_pair() for eid, rec in self._records.items()}


def _parse_record(entity_id: str, value: object) -> SnapshotRecord | None:
    """Parse one persisted entry, None if it is malformed."""
    if isinstance(value, str):
        # Legacy "TYPE,x,y,z" single-string form
        type_tag, _, location = value.partition(",")
        value = [type_tag, location]

    if not isinstance(value, (list, tuple)) or len(value) < 2:
        logger.warning(f"Skipping snapshot entry {entity_id}: missing location")
        return None

    type_tag, location = value[0], value[1]
    if not type_tag or not location:
        logger.warning(f"Skipping snapshot entry {entity_id}: missing type or location")
        return None

    return SnapshotRecord(type_tag=str(type_tag), location=str(location))


class SnapshotStore:
    """One snapshot file on disk."""

    def __init__(self, path: Path):
        self.path = path

    def exists(self) -> bool:
        return self.path.exists()

    def write(self, snapshot: Snapshot) -> None:
        """Persist a snapshot, replacing any previous content.

        Raises:
            SnapshotError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                yaml.safe_dump(snapshot.to_document(), sort_keys=False),
                encoding="utf-8",
            )
        except (OSError, yaml.YAMLError) as e:
            raise SnapshotError(f"Failed to write snapshot {self.path.name}: {e}") from e

    def read(self) -> Snapshot:
        """Load a snapshot, skipping malformed entries.

        A missing file reads as an empty snapshot.

        Raises:
            SnapshotError: If the file exists but cannot be read or parsed
        """
        if not self.path.exists():
            return Snapshot()

        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise SnapshotError(f"Failed to read snapshot {self.path.name}: {e}") from e

        if raw is None:
            return Snapshot()
        if not isinstance(raw, dict):
            raise SnapshotError(f"Snapshot {self.path.name} is not a mapping")

        records = {}
        for entity_id, value in raw.items():
            record = _parse_record(str(entity_id), value)
            if record is not None:
                records[str(entity_id)] = record
        return Snapshot(records)

    def delete(self) -> bool:
        """Remove the file if present.

        Returns:
            True if a file was deleted
        """
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise SnapshotError(f"Failed to delete snapshot {self.path.name}: {e}") from e
        return True
