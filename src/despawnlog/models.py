"""Core data models for the despawn logger.

Uses Pydantic v2 for validation. All models are frozen: observations are
captured once and discarded, snapshot records are write-once, and log
lines are never mutated after formatting.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from .host import EntityRef

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DAY_FORMAT = "%Y-%m-%d"


def format_timestamp(ts: datetime) -> str:
    """Render a log timestamp (local server time, second precision)."""
    return ts.strftime(TIMESTAMP_FORMAT)


class BlockPosition(BaseModel):
    """Integer block coordinates of an entity."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    z: int

    def bracketed(self) -> str:
        """Format as it appears in despawn lines: ``[x, y, z]``."""
        return f"[{self.x}, {self.y}, {self.z}]"

    def compact(self) -> str:
        """Format as stored in snapshots: ``x,y,z``."""
        return f"{self.x},{self.y},{self.z}"


class EntityObservation(BaseModel):
    """What we know about an entity at the moment it was observed."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    type_tag: str
    position: BlockPosition
    display_name: str | None = None
    cause: Any = None  # raw host signal or SyntheticCause, passed through untouched

    @classmethod
    def capture(cls, ref: "EntityRef", cause: Any = None) -> "EntityObservation":
        """Read the attributes off a live host entity."""
        x, y, z = ref.block_position
        return cls(
            entity_id=str(ref.unique_id),
            type_tag=str(ref.type_tag),
            position=BlockPosition(x=x, y=y, z=z),
            display_name=ref.custom_name or None,
            cause=cause,
        )


class SnapshotRecord(BaseModel):
    """Reduced observation kept in a restart snapshot (type + location only)."""

    model_config = ConfigDict(frozen=True)

    type_tag: str
    location: str  # "x,y,z"

    @classmethod
    def from_observation(cls, obs: EntityObservation) -> "SnapshotRecord":
        return cls(type_tag=obs.type_tag, location=obs.position.compact())

    def to_pair(self) -> list[str]:
        """Serialize as the ``[type, location]`` pair written to disk."""
        return [self.type_tag, self.location]


class LogLine(BaseModel):
    """A single formatted line of the daily despawn log."""

    model_config = ConfigDict(frozen=True)

    text: str

    def __str__(self) -> str:
        return self.text

    @classmethod
    def despawn(
        cls,
        ts: datetime,
        subject: str,
        outcome: str,
        cause_label: str,
        position: BlockPosition,
        nametag: str | None = None,
    ) -> "LogLine":
        """Build a despawn line.

        Format: ``[ts] SUBJECT outcome: Cause=label, Location=[x, y, z][, Nametag='name']``
        """
        text = (
            f"[{format_timestamp(ts)}] {subject} {outcome}: "
            f"Cause={cause_label}, Location={position.bracketed()}"
        )
        if nametag:
            text += f", Nametag='{nametag}'"
        return cls(text=text)

    @classmethod
    def lost_during_restart(cls, ts: datetime, record: SnapshotRecord) -> "LogLine":
        """Build the line for an entity that vanished across a restart."""
        return cls(
            text=(
                f"[{format_timestamp(ts)}] {record.type_tag} "
                f"was lost during restart at Location={record.location}"
            )
        )
