"""Boundary to the host world runtime.

The core never imports host code. A host adapter exposes entities and a
scheduler through these protocols, and forwards lifecycle notifications
to DespawnEventHandler.

Restart reconciliation keys snapshots by ``unique_id``. It only works if
the host persists entity ids across a restart; a host that assigns new
ids on load will make every entity look lost.
"""

from __future__ import annotations

from typing import Callable, Iterable, Protocol, runtime_checkable


@runtime_checkable
class EntityRef(Protocol):
    """A live entity as seen through the host adapter."""

    @property
    def unique_id(self) -> object:
        """128-bit id; str() gives the canonical form."""
        ...

    @property
    def type_tag(self) -> str: ...

    @property
    def block_position(self) -> tuple[int, int, int]: ...

    @property
    def custom_name(self) -> str | None: ...

    @property
    def is_living(self) -> bool:
        """Whether the entity has the living capability (can die, has health)."""
        ...

    @property
    def is_dead(self) -> bool: ...

    @property
    def last_damage_cause(self) -> object | None:
        """Raw cause of the last damage taken, None if unknown."""
        ...

    def remove(self) -> None: ...


@runtime_checkable
class HostRuntime(Protocol):
    """Read access to the world plus the host's task scheduler."""

    def entities(self) -> Iterable[EntityRef]:
        """Every live entity across all worlds."""
        ...

    def find_entity(self, entity_id: str) -> EntityRef | None: ...

    def run_later(self, ticks: int, callback: Callable[[], None]) -> None:
        """Run callback on the main thread after the given number of ticks."""
        ...
