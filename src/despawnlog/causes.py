"""Removal-cause classification.

Maps the raw cause the host attaches to a death/removal (or its absence)
to an outcome phrase and a cause label for the log line.

Precedence, first match wins:
1. COMMAND_KILL      -> "permanently removed", Command
2. UNLOAD_MARKER     -> "temporarily removed", ChunkUnload (or suppressed)
3. hostile cause     -> "permanently removed", Killed
4. natural cause     -> "despawned", Naturally
5. anything else     -> "despawned", raw cause text or UNKNOWN

The two cause tables are plain frozensets of host damage-cause names.
Adding a cause means adding it to a table, nothing else.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class SyntheticCause(Enum):
    """Causes we attach ourselves; never reported by the host."""

    COMMAND_KILL = "COMMAND_KILL"
    UNLOAD_MARKER = "UNLOAD_MARKER"


class Classification(NamedTuple):
    outcome: str
    label: str


PERMANENTLY_REMOVED = "permanently removed"
TEMPORARILY_REMOVED = "temporarily removed"
DESPAWNED = "despawned"

UNKNOWN_LABEL = "UNKNOWN"

HOSTILE_CAUSES = frozenset({
    "ENTITY_ATTACK",
    "ENTITY_SWEEP_ATTACK",
    "ENTITY_EXPLOSION",
    "PROJECTILE",
    "MAGIC",
    "SONIC_BOOM",
    "THORNS",
    "WITHER",
    "DRAGON_BREATH",
})

NATURAL_CAUSES = frozenset({
    "BLOCK_EXPLOSION",
    "CONTACT",
    "CRAMMING",
    "DROWNING",
    "DRYOUT",
    "FALL",
    "FALLING_BLOCK",
    "FIRE",
    "FIRE_TICK",
    "FLY_INTO_WALL",
    "FREEZE",
    "HOT_FLOOR",
    "LAVA",
    "LIGHTNING",
    "MELTING",
    "POISON",
    "STARVATION",
    "SUFFOCATION",
    "SUICIDE",
    "VOID",
    "WORLD_BORDER",
})


def cause_text(raw_cause: object | None) -> str | None:
    """Textual form of a host cause signal.

    Host enums are reduced to their member name, everything else to str().
    """
    if raw_cause is None:
        return None
    if isinstance(raw_cause, Enum):
        return raw_cause.name
    return str(raw_cause)


def classify(
    raw_cause: object | None,
    *,
    chunk_unload_logging: bool = True,
) -> Classification | None:
    """Classify a removal cause.

    Args:
        raw_cause: Host cause signal, a SyntheticCause, or None if absent
        chunk_unload_logging: Whether unload removals produce a line at all

    Returns:
        (outcome, label), or None if the removal must not be logged
    """
    if raw_cause is SyntheticCause.COMMAND_KILL:
        return Classification(PERMANENTLY_REMOVED, "Command")

    if raw_cause is SyntheticCause.UNLOAD_MARKER:
        if not chunk_unload_logging:
            return None
        return Classification(TEMPORARILY_REMOVED, "ChunkUnload")

    text = cause_text(raw_cause)
    if text is None:
        return Classification(DESPAWNED, UNKNOWN_LABEL)

    key = text.upper()
    if key in HOSTILE_CAUSES:
        return Classification(PERMANENTLY_REMOVED, "Killed")
    if key in NATURAL_CAUSES:
        return Classification(DESPAWNED, "Naturally")

    return Classification(DESPAWNED, text)
