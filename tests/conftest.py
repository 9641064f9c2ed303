"""Shared test fixtures and helpers for despawnlog tests."""

import tempfile
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pytest

from despawnlog.config import RetentionConfig
from despawnlog.logwriter import LogWriter


FIXED_NOW = datetime(2025, 3, 14, 15, 9, 26)


# --- Fakes for the host runtime ---


@dataclass
class FakeEntity:
    """Stand-in for a host entity reference."""

    type_tag: str
    block_position: tuple[int, int, int] = (0, 64, 0)
    custom_name: str | None = None
    is_living: bool = True
    is_dead: bool = False
    last_damage_cause: object | None = None
    unique_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    removed: bool = False

    def remove(self) -> None:
        self.removed = True


class FakeHost:
    """In-memory host: a flat entity list and a manual tick scheduler."""

    def __init__(self, entities=None):
        self._entities = list(entities or [])
        self.scheduled: list[tuple[int, object]] = []

    def entities(self):
        return [e for e in self._entities if not e.removed]

    def find_entity(self, entity_id):
        for entity in self.entities():
            if str(entity.unique_id) == entity_id:
                return entity
        return None

    def run_later(self, ticks, callback):
        self.scheduled.append((ticks, callback))

    def tick(self):
        """Run everything that was scheduled."""
        pending, self.scheduled = self.scheduled, []
        for _, callback in pending:
            callback()

    def add(self, entity):
        self._entities.append(entity)
        return entity


# --- Fixtures ---


@pytest.fixture
def temp_data_dir():
    """Provide a temporary plugin data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock():
    """A clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def writer(temp_data_dir, clock):
    return LogWriter(temp_data_dir / "logs", clock=clock)


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def zombie_config():
    """Only zombies are loggable, nametags off."""
    return RetentionConfig(loggable_entities=("ZOMBIE",))


# --- Helper Functions (not fixtures) ---


def today_lines(writer: LogWriter) -> list[str]:
    """Lines in the day file for FIXED_NOW."""
    return writer.read_day(FIXED_NOW.date())
