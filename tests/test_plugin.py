"""End-to-end tests for the plugin lifecycle."""

import os
from datetime import date, timedelta

import pytest

from despawnlog.plugin import DespawnLogger

from conftest import FakeEntity, FakeHost, today_lines


def write_config(data_dir, text):
    data_dir.mkdir(parents=True, exist_ok=True)
    (data_dir / "config.yml").write_text(text)


def test_enable_creates_layout(temp_data_dir, clock):
    plugin = DespawnLogger(FakeHost(), temp_data_dir, clock=clock)
    plugin.enable()

    assert plugin.enabled
    assert (temp_data_dir / "config.yml").exists()
    assert (temp_data_dir / "logs").is_dir()


def test_zombie_death_end_to_end(temp_data_dir, clock):
    write_config(temp_data_dir, "loggable-entities: [ZOMBIE]\nlog-nametags: false\n")
    host = FakeHost()
    plugin = DespawnLogger(host, temp_data_dir, clock=clock)
    plugin.enable()

    plugin.handler.on_entity_death(FakeEntity("ZOMBIE", block_position=(10, 64, -3), custom_name="Ed"))

    assert today_lines(plugin.writer) == [
        "[2025-03-14 15:09:26] ZOMBIE despawned: Cause=UNKNOWN, Location=[10, 64, -3]"
    ]


def test_restart_cycle(temp_data_dir, clock):
    write_config(temp_data_dir, "loggable-entities: [ZOMBIE]\n")
    kept = FakeEntity("ZOMBIE", block_position=(1, 1, 1))
    lost = FakeEntity("ZOMBIE", block_position=(5, 64, 5))

    first = DespawnLogger(FakeHost([kept, lost]), temp_data_dir, clock=clock)
    first.enable()
    first.disable()
    assert (temp_data_dir / "entities_before_shutdown.yml").exists()

    second = DespawnLogger(FakeHost([kept]), temp_data_dir, clock=clock)
    second.enable()

    assert today_lines(second.writer) == [
        "[2025-03-14 15:09:26] ZOMBIE was lost during restart at Location=5,64,5"
    ]
    assert not (temp_data_dir / "entities_before_shutdown.yml").exists()
    assert not (temp_data_dir / "entities_after_restart.yml").exists()


def test_enable_applies_retention_once(temp_data_dir, clock):
    write_config(temp_data_dir, "max-log-files: 2\n")
    logs = temp_data_dir / "logs"
    logs.mkdir()
    for i in range(4):
        path = logs / f"{date(2025, 1, 1) + timedelta(days=i)}.txt"
        path.write_text("x\n")
        os.utime(path, (1_000 + i, 1_000 + i))

    DespawnLogger(FakeHost(), temp_data_dir, clock=clock).enable()

    remaining = sorted(p.name for p in logs.glob("*.txt"))
    assert remaining == ["2025-01-02.txt", "2025-01-03.txt", "2025-01-04.txt"]


def test_disable_before_enable_is_noop(temp_data_dir, clock):
    DespawnLogger(FakeHost([FakeEntity("ZOMBIE")]), temp_data_dir, clock=clock).disable()
    assert not (temp_data_dir / "entities_before_shutdown.yml").exists()


class TestRemoveEntityCommand:
    @pytest.fixture
    def plugin(self, temp_data_dir, clock):
        write_config(temp_data_dir, "loggable-entities: [ZOMBIE]\nlog-nametags: true\n")
        plugin = DespawnLogger(FakeHost(), temp_data_dir, clock=clock)
        plugin.enable()
        return plugin

    def test_missing_argument(self, plugin):
        result = plugin.remove_entity([])
        assert not result.success
        assert result.message == "Please provide an entity ID."

    def test_unknown_id(self, plugin):
        result = plugin.remove_entity(["00000000-0000-0000-0000-000000000000"])
        assert not result.success
        assert result.message == "Entity not found."

    def test_non_living_entity_not_found(self, plugin):
        item = plugin.host.add(FakeEntity("ITEM", is_living=False))
        assert plugin.remove_entity([item.unique_id]).message == "Entity not found."
        assert not item.removed

    def test_removes_and_logs(self, plugin):
        zombie = plugin.host.add(FakeEntity("ZOMBIE", block_position=(3, 4, 5), custom_name="Zed"))

        result = plugin.remove_entity([zombie.unique_id])

        assert result.success
        assert result.message == f"Entity {zombie.unique_id} removed."
        assert zombie.removed
        assert today_lines(plugin.writer) == [
            "[2025-03-14 15:09:26] ZOMBIE permanently removed: Cause=Command, "
            "Location=[3, 4, 5], Nametag='Zed'"
        ]
        assert plugin.remove_entity([zombie.unique_id]).message == "Entity not found."


def test_zero_max_log_files_starts_and_prunes(temp_data_dir, clock):
    write_config(temp_data_dir, "max-log-files: 0\n")
    logs = temp_data_dir / "logs"
    logs.mkdir()
    (logs / "2025-01-01.txt").write_text("x\n")

    plugin = DespawnLogger(FakeHost(), temp_data_dir, clock=clock)
    plugin.enable()

    assert plugin.enabled
    assert plugin.config.max_log_files == 0
    assert list(logs.glob("*.txt")) == []
