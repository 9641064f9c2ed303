"""Configuration loader.

Reads ``config.yml`` from the data directory, or writes and returns the
defaults when the file does not exist yet.

Config file format::

    restart-check-enabled: true
    chunk-unload-logging: true
    log-nametags: false
    max-log-files: 10
    loggable-entities:
      - ZOMBIE
      - VILLAGER
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yml"


class ConfigError(ValueError):
    """Raised when the config file exists but cannot be used."""


class RetentionConfig(BaseModel):
    """Process-wide settings, loaded once at startup and never mutated."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    restart_check_enabled: bool = Field(default=True, alias="restart-check-enabled")
    chunk_unload_logging: bool = Field(default=True, alias="chunk-unload-logging")
    log_nametags: bool = Field(default=False, alias="log-nametags")
    max_log_files: int = Field(default=10, ge=0, alias="max-log-files")
    loggable_entities: tuple[str, ...] = Field(default=(), alias="loggable-entities")

    def is_loggable(self, type_tag: str) -> bool:
        """Check whether despawns of this entity type are logged."""
        return type_tag in self.loggable_entities

    def to_document(self) -> dict:
        """Dump with the dashed keys used in config.yml."""
        data = self.model_dump(by_alias=True)
        data["loggable-entities"] = list(self.loggable_entities)
        return data


def write_default_config(path: Path) -> bool:
    """Write the default config document if none exists.

    Returns:
        True if a file was written, False if one was already there
    """
    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(RetentionConfig().to_document(), sort_keys=False),
        encoding="utf-8",
    )
    logger.info(f"Wrote default config to {path}")
    return True


def load_config(path: Path) -> RetentionConfig:
    """Load settings from a YAML file, falling back to defaults.

    Raises:
        ConfigError: If the file cannot be read, is not a YAML mapping,
            or holds values of the wrong type
    """
    if not path.exists():
        write_default_config(path)
        return RetentionConfig()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if raw is None:
        return RetentionConfig()
    if not isinstance(raw, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(raw).__name__}")

    # YAML parses an empty list entry as None
    if raw.get("loggable-entities") is None:
        raw.pop("loggable-entities", None)

    try:
        return RetentionConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e
