"""Despawn logger for entities of a long-running world server.

Public API:
- DespawnLogger: plugin lifecycle (enable/disable, removal command)
- DespawnEventHandler: lifecycle notifications -> daily log lines
- RestartReconciler: detects entities lost across a restart
- LogWriter: append-only daily log files with retention
- classify: removal-cause classification
"""

from .causes import Classification, SyntheticCause, classify
from .config import ConfigError, RetentionConfig, load_config
from .handler import DespawnEventHandler
from .logwriter import LogWriter
from .plugin import CommandResult, DespawnLogger, configure_logging
from .reconciler import RestartReconciler

__all__ = [
    "Classification",
    "CommandResult",
    "ConfigError",
    "DespawnEventHandler",
    "DespawnLogger",
    "LogWriter",
    "RestartReconciler",
    "RetentionConfig",
    "SyntheticCause",
    "classify",
    "configure_logging",
    "load_config",
]
