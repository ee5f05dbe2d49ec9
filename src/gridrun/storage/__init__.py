"""Persistence boundary: repository protocols and their implementations."""

from gridrun.storage.base import BattleLogRepository, RunRepository, SnapshotRepository
from gridrun.storage.json_store import (
    JsonBattleLogRepository,
    JsonRunRepository,
    JsonSnapshotRepository,
)
from gridrun.storage.memory import (
    InMemoryBattleLogRepository,
    InMemoryRunRepository,
    InMemorySnapshotRepository,
)

__all__ = [
    "BattleLogRepository",
    "InMemoryBattleLogRepository",
    "InMemoryRunRepository",
    "InMemorySnapshotRepository",
    "JsonBattleLogRepository",
    "JsonRunRepository",
    "JsonSnapshotRepository",
    "RunRepository",
    "SnapshotRepository",
]
