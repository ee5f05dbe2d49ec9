"""JSON-file repositories.

Each store is one JSON document holding every record, written with
``model_dump(mode="json")`` and read back with ``model_validate``.  Reads
are served from memory; every mutation rewrites the file.  Good enough for
scripts and local play, not for concurrent writers.
"""

from __future__ import annotations

import dataclasses
import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from gridrun.core.models import Run, Snapshot, new_id
from gridrun.storage.memory import (
    InMemoryBattleLogRepository,
    InMemoryRunRepository,
    InMemorySnapshotRepository,
)

if TYPE_CHECKING:
    from gridrun.battle.log import BattleLog


def _write(path: Path, key: str, records: list[dict]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({key: records}, indent=2))


def _read(path: Path, key: str) -> list[dict]:
    if not path.exists():
        return []
    return json.loads(path.read_text()).get(key, [])


class JsonRunRepository(InMemoryRunRepository):
    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        for raw in _read(self.path, "runs"):
            run = Run.model_validate(raw)
            self._runs[run.id] = run

    def _flush(self) -> None:
        _write(self.path, "runs", [r.model_dump(mode="json") for r in self._runs.values()])

    def insert(self, run: Run) -> Run:
        stored = super().insert(run)
        self._flush()
        return stored

    def save(self, run: Run) -> Run:
        stored = super().save(run)
        self._flush()
        return stored


class JsonSnapshotRepository(InMemorySnapshotRepository):
    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        for raw in _read(self.path, "snapshots"):
            snapshot = Snapshot.model_validate(raw)
            self._snapshots[snapshot.id] = snapshot

    def _flush(self) -> None:
        _write(
            self.path, "snapshots",
            [s.model_dump(mode="json") for s in self._snapshots.values()],
        )

    def insert(self, snapshot: Snapshot) -> Snapshot:
        stored = super().insert(snapshot)
        self._flush()
        return stored

    def delete(self, snapshot_ids: Sequence[str]) -> int:
        removed = super().delete(snapshot_ids)
        if removed:
            self._flush()
        return removed

    def delete_older_than(self, cutoff: datetime) -> int:
        # delete() already flushes
        return super().delete_older_than(cutoff)


class JsonBattleLogRepository(InMemoryBattleLogRepository):
    """Appends battle logs to a JSON document (write-only from the run loop)."""

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._raw: list[dict] = _read(self.path, "battle_logs")

    def save(self, log: BattleLog) -> str:
        if log.id is None:
            log.id = new_id()
        records = self._raw + [dataclasses.asdict(log)]
        _write(self.path, "battle_logs", records)
        self._raw = records
        return super().save(log)
