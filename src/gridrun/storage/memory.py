"""In-memory repositories.

Models are deep-copied on the way in and out so callers never share mutable
state with the store, matching what a real database round trip gives you.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Sequence

from gridrun.core.models import Run, RunStatus, Snapshot, new_id, utcnow
from gridrun.errors import VersionConflict

if TYPE_CHECKING:
    from gridrun.battle.log import BattleLog


class InMemoryRunRepository:
    def __init__(self) -> None:
        self._runs: dict[str, Run] = {}

    def get(self, run_id: str) -> Run | None:
        run = self._runs.get(run_id)
        return run.model_copy(deep=True) if run is not None else None

    def find_by_player(
        self, player_id: str, status: RunStatus | None = None, limit: int | None = None,
    ) -> list[Run]:
        runs = [
            r for r in self._runs.values()
            if r.player_id == player_id and (status is None or r.status == status)
        ]
        # dict order is insertion order; reverse it so ties on created_at stay newest first
        runs = sorted(reversed(runs), key=lambda r: r.created_at, reverse=True)
        if limit is not None:
            runs = runs[:limit]
        return [r.model_copy(deep=True) for r in runs]

    def insert(self, run: Run) -> Run:
        if run.id in self._runs:
            raise ValueError(f"Run {run.id} already exists")
        self._runs[run.id] = run.model_copy(deep=True)
        return run.model_copy(deep=True)

    def save(self, run: Run) -> Run:
        stored = self._runs.get(run.id)
        if stored is None:
            raise ValueError(f"Run {run.id} does not exist; insert it first")
        if stored.version != run.version:
            raise VersionConflict(run.id, expected=run.version, actual=stored.version)
        updated = run.model_copy(deep=True, update={"version": run.version + 1, "updated_at": utcnow()})
        self._runs[run.id] = updated
        return updated.model_copy(deep=True)


class InMemorySnapshotRepository:
    def __init__(self) -> None:
        self._snapshots: dict[str, Snapshot] = {}

    def insert(self, snapshot: Snapshot) -> Snapshot:
        self._snapshots[snapshot.id] = snapshot
        return snapshot

    def count_for_player(self, player_id: str) -> int:
        return sum(1 for s in self._snapshots.values() if s.player_id == player_id)

    def _by_age(self, snapshots: list[Snapshot], newest_first: bool) -> list[Snapshot]:
        ordered = list(reversed(snapshots)) if newest_first else snapshots
        return sorted(ordered, key=lambda s: s.created_at, reverse=newest_first)

    def oldest_for_player(self, player_id: str, limit: int) -> list[Snapshot]:
        mine = [s for s in self._snapshots.values() if s.player_id == player_id]
        return self._by_age(mine, newest_first=False)[:limit]

    def delete(self, snapshot_ids: Sequence[str]) -> int:
        removed = 0
        for snapshot_id in snapshot_ids:
            if self._snapshots.pop(snapshot_id, None) is not None:
                removed += 1
        return removed

    def find_candidates(
        self,
        exclude_player_id: str,
        round_number: int,
        min_rating: int,
        max_rating: int,
        limit: int,
    ) -> list[Snapshot]:
        matches = [
            s for s in self._snapshots.values()
            if s.player_id != exclude_player_id
            and s.round == round_number
            and min_rating <= s.rating <= max_rating
        ]
        return self._by_age(matches, newest_first=True)[:limit]

    def delete_older_than(self, cutoff: datetime) -> int:
        expired = [s.id for s in self._snapshots.values() if s.created_at < cutoff]
        return self.delete(expired)

    def all(self) -> list[Snapshot]:
        return list(self._snapshots.values())


class InMemoryBattleLogRepository:
    def __init__(self) -> None:
        self.logs: dict[str, BattleLog] = {}

    def save(self, log: BattleLog) -> str:
        log_id = log.id or new_id()
        log.id = log_id
        self.logs[log_id] = log
        return log_id
