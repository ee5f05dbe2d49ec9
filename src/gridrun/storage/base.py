"""Repository protocols for runs, snapshots and battle logs.

The services depend only on these protocols.  The only queries the run loop
needs are point lookup by id, lookup by ``(player_id, status)``, the
``(round, rating)`` window used by matchmaking, insert, and
delete-by-predicate for the snapshot TTL sweep.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol, Sequence

from gridrun.core.models import Run, RunStatus, Snapshot

if TYPE_CHECKING:
    from gridrun.battle.log import BattleLog


class RunRepository(Protocol):
    def get(self, run_id: str) -> Run | None:
        ...

    def find_by_player(
        self, player_id: str, status: RunStatus | None = None, limit: int | None = None,
    ) -> list[Run]:
        """Runs owned by *player_id*, newest first."""
        ...

    def insert(self, run: Run) -> Run:
        ...

    def save(self, run: Run) -> Run:
        """Store *run* if its ``version`` matches the stored one.

        Returns the stored copy with ``version`` incremented; raises
        :class:`~gridrun.errors.VersionConflict` on a stale write.
        """
        ...


class SnapshotRepository(Protocol):
    def insert(self, snapshot: Snapshot) -> Snapshot:
        ...

    def count_for_player(self, player_id: str) -> int:
        ...

    def oldest_for_player(self, player_id: str, limit: int) -> list[Snapshot]:
        ...

    def delete(self, snapshot_ids: Sequence[str]) -> int:
        ...

    def find_candidates(
        self,
        exclude_player_id: str,
        round_number: int,
        min_rating: int,
        max_rating: int,
        limit: int,
    ) -> list[Snapshot]:
        """Snapshots from other players at exactly *round_number*, newest first."""
        ...

    def delete_older_than(self, cutoff: datetime) -> int:
        ...

    def all(self) -> list[Snapshot]:
        ...


class BattleLogRepository(Protocol):
    def save(self, log: BattleLog) -> str:
        """Persist *log* and return its id."""
        ...
