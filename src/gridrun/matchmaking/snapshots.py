"""Snapshot pool -- deployed teams kept as matchmaking bait for other players.

Each player keeps at most ``max_per_player`` snapshots (oldest evicted
first, before the insert) and every snapshot expires after ``ttl_hours``
via :meth:`SnapshotPool.sweep_expired`, an idempotent batch delete that is
safe to run alongside reads.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable, Sequence

from pydantic import ValidationError

from gridrun.config import SnapshotConfig
from gridrun.core.models import PlacedUnit, Run, Snapshot, SpellTimingConfig, utcnow
from gridrun.errors import InvalidSnapshot

if TYPE_CHECKING:
    from gridrun.storage.base import SnapshotRepository

logger = logging.getLogger(__name__)


@dataclass
class SnapshotStats:
    total_count: int
    by_wins: dict[int, int] = field(default_factory=dict)
    avg_rating: int = 0


def team_from_field(run: Run) -> list[PlacedUnit]:
    """Strip instance identity from the run's field units."""
    return [
        PlacedUnit(unit_id=u.unit_id, tier=u.tier, position=u.position)
        for u in run.field
    ]


class SnapshotPool:
    """Persists, evicts and sweeps snapshots.

    Parameters
    ----------
    repository:
        Snapshot persistence.
    config:
        Per-player cap and TTL.
    clock:
        Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        repository: SnapshotRepository,
        config: SnapshotConfig | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.repository = repository
        self.config = config or SnapshotConfig()
        self.clock = clock

    def save(
        self,
        run: Run,
        team: Sequence[PlacedUnit],
        spell_timings: Sequence[SpellTimingConfig],
    ) -> Snapshot:
        """Capture *team* at the run's current round and rating."""
        try:
            snapshot = Snapshot(
                run_id=run.id,
                player_id=run.player_id,
                wins=run.wins,
                round=run.round,
                rating=run.rating,
                team=list(team),
                spell_timings=list(spell_timings),
                faction=run.faction,
                leader_id=run.leader_id,
                created_at=self.clock(),
            )
        except ValidationError as exc:
            raise InvalidSnapshot(str(exc), run_id=run.id) from exc

        evicted = self._evict_for(run.player_id)
        stored = self.repository.insert(snapshot)
        logger.info(
            "Snapshot %s saved for run %s (round %d, rating %d, %d units, %d evicted)",
            stored.id, run.id, stored.round, stored.rating, len(stored.team), evicted,
        )
        return stored

    def _evict_for(self, player_id: str) -> int:
        """Drop the player's oldest snapshots so one more fits under the cap."""
        count = self.repository.count_for_player(player_id)
        excess = count - self.config.max_per_player + 1
        if excess <= 0:
            return 0
        oldest = self.repository.oldest_for_player(player_id, excess)
        removed = self.repository.delete([s.id for s in oldest])
        logger.debug("Evicted %d snapshots for player %s", removed, player_id)
        return removed

    def sweep_expired(self, now: datetime | None = None) -> int:
        """Delete snapshots older than the TTL; returns how many were removed."""
        cutoff = (now or self.clock()) - timedelta(hours=self.config.ttl_hours)
        deleted = self.repository.delete_older_than(cutoff)
        if deleted:
            logger.info("Swept %d expired snapshots (cutoff %s)", deleted, cutoff.isoformat())
        return deleted

    def stats(self) -> SnapshotStats:
        snapshots = self.repository.all()
        if not snapshots:
            return SnapshotStats(total_count=0)
        by_wins = Counter(s.wins for s in snapshots)
        avg = sum(s.rating for s in snapshots) / len(snapshots)
        return SnapshotStats(
            total_count=len(snapshots),
            by_wins=dict(sorted(by_wins.items())),
            avg_rating=int(avg + 0.5),
        )
