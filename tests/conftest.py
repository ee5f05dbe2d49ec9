"""Shared fixtures for gridrun tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from gridrun.battle import BattleService, CoinFlipResolver
from gridrun.catalog import UnitCatalog
from gridrun.config import GameConfig
from gridrun.core.models import Run
from gridrun.matchmaking import BotTeamGenerator, Matchmaker, SnapshotPool
from gridrun.progression import DraftService, PlacementService, RunService, UpgradeService
from gridrun.storage import (
    InMemoryBattleLogRepository,
    InMemoryRunRepository,
    InMemorySnapshotRepository,
)

HUMANS_LEADER = "commander_aldric"
UNDEAD_LEADER = "lich_king_malachar"


class FakeClock:
    """Manually advanced UTC clock for snapshot ages."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(scope="session")
def catalog() -> UnitCatalog:
    """Session-scoped catalog with the packaged v1 content."""
    return UnitCatalog(units_version="v1")


@pytest.fixture
def config() -> GameConfig:
    return GameConfig()


@pytest.fixture
def run_repo() -> InMemoryRunRepository:
    return InMemoryRunRepository()


@pytest.fixture
def snapshot_repo() -> InMemorySnapshotRepository:
    return InMemorySnapshotRepository()


@pytest.fixture
def log_repo() -> InMemoryBattleLogRepository:
    return InMemoryBattleLogRepository()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def runs(run_repo, catalog, config) -> RunService:
    return RunService(run_repo, catalog, config)


@pytest.fixture
def draft(runs) -> DraftService:
    return DraftService(runs)


@pytest.fixture
def placement(runs, catalog) -> PlacementService:
    return PlacementService(runs, catalog)


@pytest.fixture
def upgrades(runs, catalog) -> UpgradeService:
    return UpgradeService(runs, catalog)


@pytest.fixture
def pool(snapshot_repo, config, clock) -> SnapshotPool:
    return SnapshotPool(snapshot_repo, config.snapshots, clock=clock)


@pytest.fixture
def bots(catalog, config) -> BotTeamGenerator:
    return BotTeamGenerator(catalog, config.bots)


@pytest.fixture
def matchmaker(snapshot_repo, bots, config) -> Matchmaker:
    return Matchmaker(snapshot_repo, bots, config.matchmaking)


@pytest.fixture
def battles(runs, pool, matchmaker, log_repo, catalog) -> BattleService:
    return BattleService(runs, pool, matchmaker, CoinFlipResolver(), log_repo, catalog)


@pytest.fixture
def new_run(runs) -> Callable[..., Run]:
    """Factory: ``new_run(player_id="p1", faction="humans")``."""

    def _make(player_id: str = "p1", faction: str = "humans") -> Run:
        leader = HUMANS_LEADER if faction == "humans" else UNDEAD_LEADER
        return runs.create(player_id, faction, leader)

    return _make


@pytest.fixture
def drafted_run(new_run, draft) -> Callable[..., Run]:
    """Factory: a fresh run after its initial draft of the first three offers."""

    def _make(player_id: str = "p1", faction: str = "humans") -> Run:
        run = new_run(player_id, faction)
        options = draft.get_options(run.id, player_id)
        picks = [c.instance_id for c in options.cards[:options.required_picks]]
        return draft.submit_picks(run.id, player_id, picks).run

    return _make
