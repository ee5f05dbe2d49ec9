"""Drive complete runs with a greedy policy and print run reports.

Usage:
    python scripts/simulate_runs.py [--runs 20] [--seed 42] [--faction humans] [--store data/]

Each run drafts the first offered cards, places whatever it can afford on
the first free cells, buys every affordable upgrade and then battles.
Combat is the power-weighted ``CoinFlipResolver``.  Snapshots from earlier
runs become opponents for later ones.
"""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path

from gridrun.battle import BattleService, CoinFlipResolver
from gridrun.catalog import UnitCatalog
from gridrun.config import load_config
from gridrun.core import GameRNG, Position, Run
from gridrun.core.models import GRID_HEIGHT, GRID_WIDTH
from gridrun.errors import InsufficientGold
from gridrun.matchmaking import BotTeamGenerator, Matchmaker, SnapshotPool
from gridrun.progression import DraftService, PlacementService, RunService, UpgradeService
from gridrun.progression.summary import pool_report, run_report
from gridrun.storage import (
    InMemoryBattleLogRepository,
    InMemoryRunRepository,
    InMemorySnapshotRepository,
    JsonBattleLogRepository,
    JsonRunRepository,
    JsonSnapshotRepository,
)

FACTIONS = ("humans", "undead")


def free_cells(run: Run) -> list[Position]:
    taken = {(u.position.x, u.position.y) for u in run.field}
    return [
        Position(x=x, y=y)
        for y in range(GRID_HEIGHT)
        for x in range(GRID_WIDTH)
        if (x, y) not in taken
    ]


def play_run(
    run: Run,
    draft: DraftService,
    placement: PlacementService,
    upgrades: UpgradeService,
    battles: BattleService,
) -> Run:
    player_id = run.player_id
    while run.is_active:
        availability = draft.is_available(run.id, player_id)
        if availability.available:
            options = draft.get_options(run.id, player_id)
            picks = [c.instance_id for c in options.cards[:options.required_picks]]
            run = draft.submit_picks(run.id, player_id, picks).run

        for card in list(run.hand):
            cells = free_cells(run)
            if not cells:
                break
            try:
                run = placement.place(run.id, player_id, card.instance_id, cells[0])
            except InsufficientGold:
                continue

        for option in upgrades.get_upgrade_options(run.id, player_id):
            try:
                run = upgrades.upgrade_unit(run.id, player_id, option.instance_id).run
            except InsufficientGold:
                break

        run = battles.submit_battle(run.id, player_id).run
    return run


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate greedy gridrun runs")
    parser.add_argument("--runs", type=int, default=20, help="Number of runs")
    parser.add_argument("--seed", type=int, default=42, help="Seed for faction choice")
    parser.add_argument("--faction", choices=FACTIONS, default=None, help="Fix the faction")
    parser.add_argument("--store", type=str, default=None, help="JSON store directory")
    parser.add_argument("--config", type=str, default=None, help="GameConfig JSON file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    catalog = UnitCatalog(units_version=config.units_version)
    if args.store:
        store = Path(args.store)
        run_repo = JsonRunRepository(store / "runs.json")
        snapshot_repo = JsonSnapshotRepository(store / "snapshots.json")
        log_repo = JsonBattleLogRepository(store / "battle_logs.json")
    else:
        run_repo = InMemoryRunRepository()
        snapshot_repo = InMemorySnapshotRepository()
        log_repo = InMemoryBattleLogRepository()

    runs = RunService(run_repo, catalog, config)
    pool = SnapshotPool(snapshot_repo, config.snapshots)
    matchmaker = Matchmaker(snapshot_repo, BotTeamGenerator(catalog, config.bots), config.matchmaking)
    battles = BattleService(runs, pool, matchmaker, CoinFlipResolver(), log_repo, catalog)
    draft = DraftService(runs)
    placement = PlacementService(runs, catalog)
    upgrades = UpgradeService(runs, catalog)

    rng = GameRNG(args.seed)
    print(f"Simulating {args.runs} runs...")
    t0 = time.perf_counter()
    finished: list[Run] = []
    for i in range(args.runs):
        faction = args.faction or rng.random_choice(FACTIONS)
        leader = catalog.default_leader(faction)
        run = runs.create(f"sim-{args.seed}-{i}", faction, leader.id)
        finished.append(play_run(run, draft, placement, upgrades, battles))
    elapsed = time.perf_counter() - t0
    print(f"Done in {elapsed:.1f}s")

    won = sum(1 for r in finished if r.status.value == "won")
    print(f"Won {won}/{len(finished)} runs")
    for run in finished:
        print()
        print(run_report(run, config.economy))
    print()
    print(pool_report(pool.stats()))


if __name__ == "__main__":
    main()
