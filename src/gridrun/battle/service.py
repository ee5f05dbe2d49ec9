"""Battle flow -- snapshot, match, simulate, reward, record.

:meth:`BattleService.submit_battle` is the single entry point a client
calls once its field is set.  The order of side effects matters:

1. the submitted team is saved as a snapshot *before* the opponent search,
   so the pool keeps growing even when the battle itself fails later;
2. the opponent is picked with the battle seed, so a retried submission of
   the same battle meets the same opponent;
3. gold and rating are applied through :class:`RunService`, which owns the
   counters and the status flip.

The battle log is best-effort: a write that keeps failing marks the
report ``replay_available=False`` but never loses the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Sequence

from gridrun.battle.log import BattleLog
from gridrun.battle.mapper import field_to_team_setup, opponent_to_team_setup
from gridrun.config import BattleConfig
from gridrun.core.models import (
    BotOpponent,
    HumanOpponent,
    Run,
    SpellTiming,
    SpellTimingConfig,
    new_id,
    utcnow,
)
from gridrun.errors import GridRunError
from gridrun.matchmaking.matchmaker import Difficulty
from gridrun.matchmaking.snapshots import team_from_field
from gridrun.progression import economy

if TYPE_CHECKING:
    from gridrun.battle.resolver import BattleResolver
    from gridrun.catalog.registry import UnitCatalog
    from gridrun.matchmaking.matchmaker import Matchmaker
    from gridrun.matchmaking.snapshots import SnapshotPool
    from gridrun.progression.runs import RunService
    from gridrun.storage.base import BattleLogRepository

logger = logging.getLogger(__name__)

Result = Literal["win", "loss"]


def battle_seed(run_id: str, battle_number: int) -> int:
    """Deterministic non-negative seed for battle *battle_number* of a run.

    A 32-bit ``h * 31 + c`` string hash over ``"{run_id}-{battle_number}"``,
    read as a signed integer and folded to its absolute value.
    """
    h = 0
    for ch in f"{run_id}-{battle_number}":
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


@dataclass
class BattleReport:
    battle_id: str
    result: Result
    replay_available: bool
    rounds: int
    seed: int


@dataclass
class BattleSubmission:
    report: BattleReport
    opponent: HumanOpponent | BotOpponent
    difficulty: Difficulty
    gold_earned: int
    rating_change: int
    run: Run


class BattleService:
    """Runs one battle end to end for an active run.

    Parameters
    ----------
    runs:
        Run state machine; used for guarded loading and recording.
    pool:
        Snapshot pool the submitted team is saved into.
    matchmaker:
        Opponent search.
    resolver:
        Combat engine.
    logs:
        Battle log persistence.
    catalog:
        Unit catalog for stat resolution.
    config:
        Rating deltas and log retry count; defaults to ``runs.config.battle``.
    """

    def __init__(
        self,
        runs: RunService,
        pool: SnapshotPool,
        matchmaker: Matchmaker,
        resolver: BattleResolver,
        logs: BattleLogRepository,
        catalog: UnitCatalog,
        config: BattleConfig | None = None,
    ) -> None:
        self.runs = runs
        self.pool = pool
        self.matchmaker = matchmaker
        self.resolver = resolver
        self.logs = logs
        self.catalog = catalog
        self.config = config or runs.config.battle

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def simulate_and_record_log(
        self, run: Run, opponent: HumanOpponent | BotOpponent,
    ) -> BattleReport:
        """Resolve the battle and persist its log.

        An empty side forfeits without a simulation or a log; a draw is
        scored as a loss for the submitting player.
        """
        seed = battle_seed(run.id, run.wins + run.losses)

        if not run.field:
            logger.warning("Run %s has an empty field: automatic loss", run.id)
            return BattleReport(new_id(), "loss", False, 0, seed)
        if not opponent.team:
            logger.warning("Opponent %s has an empty team: automatic win", opponent.id)
            return BattleReport(new_id(), "win", False, 0, seed)

        player_team = field_to_team_setup(run.field, self.catalog)
        opponent_team = opponent_to_team_setup(opponent, self.catalog)
        outcome = self.resolver.simulate(player_team, opponent_team, seed)
        result: Result = "win" if outcome.winner == "a" else "loss"
        logger.debug(
            "Run %s battle seed=%d winner=%s rounds=%d",
            run.id, seed, outcome.winner, outcome.rounds_elapsed,
        )

        log = BattleLog(
            run_id=run.id,
            player_id=run.player_id,
            opponent_id=opponent.id,
            seed=seed,
            winner={"a": "player", "b": "opponent"}.get(outcome.winner, "draw"),
            rounds=outcome.rounds_elapsed,
            player_team=player_team,
            opponent_team=opponent_team,
            events=outcome.events,
            created_at=utcnow().isoformat(),
        )
        log_id = self._save_log(log)
        return BattleReport(
            battle_id=log_id or new_id(),
            result=result,
            replay_available=log_id is not None,
            rounds=outcome.rounds_elapsed,
            seed=seed,
        )

    def _save_log(self, log: BattleLog) -> str | None:
        attempts = self.config.max_log_retries + 1
        for attempt in range(attempts):
            try:
                return self.logs.save(log)
            except Exception as exc:
                if attempt < attempts - 1:
                    logger.warning(
                        "Battle log write failed (attempt %d/%d): %s", attempt + 1, attempts, exc,
                    )
                else:
                    logger.error(
                        "Battle log for run %s not saved after %d attempts: %s",
                        log.run_id, attempts, exc,
                    )
        return None

    # ------------------------------------------------------------------
    # Full submission
    # ------------------------------------------------------------------

    def submit_battle(
        self,
        run_id: str,
        player_id: str,
        spell_timings: Sequence[SpellTimingConfig] | None = None,
    ) -> BattleSubmission:
        """Fight the next battle of an active run and record the outcome."""
        run = self.runs.load_active(run_id, player_id)
        if spell_timings is None:
            spell_timings = [
                SpellTimingConfig(spell_id=s.spell_id, timing=s.timing or SpellTiming.MID)
                for s in run.spells
            ]

        team = team_from_field(run)
        try:
            self.pool.save(run, team, spell_timings)
        except (GridRunError, OSError) as exc:
            logger.warning("Snapshot for run %s not saved: %s", run.id, exc)

        seed = battle_seed(run.id, run.wins + run.losses)
        match = self.matchmaker.find_opponent(run, seed)
        report = self.simulate_and_record_log(run, match.opponent)

        if report.result == "win":
            reward = economy.calculate_win_reward(run.consecutive_wins + 1, self.runs.config.economy)
            rating_change = self.config.rating_win
            record = self.runs.record_win
        else:
            reward = economy.calculate_loss_reward(
                run.consecutive_losses + 1, self.runs.config.economy,
            )
            rating_change = self.config.rating_loss
            record = self.runs.record_loss

        updated = record(
            run.id,
            player_id,
            gold_earned=reward.total,
            battle_id=report.battle_id,
            rating_change=rating_change,
            opponent=match.opponent.summary(),
        )
        return BattleSubmission(
            report=report,
            opponent=match.opponent,
            difficulty=match.difficulty,
            gold_earned=reward.total,
            rating_change=rating_change,
            run=updated,
        )
