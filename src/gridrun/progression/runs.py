"""Run state machine -- creation, guarded loading, win/loss recording.

A run is the aggregate root for a player's attempt.  Every mutating
operation in the draft, placement and upgrade services goes through
:meth:`RunService.load_active` (not found -> not owner -> completed, in that
order) and :meth:`RunService.commit`, which re-validates the whole aggregate
before the repository's compare-and-swap save.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from gridrun.config import GameConfig
from gridrun.core.models import (
    BattleHistoryEntry,
    OpponentSummary,
    Run,
    RunStatus,
    SpellCard,
    SpellTimingConfig,
    utcnow,
)
from gridrun.errors import (
    ActiveRunExists,
    FactionNotFound,
    InvalidFactionLeader,
    InvalidSpellTiming,
    LeaderNotFound,
    RunAccessDenied,
    RunAlreadyCompleted,
    RunNotFound,
)

if TYPE_CHECKING:
    from gridrun.catalog.registry import UnitCatalog
    from gridrun.storage.base import RunRepository

logger = logging.getLogger(__name__)


class RunService:
    """Owns run creation, lookup and battle-outcome transitions.

    Parameters
    ----------
    repository:
        Run persistence.
    catalog:
        Unit catalog, for factions, leaders and starter decks.
    config:
        Game configuration; defaults to :class:`GameConfig()`.
    """

    def __init__(
        self,
        repository: RunRepository,
        catalog: UnitCatalog,
        config: GameConfig | None = None,
    ) -> None:
        self.repository = repository
        self.catalog = catalog
        self.config = config or GameConfig()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create(self, player_id: str, faction: str, leader_id: str) -> Run:
        """Start a new run for *player_id*.

        Raises
        ------
        FactionNotFound, LeaderNotFound, InvalidFactionLeader
            If the faction/leader pair is unknown or mismatched.
        ActiveRunExists
            If the player already has an active run.
        """
        if self.catalog.get_faction(faction) is None:
            raise FactionNotFound(faction)
        leader = self.catalog.get_leader(leader_id)
        if leader is None:
            raise LeaderNotFound(leader_id)
        if leader.faction != faction:
            raise InvalidFactionLeader(faction, leader_id)

        existing = self.get_active_run(player_id)
        if existing is not None:
            raise ActiveRunExists(player_id, existing.id)

        deck = self.catalog.starter_deck(faction)
        run = Run(
            player_id=player_id,
            faction=faction,
            leader_id=leader_id,
            deck=deck,
            remaining_deck=[c.model_copy() for c in deck],
            spells=[SpellCard(spell_id=spell_id) for spell_id in leader.spell_ids],
            gold=self.config.run.starting_gold,
            rating=self.config.run.starting_rating,
        )
        stored = self.repository.insert(run)
        logger.info(
            "Run created: %s (player=%s, faction=%s, leader=%s, deck=%d)",
            stored.id, player_id, faction, leader_id, len(deck),
        )
        return stored

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_run(self, run_id: str, player_id: str) -> Run:
        """Load a run, checking existence then ownership."""
        run = self.repository.get(run_id)
        if run is None:
            raise RunNotFound(run_id)
        if run.player_id != player_id:
            raise RunAccessDenied(run_id, player_id)
        return run

    def load_active(self, run_id: str, player_id: str) -> Run:
        """Load a run for mutation: not found, then not owner, then completed."""
        run = self.get_run(run_id, player_id)
        if run.status is not RunStatus.ACTIVE:
            raise RunAlreadyCompleted(run_id, run.status.value)
        return run

    def get_active_run(self, player_id: str) -> Run | None:
        runs = self.repository.find_by_player(player_id, status=RunStatus.ACTIVE, limit=1)
        return runs[0] if runs else None

    def get_run_history(self, player_id: str, limit: int = 10) -> list[Run]:
        """Most recent runs of *player_id*, newest first."""
        return self.repository.find_by_player(player_id, limit=limit)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def commit(self, run: Run) -> Run:
        """Re-validate *run* and save it.

        Validation re-checks bounds, card conservation and grid exclusivity
        whatever produced the values, and flips the status once 9 wins or
        4 losses are reached.
        """
        validated = Run.model_validate(run.model_dump())
        return self.repository.save(validated)

    # ------------------------------------------------------------------
    # Battle outcomes
    # ------------------------------------------------------------------

    def record_win(
        self,
        run_id: str,
        player_id: str,
        gold_earned: int,
        battle_id: str,
        rating_change: int = 0,
        opponent: OpponentSummary | None = None,
    ) -> Run:
        return self._record(run_id, player_id, "win", gold_earned, battle_id, rating_change, opponent)

    def record_loss(
        self,
        run_id: str,
        player_id: str,
        gold_earned: int,
        battle_id: str,
        rating_change: int = 0,
        opponent: OpponentSummary | None = None,
    ) -> Run:
        return self._record(run_id, player_id, "loss", gold_earned, battle_id, rating_change, opponent)

    def _record(
        self,
        run_id: str,
        player_id: str,
        result: str,
        gold_earned: int,
        battle_id: str,
        rating_change: int,
        opponent: OpponentSummary | None,
    ) -> Run:
        run = self.load_active(run_id, player_id)
        round_number = run.round

        if result == "win":
            run.wins += 1
            run.consecutive_wins += 1
            run.consecutive_losses = 0
        else:
            run.losses += 1
            run.consecutive_losses += 1
            run.consecutive_wins = 0

        run.gold += gold_earned
        run.rating = max(0, run.rating + rating_change)
        run.field = [u.model_copy(update={"has_battled": True}) for u in run.field]
        run.battle_history.append(BattleHistoryEntry(
            battle_id=battle_id,
            result=result,
            round=round_number,
            gold_earned=gold_earned,
            rating_change=rating_change,
            opponent=opponent or OpponentSummary(),
            timestamp=utcnow(),
        ))

        saved = self.commit(run)
        logger.info(
            "Run %s recorded %s in round %d: %d-%d, gold=%d, rating=%d",
            run_id, result, round_number, saved.wins, saved.losses, saved.gold, saved.rating,
        )
        if saved.status is not RunStatus.ACTIVE:
            logger.info("Run %s finished: %s", run_id, saved.status.value)
        return saved

    # ------------------------------------------------------------------
    # Other transitions
    # ------------------------------------------------------------------

    def abandon(self, run_id: str, player_id: str) -> Run:
        """End an active run as lost without recording a battle."""
        run = self.load_active(run_id, player_id)
        run.status = RunStatus.LOST
        saved = self.commit(run)
        logger.info("Run %s abandoned by %s", run_id, player_id)
        return saved

    def set_spell_timings(
        self, run_id: str, player_id: str, timings: Sequence[SpellTimingConfig],
    ) -> Run:
        run = self.load_active(run_id, player_id)
        by_id = {s.spell_id: s for s in run.spells}
        for timing in timings:
            if timing.spell_id not in by_id:
                raise InvalidSpellTiming(timing.spell_id)
        chosen = {t.spell_id: t.timing for t in timings}
        run.spells = [
            s.model_copy(update={"timing": chosen.get(s.spell_id, s.timing)}) for s in run.spells
        ]
        return self.commit(run)
