"""Opponent search: snapshot window first, generated bot as fallback.

Candidates are snapshots from *other* players at exactly the requester's
round (same budget tier) with a rating inside ``rating +/- rating_range``,
newest first and capped at ``max_candidates``.  One is picked with a seeded
index.  Matchmaking never mutates the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from gridrun.config import MatchmakingConfig
from gridrun.core.models import BotOpponent, HumanOpponent, Run
from gridrun.core.rng import GameRNG
from gridrun.errors import NoOpponentFound

if TYPE_CHECKING:
    from gridrun.matchmaking.bots import BotTeamGenerator
    from gridrun.storage.base import SnapshotRepository

logger = logging.getLogger(__name__)

Difficulty = Literal["easy", "medium", "hard"]


@dataclass
class MatchResult:
    opponent: HumanOpponent | BotOpponent
    difficulty: Difficulty

    @property
    def is_bot(self) -> bool:
        return self.opponent.is_bot


def difficulty_from_rating_gap(player_rating: int, opponent_rating: int) -> Difficulty:
    gap = opponent_rating - player_rating
    if gap < -100:
        return "easy"
    if gap > 100:
        return "hard"
    return "medium"


def difficulty_from_bot(difficulty: float) -> Difficulty:
    if difficulty < 0.5:
        return "easy"
    if difficulty > 0.75:
        return "hard"
    return "medium"


class Matchmaker:
    def __init__(
        self,
        snapshots: SnapshotRepository,
        bots: BotTeamGenerator,
        config: MatchmakingConfig | None = None,
    ) -> None:
        self.snapshots = snapshots
        self.bots = bots
        self.config = config or MatchmakingConfig()

    def find_opponent(self, run: Run, seed: int) -> MatchResult:
        """Pick an opponent for the battle about to be fought.

        Raises
        ------
        NoOpponentFound
            If no snapshot qualifies and bot fallback is disabled.
        """
        round_number = run.round
        min_rating = run.rating - self.config.rating_range
        max_rating = run.rating + self.config.rating_range

        candidates = self.snapshots.find_candidates(
            exclude_player_id=run.player_id,
            round_number=round_number,
            min_rating=min_rating,
            max_rating=max_rating,
            limit=self.config.max_candidates,
        )
        logger.debug(
            "Run %s round %d: %d candidates in rating window [%d, %d]",
            run.id, round_number, len(candidates), min_rating, max_rating,
        )

        if candidates:
            snapshot = candidates[GameRNG(seed).random_index(len(candidates))]
            difficulty = difficulty_from_rating_gap(run.rating, snapshot.rating)
            logger.info(
                "Run %s matched snapshot %s of player %s (rating %d, %s)",
                run.id, snapshot.id, snapshot.player_id, snapshot.rating, difficulty,
            )
            return MatchResult(opponent=HumanOpponent(snapshot=snapshot), difficulty=difficulty)

        if not self.config.bot_fallback:
            logger.warning("No opponent for run %s in round %d", run.id, round_number)
            raise NoOpponentFound(run.id, run.wins)

        bot = self.bots.generate(run, seed)
        difficulty = difficulty_from_bot(bot.difficulty)
        logger.info("Run %s matched bot %s (%s, %s)", run.id, bot.name, bot.faction, difficulty)
        return MatchResult(opponent=bot, difficulty=difficulty)
