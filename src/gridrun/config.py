"""Game configuration.

Every tunable number of the run loop lives here as a pydantic model, so a
test or a script can build a variant config in one expression::

    config = GameConfig(matchmaking=MatchmakingConfig(bot_fallback=False))

``load_config`` reads the same structure from a JSON file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator


class RunConfig(BaseModel):
    starting_gold: int = Field(default=10, ge=0)
    starting_rating: int = Field(default=1000, ge=0)


class EconomyConfig(BaseModel):
    win_base: int = Field(default=7, ge=0)
    loss_reward: int = Field(default=9, ge=0)
    streak_threshold: int = Field(default=3, ge=1)
    """Consecutive wins needed before the streak bonus kicks in."""
    streak_step: int = Field(default=2, ge=0)


class DraftConfig(BaseModel):
    initial_options: int = Field(default=5, ge=1)
    initial_picks: int = Field(default=3, ge=1)
    post_battle_options: int = Field(default=3, ge=1)
    post_battle_picks: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _picks_fit_options(self) -> DraftConfig:
        if self.initial_picks > self.initial_options:
            raise ValueError("initial_picks cannot exceed initial_options")
        if self.post_battle_picks > self.post_battle_options:
            raise ValueError("post_battle_picks cannot exceed post_battle_options")
        return self


class MatchmakingConfig(BaseModel):
    rating_range: int = Field(default=200, ge=0)
    bot_fallback: bool = True
    max_candidates: int = Field(default=100, ge=1)


class SnapshotConfig(BaseModel):
    max_per_player: int = Field(default=10, ge=1)
    ttl_hours: float = Field(default=24.0, gt=0)


class BotConfig(BaseModel):
    base_difficulty: float = Field(default=0.5, ge=0.0, le=1.0)
    difficulty_per_win: float = Field(default=0.05, ge=0.0)
    max_difficulty: float = Field(default=0.95, ge=0.0, le=1.0)

    def difficulty_for(self, wins: int) -> float:
        return min(self.base_difficulty + wins * self.difficulty_per_win, self.max_difficulty)


class BattleConfig(BaseModel):
    rating_win: int = 15
    rating_loss: int = -10
    max_log_retries: int = Field(default=2, ge=0)
    """Extra attempts after the first failed battle-log write."""


class GameConfig(BaseModel):
    units_version: Literal["v1", "v2"] = "v1"
    run: RunConfig = Field(default_factory=RunConfig)
    economy: EconomyConfig = Field(default_factory=EconomyConfig)
    draft: DraftConfig = Field(default_factory=DraftConfig)
    matchmaking: MatchmakingConfig = Field(default_factory=MatchmakingConfig)
    snapshots: SnapshotConfig = Field(default_factory=SnapshotConfig)
    bots: BotConfig = Field(default_factory=BotConfig)
    battle: BattleConfig = Field(default_factory=BattleConfig)


def load_config(path: str | Path | None = None) -> GameConfig:
    """Load a :class:`GameConfig` from JSON, or return the defaults."""
    if path is None:
        return GameConfig()
    data = json.loads(Path(path).read_text())
    return GameConfig.model_validate(data)
