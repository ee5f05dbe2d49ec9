"""Core run models and the seeded random stream."""

from gridrun.core.models import (
    BotOpponent,
    Card,
    FieldUnit,
    HumanOpponent,
    Opponent,
    OpponentSummary,
    PlacedUnit,
    Position,
    Run,
    RunStatus,
    Snapshot,
    SpellTiming,
    SpellTimingConfig,
)
from gridrun.core.rng import GameRNG

__all__ = [
    "BotOpponent",
    "Card",
    "FieldUnit",
    "GameRNG",
    "HumanOpponent",
    "Opponent",
    "OpponentSummary",
    "PlacedUnit",
    "Position",
    "Run",
    "RunStatus",
    "Snapshot",
    "SpellTiming",
    "SpellTimingConfig",
]
