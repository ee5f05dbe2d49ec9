"""Battle resolver interface.

Combat itself (turn order, damage, abilities) lives outside this package.
The run loop only needs ``simulate(team_a, team_b, seed) -> outcome`` and
treats the result as opaque apart from the winner and round count.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from gridrun.core.rng import GameRNG

if TYPE_CHECKING:
    from gridrun.battle.mapper import TeamSetup

Winner = Literal["a", "b", "draw"]


@dataclass
class BattleOutcome:
    winner: Winner
    rounds_elapsed: int
    events: list[dict[str, Any]] = field(default_factory=list)


class BattleResolver(ABC):
    """Base class for anything that can decide a battle."""

    @abstractmethod
    def simulate(self, team_a: TeamSetup, team_b: TeamSetup, seed: int) -> BattleOutcome:
        """Resolve a battle between two team setups.

        Parameters
        ----------
        team_a:
            The submitting player's team.
        team_b:
            The opponent's team, rows already mirrored.
        seed:
            Non-negative 32-bit seed; identical inputs and seed must give
            an identical outcome.
        """


class CoinFlipResolver(BattleResolver):
    """Deterministic stand-in weighted by total team power.

    Team A wins with probability ``power_a / (power_a + power_b)``.  Used by
    the scripts and tests where a real combat engine is not wired in.
    """

    def __init__(self, max_rounds: int = 10) -> None:
        self.max_rounds = max_rounds

    def simulate(self, team_a: TeamSetup, team_b: TeamSetup, seed: int) -> BattleOutcome:
        rng = GameRNG(seed).fork("coin_flip")
        power_a, power_b = team_a.power, team_b.power
        total = power_a + power_b
        if total == 0:
            return BattleOutcome(winner="draw", rounds_elapsed=0)

        roll = rng.random_float()
        winner: Winner = "a" if roll < power_a / total else "b"
        rounds = 1 + rng.random_index(self.max_rounds)
        events = [{
            "type": "battle_end",
            "winner": winner,
            "power_a": power_a,
            "power_b": power_b,
            "roll": round(roll, 4),
        }]
        return BattleOutcome(winner=winner, rounds_elapsed=rounds, events=events)
