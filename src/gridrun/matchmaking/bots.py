"""Bot team generation.

A bot is a pure function of ``(run.wins, run.losses, run.rating, seed)``.
One :class:`GameRNG` stream is consumed in a fixed order:

1. faction (``random_float() > 0.5`` -> humans, else undead)
2. curated variant index for ``(round, faction)``
3. fallback shuffle, only when no curated team exists for that round
4. one timing per faction spell

Curated compositions scale with the round's gold budget (rounds 1-2 ~10g,
3-4 ~20g, 5-6 ~35g, 7-8 ~50g, 9-12 ~65g; rounds 11-12 add tier-2 units).
The fallback greedily fills the budget from a shuffled tier-1 list.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gridrun.config import BotConfig
from gridrun.core.models import (
    GRID_WIDTH,
    MAX_FIELD_UNITS,
    BotOpponent,
    PlacedUnit,
    Position,
    Run,
    SpellTiming,
    SpellTimingConfig,
)
from gridrun.core.rng import GameRNG

if TYPE_CHECKING:
    from gridrun.catalog.registry import UnitCatalog

logger = logging.getLogger(__name__)

FACTION_ORDER = ("humans", "undead")
TIMINGS = (SpellTiming.EARLY, SpellTiming.MID, SpellTiming.LATE)


class BotTeamGenerator:
    def __init__(self, catalog: UnitCatalog, config: BotConfig | None = None) -> None:
        self.catalog = catalog
        self.config = config or BotConfig()

    def generate(self, run: Run, seed: int) -> BotOpponent:
        rng = GameRNG(seed)
        round_number = run.round

        faction = FACTION_ORDER[0] if rng.random_float() > 0.5 else FACTION_ORDER[1]
        leader = self.catalog.default_leader(faction)

        variants = self.catalog.bot_teams(round_number, faction)
        variant_roll = rng.random_float()
        if variants:
            chosen = variants[int(variant_roll * len(variants))]
            team = [u.model_copy() for u in chosen.units]
            variant: int | None = chosen.variant
        else:
            team = self.fill_budget(faction, self.catalog.budget_for_round(round_number), rng)
            variant = None

        spell_timings = [
            SpellTimingConfig(spell_id=spell_id, timing=rng.random_choice(TIMINGS))
            for spell_id in leader.spell_ids
        ]
        difficulty = self.config.difficulty_for(run.wins)

        logger.debug(
            "Generated bot for round %d: faction=%s variant=%s units=%d difficulty=%.2f",
            round_number, faction, variant, len(team), difficulty,
        )
        return BotOpponent(
            id=f"bot_{seed}",
            name=f"Bot_{run.wins}W",
            faction=faction,
            leader_id=leader.id,
            team=team,
            spell_timings=spell_timings,
            difficulty=difficulty,
            rating=run.rating,
            variant=variant,
        )

    def fill_budget(self, faction: str, budget: int, rng: GameRNG) -> list[PlacedUnit]:
        """Greedy tier-1 fill: skip units over the remaining budget, stop at 16."""
        team: list[PlacedUnit] = []
        remaining = budget
        for unit in rng.shuffled(self.catalog.units_for_faction(faction)):
            if len(team) >= MAX_FIELD_UNITS:
                break
            if unit.cost > remaining:
                continue
            index = len(team)
            team.append(PlacedUnit(
                unit_id=unit.id,
                tier=1,
                position=Position(x=index % GRID_WIDTH, y=index // GRID_WIDTH),
            ))
            remaining -= unit.cost
        return team
