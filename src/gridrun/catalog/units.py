"""Unit definitions, tier scaling and upgrade pricing."""

from __future__ import annotations

import math
from enum import Enum

from pydantic import BaseModel, Field

MIN_TIER = 1
MAX_TIER = 3

TIER_STAT_MULTIPLIERS: dict[int, float] = {1: 1.0, 2: 1.5, 3: 2.0}
"""Multiplier applied to hp, atk and armor at each tier."""

T3_COST_MULTIPLIER = 1.5
DEFAULT_BASE_COST = 3
"""Base cost assumed when pricing an upgrade for a unit the catalog lacks."""


def round_half_up(value: float) -> int:
    """Round halves away from zero for non-negative values (4.5 -> 5)."""
    return int(math.floor(value + 0.5))


def upgrade_cost(base_cost: int, target_tier: int) -> int:
    """Gold needed to raise a unit *to* ``target_tier``.

    ``T1 -> T2`` costs the base cost; ``T2 -> T3`` costs
    ``round(base_cost * 1.5)``.
    """
    if target_tier == 2:
        return base_cost
    if target_tier == 3:
        return round_half_up(base_cost * T3_COST_MULTIPLIER)
    raise ValueError(f"Cannot upgrade to tier {target_tier}")


class UnitRole(str, Enum):
    """Battlefield role; drives targeting in the battle resolver."""

    TANK = "tank"
    MELEE_DPS = "melee_dps"
    RANGED_DPS = "ranged_dps"
    MAGE = "mage"
    SUPPORT = "support"


class UnitStats(BaseModel):
    """Combat stats for one unit at one tier."""

    hp: int = Field(gt=0)
    atk: int = Field(ge=0)
    armor: int = Field(ge=0)
    speed: int = Field(ge=0)
    initiative: int = Field(ge=0)
    range: int = Field(ge=1)
    attack_count: int = Field(default=1, ge=1)
    dodge: int = Field(default=0, ge=0, le=100)

    def scaled(self, multiplier: float) -> UnitStats:
        return self.model_copy(update={
            "hp": round_half_up(self.hp * multiplier),
            "atk": round_half_up(self.atk * multiplier),
            "armor": round_half_up(self.armor * multiplier),
        })


class UnitDefinition(BaseModel):
    """A purchasable tier-1 unit and its upgrade line."""

    id: str
    name: str
    faction: str
    role: UnitRole
    cost: int = Field(gt=0)
    """Gold to place from hand; also the T1 -> T2 upgrade price."""

    stats: UnitStats
    description: str = ""

    t2_name: str | None = None
    t3_name: str | None = None
    ability_id: str | None = None
    """Active ability unlocked at tier 3."""

    t3_overrides: dict[str, int] = {}
    """Stat replacements applied after T3 scaling (e.g. longer range)."""

    @property
    def base_cost(self) -> int:
        return self.cost

    @property
    def base_stats(self) -> UnitStats:
        return self.stats

    def stats_at(self, tier: int) -> UnitStats:
        """Return resolved stats for *tier* (1-3)."""
        if tier not in TIER_STAT_MULTIPLIERS:
            raise ValueError(f"Invalid tier {tier} for unit {self.id}")
        resolved = self.stats.scaled(TIER_STAT_MULTIPLIERS[tier])
        if tier == MAX_TIER and self.t3_overrides:
            resolved = resolved.model_copy(update=self.t3_overrides)
        return resolved

    def name_at(self, tier: int) -> str:
        if tier == 2 and self.t2_name:
            return self.t2_name
        if tier == 3 and self.t3_name:
            return self.t3_name
        return self.name

    def ability_at(self, tier: int) -> str | None:
        return self.ability_id if tier >= MAX_TIER else None

    def upgrade_cost(self, target_tier: int) -> int:
        return upgrade_cost(self.cost, target_tier)
