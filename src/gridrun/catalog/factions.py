"""Faction, leader and spell definitions."""

from __future__ import annotations

from pydantic import BaseModel

from gridrun.catalog.units import round_half_up
from gridrun.core.models import SpellTiming


class FactionBonus(BaseModel):
    stat: str
    """Stat name the bonus applies to (``"hp"``, ``"atk"``)."""

    value: float
    """Fractional bonus, e.g. 0.1 for +10%."""


class FactionDefinition(BaseModel):
    id: str
    name: str
    description: str = ""
    bonus: FactionBonus

    def apply_bonus(self, value: int, stat: str) -> int:
        """Return *value* with the faction bonus applied if it targets *stat*."""
        if self.bonus.stat == stat:
            return round_half_up(value * (1 + self.bonus.value))
        return value


class PassiveAbility(BaseModel):
    id: str
    name: str
    description: str = ""
    effect_type: str
    effect_value: float
    effect_stat: str | None = None
    range: int | None = None


class SpellDefinition(BaseModel):
    id: str
    name: str
    faction: str
    description: str = ""
    target_type: str
    effect_type: str
    effect_value: float
    duration: int | None = None
    recommended_timing: SpellTiming = SpellTiming.MID


class LeaderDefinition(BaseModel):
    id: str
    name: str
    faction: str
    passive: PassiveAbility
    spell_ids: list[str]
    description: str = ""
