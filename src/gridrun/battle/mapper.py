"""Map field units and opponent teams onto battle-ready team setups.

The player's rows keep their deployment ``y`` (0-1); the opponent's rows
are mirrored onto the far side of a 10-row battlefield (``y -> 9 - y``, so
the opponent front row 0 faces the player at row 9).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Literal

from gridrun.core.models import BotOpponent, FieldUnit, HumanOpponent, PlacedUnit

if TYPE_CHECKING:
    from gridrun.catalog.registry import UnitCatalog

logger = logging.getLogger(__name__)

BATTLEFIELD_HEIGHT = 10

Side = Literal["player", "opponent"]


@dataclass
class CombatUnit:
    """A unit with tier-resolved stats, as the battle resolver sees it."""

    unit_id: str
    name: str
    role: str
    tier: int
    cost: int
    hp: int
    atk: int
    armor: int
    speed: int
    initiative: int
    range: int
    attack_count: int
    dodge: int
    abilities: list[str] = field(default_factory=list)

    @property
    def power(self) -> int:
        """Crude strength score: effective hp plus attack output."""
        return self.hp + self.armor + self.atk * self.attack_count * 3


@dataclass
class TeamSetup:
    units: list[CombatUnit] = field(default_factory=list)
    positions: list[tuple[int, int]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.units)

    @property
    def power(self) -> int:
        return sum(u.power for u in self.units)


def to_combat_unit(catalog: UnitCatalog, unit_id: str, tier: int) -> CombatUnit | None:
    definition = catalog.get_unit(unit_id)
    if definition is None:
        return None
    stats = definition.stats_at(tier)
    ability = definition.ability_at(tier)
    return CombatUnit(
        unit_id=definition.id,
        name=definition.name_at(tier),
        role=definition.role.value,
        tier=tier,
        cost=definition.cost,
        hp=stats.hp,
        atk=stats.atk,
        armor=stats.armor,
        speed=stats.speed,
        initiative=stats.initiative,
        range=stats.range,
        attack_count=stats.attack_count,
        dodge=stats.dodge,
        abilities=[ability] if ability else [],
    )


def map_team(
    catalog: UnitCatalog,
    units: Iterable[FieldUnit | PlacedUnit],
    side: Side,
) -> TeamSetup:
    setup = TeamSetup()
    for unit in units:
        combat = to_combat_unit(catalog, unit.unit_id, unit.tier)
        if combat is None:
            logger.warning("Skipping unknown unit %r in %s team", unit.unit_id, side)
            continue
        y = unit.position.y if side == "player" else BATTLEFIELD_HEIGHT - 1 - unit.position.y
        setup.units.append(combat)
        setup.positions.append((unit.position.x, y))
    return setup


def field_to_team_setup(field_units: Iterable[FieldUnit], catalog: UnitCatalog) -> TeamSetup:
    return map_team(catalog, field_units, "player")


def opponent_to_team_setup(
    opponent: HumanOpponent | BotOpponent, catalog: UnitCatalog,
) -> TeamSetup:
    return map_team(catalog, opponent.team, "opponent")
