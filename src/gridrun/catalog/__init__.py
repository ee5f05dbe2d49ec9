"""Unit catalog -- unit, faction, leader and bot-team content."""

from gridrun.catalog.factions import FactionDefinition, LeaderDefinition, SpellDefinition
from gridrun.catalog.registry import BotTeam, UnitCatalog
from gridrun.catalog.units import UnitDefinition, UnitRole, UnitStats, upgrade_cost

__all__ = [
    "BotTeam",
    "FactionDefinition",
    "LeaderDefinition",
    "SpellDefinition",
    "UnitCatalog",
    "UnitDefinition",
    "UnitRole",
    "UnitStats",
    "upgrade_cost",
]
