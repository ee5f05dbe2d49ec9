"""Battle flow: team mapping, resolver interface, logs and the battle service."""

from gridrun.battle.log import BattleLog
from gridrun.battle.mapper import (
    CombatUnit,
    TeamSetup,
    field_to_team_setup,
    opponent_to_team_setup,
)
from gridrun.battle.resolver import BattleOutcome, BattleResolver, CoinFlipResolver
from gridrun.battle.service import BattleReport, BattleService, BattleSubmission, battle_seed

__all__ = [
    "BattleLog",
    "BattleOutcome",
    "BattleReport",
    "BattleResolver",
    "BattleService",
    "BattleSubmission",
    "CoinFlipResolver",
    "CombatUnit",
    "TeamSetup",
    "battle_seed",
    "field_to_team_setup",
    "opponent_to_team_setup",
]
