"""Snapshot pool, opponent search and bot generation."""

from gridrun.matchmaking.bots import BotTeamGenerator
from gridrun.matchmaking.matchmaker import MatchResult, Matchmaker
from gridrun.matchmaking.snapshots import SnapshotPool, SnapshotStats, team_from_field

__all__ = [
    "BotTeamGenerator",
    "MatchResult",
    "Matchmaker",
    "SnapshotPool",
    "SnapshotStats",
    "team_from_field",
]
