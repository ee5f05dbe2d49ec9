"""Battle log record written after a simulated battle.

A plain ``dataclass`` so it serialises with :func:`dataclasses.asdict`.
The log is a derived artifact for replays; losing it never changes the
recorded win/loss.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from gridrun.battle.mapper import TeamSetup


@dataclass
class BattleLog:
    """Everything needed to replay one battle.

    Attributes
    ----------
    run_id:
        Run the battle belongs to.
    player_id:
        Submitting player.
    opponent_id:
        Snapshot owner's player id, or the bot id.
    seed:
        Seed passed to the resolver.
    winner:
        ``"player"``, ``"opponent"`` or ``"draw"``.
    """

    run_id: str
    player_id: str
    opponent_id: str
    seed: int
    winner: str
    rounds: int
    player_team: TeamSetup
    opponent_team: TeamSetup
    events: list[dict[str, Any]] = field(default_factory=list)
    created_at: str = ""
    id: str | None = None
