"""Plain-text reports for runs and the snapshot pool."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gridrun.config import EconomyConfig
from gridrun.core.models import MAX_LOSSES, MAX_WINS, Run
from gridrun.progression import economy

if TYPE_CHECKING:
    from gridrun.matchmaking.snapshots import SnapshotStats


def run_report(run: Run, config: EconomyConfig | None = None) -> str:
    """Generate a human-readable summary of one run.

    Active runs also show the gold an unbeaten finish would reach, using
    *config* for the reward table.
    """
    wins_needed, losses_allowed = run.remaining_battles()
    lines: list[str] = []

    lines.append("=" * 60)
    lines.append(f"Run {run.id} | {run.faction} / {run.leader_id}")
    lines.append(f"Player: {run.player_id} | Status: {run.status.value}")
    lines.append("=" * 60)

    lines.append("")
    lines.append("## Progress")
    lines.append(f"  Record:       {run.wins}/{MAX_WINS} wins, {run.losses}/{MAX_LOSSES} losses")
    lines.append(f"  Round:        {run.round}")
    lines.append(f"  Wins needed:  {wins_needed} | Losses allowed: {losses_allowed}")
    lines.append(f"  Gold:         {run.gold}")
    lines.append(
        f"  Win streak:   {run.consecutive_wins}"
        f" ({economy.streak_total(run.consecutive_wins, config)} gold)"
    )
    if run.is_active:
        unbeaten = economy.project_gold_after_wins(
            run.gold, run.consecutive_wins, wins_needed, config,
        )
        lines.append(f"  Gold if unbeaten: {unbeaten}")
    lines.append(f"  Rating:       {run.rating}")
    lines.append(
        f"  Cards:        {len(run.hand)} hand, {len(run.field)} field,"
        f" {len(run.remaining_deck)} deck"
    )

    if run.battle_history:
        lines.append("")
        lines.append("## Battles")
        for entry in run.battle_history:
            lines.append(
                f"  R{entry.round:<3d} {entry.result:5s}"
                f"  gold={entry.gold_earned:+d}  rating={entry.rating_change:+d}"
                f"  vs {entry.opponent.name} ({entry.opponent.faction}, {entry.opponent.rating})"
            )

    if run.field:
        lines.append("")
        lines.append("## Field")
        for unit in sorted(run.field, key=lambda u: (u.position.y, u.position.x)):
            lines.append(
                f"  ({unit.position.x},{unit.position.y})  {unit.unit_id:20s} T{unit.tier}"
            )

    return "\n".join(lines)


def pool_report(stats: SnapshotStats) -> str:
    lines = [
        "## Snapshot Pool",
        f"  Total snapshots: {stats.total_count}",
        f"  Avg rating:      {stats.avg_rating}",
    ]
    for wins, count in stats.by_wins.items():
        lines.append(f"  {wins} wins: {count}")
    return "\n".join(lines)
