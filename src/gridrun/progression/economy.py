"""Gold economy: battle rewards, streak bonuses and affordability.

Rules:
- Win: 7 gold, plus ``(streak - 2) * 2`` once the win streak reaches 3
  (streak 1 -> 7, 2 -> 7, 3 -> 9, 4 -> 11, 5 -> 13).
- Loss: a flat 9 gold regardless of streak, higher than the win base so a
  losing player can catch up.
- Upgrades: ``T1 -> T2`` costs the unit's base cost, ``T2 -> T3`` costs
  ``round(base * 1.5)``.

All functions are pure and take an optional :class:`EconomyConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass

from gridrun.catalog.units import upgrade_cost as _tier_upgrade_cost
from gridrun.config import EconomyConfig, RunConfig

_DEFAULT_ECONOMY = EconomyConfig()


@dataclass(frozen=True)
class GoldReward:
    """Breakdown of gold earned from one battle."""

    base: int
    streak_bonus: int
    total: int
    is_win: bool
    streak: int


def _economy(config: EconomyConfig | None) -> EconomyConfig:
    return config if config is not None else _DEFAULT_ECONOMY


def streak_bonus(consecutive_wins: int, config: EconomyConfig | None = None) -> int:
    cfg = _economy(config)
    if consecutive_wins < cfg.streak_threshold:
        return 0
    return (consecutive_wins - cfg.streak_threshold + 1) * cfg.streak_step


def calculate_win_reward(consecutive_wins: int, config: EconomyConfig | None = None) -> GoldReward:
    """Gold for a win that brought the streak to *consecutive_wins*."""
    cfg = _economy(config)
    bonus = streak_bonus(consecutive_wins, cfg)
    return GoldReward(
        base=cfg.win_base,
        streak_bonus=bonus,
        total=cfg.win_base + bonus,
        is_win=True,
        streak=consecutive_wins,
    )


def calculate_loss_reward(consecutive_losses: int, config: EconomyConfig | None = None) -> GoldReward:
    cfg = _economy(config)
    return GoldReward(
        base=cfg.loss_reward,
        streak_bonus=0,
        total=cfg.loss_reward,
        is_win=False,
        streak=consecutive_losses,
    )


def calculate_reward(is_win: bool, streak: int, config: EconomyConfig | None = None) -> GoldReward:
    if is_win:
        return calculate_win_reward(streak, config)
    return calculate_loss_reward(streak, config)


def can_afford(gold: int, cost: int) -> bool:
    return gold >= cost


def upgrade_cost(base_cost: int, target_tier: int) -> int:
    """Gold to raise a unit with *base_cost* to *target_tier* (2 or 3)."""
    return _tier_upgrade_cost(base_cost, target_tier)


def starting_gold(config: RunConfig | None = None) -> int:
    return (config or RunConfig()).starting_gold


def project_gold_after_wins(
    current_gold: int,
    current_streak: int,
    wins: int,
    config: EconomyConfig | None = None,
) -> int:
    """Gold after *wins* more consecutive wins starting from *current_streak*."""
    total = current_gold
    for i in range(1, wins + 1):
        total += calculate_win_reward(current_streak + i, config).total
    return total


def streak_total(wins: int, config: EconomyConfig | None = None) -> int:
    """Total gold earned by an unbroken streak of *wins* from zero."""
    return project_gold_after_wins(0, 0, wins, config)
