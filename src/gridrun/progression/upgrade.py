"""Upgrade engine -- raises field units from tier 1 to 2 to 3 for gold."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gridrun.catalog.units import MAX_TIER
from gridrun.core.models import FieldUnit, Run
from gridrun.errors import InsufficientGold, InvalidUpgrade
from gridrun.progression.economy import can_afford, upgrade_cost

if TYPE_CHECKING:
    from gridrun.catalog.registry import UnitCatalog
    from gridrun.progression.runs import RunService

logger = logging.getLogger(__name__)


@dataclass
class UpgradeCost:
    instance_id: str
    unit_id: str
    current_tier: int
    target_tier: int
    cost: int
    can_afford: bool


@dataclass
class ShopState:
    field: list[FieldUnit]
    gold: int
    upgrade_costs: list[UpgradeCost]


@dataclass
class UpgradeResult:
    upgraded_unit: FieldUnit
    field: list[FieldUnit]
    gold: int
    gold_spent: int
    run: Run


@dataclass
class UpgradeCheck:
    can_upgrade: bool
    reason: str | None = None
    cost: int | None = None


class UpgradeService:
    def __init__(self, runs: RunService, catalog: UnitCatalog) -> None:
        self.runs = runs
        self.catalog = catalog

    def cost_for(self, unit: FieldUnit) -> int:
        return upgrade_cost(self.catalog.upgrade_base_cost(unit.unit_id), unit.tier + 1)

    def _costs(self, run: Run) -> list[UpgradeCost]:
        costs: list[UpgradeCost] = []
        for unit in run.field:
            if unit.tier >= MAX_TIER:
                continue
            cost = self.cost_for(unit)
            costs.append(UpgradeCost(
                instance_id=unit.instance_id,
                unit_id=unit.unit_id,
                current_tier=unit.tier,
                target_tier=unit.tier + 1,
                cost=cost,
                can_afford=can_afford(run.gold, cost),
            ))
        return costs

    # -- queries --------------------------------------------------------------

    def get_shop_state(self, run_id: str, player_id: str) -> ShopState:
        run = self.runs.get_run(run_id, player_id)
        return ShopState(field=list(run.field), gold=run.gold, upgrade_costs=self._costs(run))

    def get_upgrade_options(self, run_id: str, player_id: str) -> list[UpgradeCost]:
        """Upgrades the player can afford right now."""
        run = self.runs.get_run(run_id, player_id)
        return [c for c in self._costs(run) if c.can_afford]

    def _check(self, run: Run, instance_id: str) -> tuple[FieldUnit, int]:
        unit = run.find_on_field(instance_id)
        if unit is None:
            raise InvalidUpgrade("Only units on the field can be upgraded", instance_id)
        if unit.tier >= MAX_TIER:
            raise InvalidUpgrade(f"Unit is already at max tier {MAX_TIER}", instance_id)
        cost = self.cost_for(unit)
        if not can_afford(run.gold, cost):
            raise InsufficientGold(cost, run.gold, "upgrade unit")
        return unit, cost

    def can_upgrade(self, run_id: str, player_id: str, instance_id: str) -> UpgradeCheck:
        """Dry run of :meth:`upgrade_unit`; never mutates the run."""
        run = self.runs.get_run(run_id, player_id)
        if not run.is_active:
            return UpgradeCheck(can_upgrade=False, reason=f"Run is {run.status.value}")
        try:
            _, cost = self._check(run, instance_id)
        except (InvalidUpgrade, InsufficientGold) as exc:
            return UpgradeCheck(can_upgrade=False, reason=exc.message, cost=exc.context.get("required"))
        return UpgradeCheck(can_upgrade=True, cost=cost)

    # -- mutation -------------------------------------------------------------

    def upgrade_unit(self, run_id: str, player_id: str, instance_id: str) -> UpgradeResult:
        run = self.runs.load_active(run_id, player_id)
        unit, cost = self._check(run, instance_id)
        new_tier = unit.tier + 1

        run.field = [
            u.model_copy(update={"tier": new_tier}) if u.instance_id == instance_id else u
            for u in run.field
        ]
        run.deck = [
            c.model_copy(update={"tier": new_tier}) if c.instance_id == instance_id else c
            for c in run.deck
        ]
        run.gold -= cost
        saved = self.runs.commit(run)
        upgraded = unit.model_copy(update={"tier": new_tier})
        logger.info(
            "Run %s upgraded %s (%s) to tier %d for %d gold",
            run_id, instance_id, unit.unit_id, new_tier, cost,
        )
        return UpgradeResult(
            upgraded_unit=upgraded,
            field=saved.field,
            gold=saved.gold,
            gold_spent=cost,
            run=saved,
        )
