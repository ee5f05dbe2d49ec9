"""Placement engine -- moves cards between hand and the 8x2 field grid."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gridrun.core.models import FieldUnit, Position, Run
from gridrun.errors import (
    CardNotInHand,
    InsufficientGold,
    InvalidPosition,
    PositionOccupied,
    UnitAlreadyBattled,
    UnitNotOnField,
)
from gridrun.progression.economy import can_afford

if TYPE_CHECKING:
    from gridrun.catalog.registry import UnitCatalog
    from gridrun.progression.runs import RunService

logger = logging.getLogger(__name__)


def _check_in_bounds(position: Position) -> None:
    if not position.in_bounds():
        raise InvalidPosition(position.x, position.y)


class PlacementService:
    """Place, reposition and remove field units.

    Placing debits the unit's base cost; removing refunds it.  Units that
    have battled stay on the field but can still be repositioned.
    """

    def __init__(self, runs: RunService, catalog: UnitCatalog) -> None:
        self.runs = runs
        self.catalog = catalog

    def place(self, run_id: str, player_id: str, instance_id: str, position: Position) -> Run:
        run = self.runs.load_active(run_id, player_id)

        _check_in_bounds(position)
        occupant = run.occupant(position)
        if occupant is not None:
            raise PositionOccupied(position.x, position.y, occupant.instance_id)
        card = run.find_in_hand(instance_id)
        if card is None:
            raise CardNotInHand(instance_id)
        cost = self.catalog.unit_cost(card.unit_id)
        if not can_afford(run.gold, cost):
            raise InsufficientGold(cost, run.gold, "place unit")

        run.hand = [c for c in run.hand if c.instance_id != instance_id]
        run.field = run.field + [FieldUnit(**card.model_dump(), position=position)]
        run.gold -= cost
        saved = self.runs.commit(run)
        logger.info(
            "Run %s placed %s at (%d, %d) for %d gold",
            run_id, instance_id, position.x, position.y, cost,
        )
        return saved

    def reposition(
        self, run_id: str, player_id: str, instance_id: str, position: Position,
    ) -> Run:
        run = self.runs.load_active(run_id, player_id)

        _check_in_bounds(position)
        unit = run.find_on_field(instance_id)
        if unit is None:
            raise UnitNotOnField(instance_id)
        occupant = run.occupant(position)
        if occupant is not None and occupant.instance_id != instance_id:
            raise PositionOccupied(position.x, position.y, occupant.instance_id)

        run.field = [
            u.model_copy(update={"position": position}) if u.instance_id == instance_id else u
            for u in run.field
        ]
        saved = self.runs.commit(run)
        logger.debug("Run %s moved %s to (%d, %d)", run_id, instance_id, position.x, position.y)
        return saved

    def remove(self, run_id: str, player_id: str, instance_id: str) -> Run:
        """Return an unbattled field unit to hand and refund its base cost."""
        run = self.runs.load_active(run_id, player_id)

        unit = run.find_on_field(instance_id)
        if unit is None:
            raise UnitNotOnField(instance_id)
        if unit.has_battled:
            raise UnitAlreadyBattled(instance_id)

        refund = self.catalog.unit_cost(unit.unit_id)
        run.field = [u for u in run.field if u.instance_id != instance_id]
        run.hand = run.hand + [unit.to_card()]
        run.gold += refund
        saved = self.runs.commit(run)
        logger.info("Run %s removed %s, refunded %d gold", run_id, instance_id, refund)
        return saved
