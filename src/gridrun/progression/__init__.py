"""Run progression: state machine, economy, draft, placement and upgrades."""

from gridrun.progression.draft import DraftService
from gridrun.progression.placement import PlacementService
from gridrun.progression.runs import RunService
from gridrun.progression.upgrade import UpgradeService

__all__ = [
    "DraftService",
    "PlacementService",
    "RunService",
    "UpgradeService",
]
