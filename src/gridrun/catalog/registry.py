"""Unit catalog -- loads and serves unit, faction, leader and bot-team content.

Content lives in JSON files under ``data/``.  The unit table is versioned:
``units_v1.json`` is the stable table and later versions extend it with
per-unit overrides.  The version is fixed when the catalog is constructed;
nothing consults the environment at lookup time.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from gridrun.catalog.factions import (
    FactionDefinition,
    LeaderDefinition,
    SpellDefinition,
)
from gridrun.catalog.units import DEFAULT_BASE_COST, UnitDefinition, UnitStats
from gridrun.core.models import Card, PlacedUnit
from gridrun.errors import FactionNotFound, LeaderNotFound, UnitNotFound

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).resolve().parent / "data"

UNITS_VERSIONS = ("v1", "v2")

_STAT_FIELDS = set(UnitStats.model_fields)


class BotTeam(BaseModel):
    """A hand-authored bot composition for one round and faction."""

    round: int
    variant: int
    faction: str
    total_cost: int
    units: list[PlacedUnit]


def _parse_unit(raw: dict[str, Any], faction: str) -> UnitDefinition:
    """Split a flat JSON row into definition fields and a nested stats block."""
    stats = {k: v for k, v in raw.items() if k in _STAT_FIELDS}
    rest = {k: v for k, v in raw.items() if k not in _STAT_FIELDS}
    return UnitDefinition(faction=faction, stats=UnitStats(**stats), **rest)


def _read_json(path: Path) -> Any:
    with open(path) as f:
        return json.load(f)


class UnitCatalog:
    """Read-only lookup of game content.

    Usage::

        catalog = UnitCatalog(units_version="v1")
        unit = catalog.lookup("footman")
        unit.base_cost, unit.stats_at(2)
        deck = catalog.starter_deck("humans")

    Parameters
    ----------
    units_version:
        Which unit table to load (``"v1"`` or ``"v2"``).
    data_dir:
        Directory containing the JSON content.  Defaults to the packaged data.
    """

    def __init__(self, units_version: str = "v1", data_dir: str | Path | None = None) -> None:
        if units_version not in UNITS_VERSIONS:
            raise ValueError(
                f"Unknown units version {units_version!r}; expected one of {UNITS_VERSIONS}"
            )
        self.units_version = units_version
        self.data_dir = Path(data_dir) if data_dir is not None else _DATA_DIR

        self.units: dict[str, UnitDefinition] = {}
        self.factions: dict[str, FactionDefinition] = {}
        self.leaders: dict[str, LeaderDefinition] = {}
        self.spells: dict[str, SpellDefinition] = {}
        self._faction_units: dict[str, list[str]] = {}
        self._starter_decks: dict[str, list[dict[str, Any]]] = {}
        self._bot_teams: dict[tuple[int, str], list[BotTeam]] = {}
        self._round_budgets: dict[int, int] = {}

        self._load_units(units_version)
        self._load_factions()
        self._load_starter_decks()
        self._load_bot_teams()
        logger.debug(
            "Catalog loaded: %d units (%s), %d factions, %d bot teams",
            len(self.units), units_version, len(self.factions),
            sum(len(v) for v in self._bot_teams.values()),
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _unit_table(self, version: str) -> dict[str, list[dict[str, Any]]]:
        raw = _read_json(self.data_dir / f"units_{version}.json")
        if "extends" not in raw:
            return raw
        table = self._unit_table(raw["extends"])
        overrides: dict[str, dict[str, Any]] = raw.get("overrides", {})
        for rows in table.values():
            for row in rows:
                row.update(overrides.get(row["id"], {}))
        return table

    def _load_units(self, version: str) -> None:
        for faction, rows in self._unit_table(version).items():
            ids: list[str] = []
            for row in rows:
                unit = _parse_unit(row, faction)
                self.units[unit.id] = unit
                ids.append(unit.id)
            self._faction_units[faction] = ids

    def _load_factions(self) -> None:
        raw = _read_json(self.data_dir / "factions.json")
        for item in raw["factions"]:
            faction = FactionDefinition.model_validate(item)
            self.factions[faction.id] = faction
        for item in raw["spells"]:
            spell = SpellDefinition.model_validate(item)
            self.spells[spell.id] = spell
        for item in raw["leaders"]:
            leader = LeaderDefinition.model_validate(item)
            self.leaders[leader.id] = leader

    def _load_starter_decks(self) -> None:
        self._starter_decks = _read_json(self.data_dir / "starter_decks.json")

    def _load_bot_teams(self) -> None:
        raw = _read_json(self.data_dir / "bot_teams.json")
        self._round_budgets = {int(k): v for k, v in raw["budgets"].items()}
        for item in raw["teams"]:
            team = BotTeam.model_validate(item)
            self._bot_teams.setdefault((team.round, team.faction), []).append(team)
        for variants in self._bot_teams.values():
            variants.sort(key=lambda t: t.variant)

    # ------------------------------------------------------------------
    # Unit queries
    # ------------------------------------------------------------------

    def get_unit(self, unit_id: str) -> UnitDefinition | None:
        return self.units.get(unit_id)

    def lookup(self, unit_id: str) -> UnitDefinition:
        """Return the definition for *unit_id* or raise :class:`UnitNotFound`."""
        unit = self.units.get(unit_id)
        if unit is None:
            raise UnitNotFound(unit_id)
        return unit

    def unit_cost(self, unit_id: str) -> int:
        return self.lookup(unit_id).base_cost

    def upgrade_base_cost(self, unit_id: str) -> int:
        """Base cost used for upgrade pricing; unknown units fall back to 3."""
        unit = self.units.get(unit_id)
        return unit.base_cost if unit is not None else DEFAULT_BASE_COST

    def resolve_stats(self, unit_id: str, tier: int) -> UnitStats:
        return self.lookup(unit_id).stats_at(tier)

    def units_for_faction(self, faction: str) -> list[UnitDefinition]:
        """Tier-1 units of *faction* in table order."""
        if faction not in self._faction_units:
            raise FactionNotFound(faction)
        return [self.units[uid] for uid in self._faction_units[faction]]

    # ------------------------------------------------------------------
    # Faction / leader / spell queries
    # ------------------------------------------------------------------

    def get_faction(self, faction_id: str) -> FactionDefinition | None:
        return self.factions.get(faction_id)

    def get_leader(self, leader_id: str) -> LeaderDefinition | None:
        return self.leaders.get(leader_id)

    def get_spell(self, spell_id: str) -> SpellDefinition | None:
        return self.spells.get(spell_id)

    def leaders_for_faction(self, faction: str) -> list[LeaderDefinition]:
        return [l for l in self.leaders.values() if l.faction == faction]

    def spells_for_faction(self, faction: str) -> list[SpellDefinition]:
        return [s for s in self.spells.values() if s.faction == faction]

    def default_leader(self, faction: str) -> LeaderDefinition:
        leaders = self.leaders_for_faction(faction)
        if not leaders:
            raise LeaderNotFound(f"<any {faction} leader>")
        return leaders[0]

    def apply_faction_bonus(self, value: int, faction: str, stat: str) -> int:
        definition = self.factions.get(faction)
        if definition is None:
            raise FactionNotFound(faction)
        return definition.apply_bonus(value, stat)

    # ------------------------------------------------------------------
    # Starter decks and bot teams
    # ------------------------------------------------------------------

    def starter_deck(self, faction: str) -> list[Card]:
        """Expand the faction's starter deck into tier-1 cards.

        Instance ids are ``"<unit_id>-<n>"`` with *n* counting copies of
        that unit from 1, e.g. ``footman-1``, ``footman-2``.
        """
        entries = self._starter_decks.get(faction)
        if entries is None:
            raise FactionNotFound(faction)

        cards: list[Card] = []
        counts: dict[str, int] = {}
        for entry in entries:
            unit_id = entry["unit_id"]
            for _ in range(entry["count"]):
                counts[unit_id] = counts.get(unit_id, 0) + 1
                cards.append(Card(unit_id=unit_id, tier=1, instance_id=f"{unit_id}-{counts[unit_id]}"))
        return cards

    def bot_teams(self, round_number: int, faction: str) -> list[BotTeam]:
        return list(self._bot_teams.get((round_number, faction), []))

    def budget_for_round(self, round_number: int) -> int:
        """Gold budget of a bot team in *round_number*, clamped to known rounds."""
        known = sorted(self._round_budgets)
        clamped = min(max(round_number, known[0]), known[-1])
        return self._round_budgets[clamped]
