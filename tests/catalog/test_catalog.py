"""Tests for the unit catalog: lookups, tier scaling, decks, bot teams, versions."""

from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from gridrun.catalog import UnitCatalog, UnitRole, upgrade_cost
from gridrun.catalog.registry import _DATA_DIR
from gridrun.core.models import DECK_SIZE, SpellTiming
from gridrun.errors import FactionNotFound, UnitNotFound


# ---------------------------------------------------------------------------
# Unit lookups and tiers
# ---------------------------------------------------------------------------

class TestUnitLookup:
    def test_lookup_known_unit(self, catalog):
        footman = catalog.lookup("footman")
        assert footman.faction == "humans"
        assert footman.role is UnitRole.TANK
        assert footman.base_cost == 3

    def test_lookup_unknown_unit_raises(self, catalog):
        with pytest.raises(UnitNotFound):
            catalog.lookup("dragon")
        assert catalog.get_unit("dragon") is None

    def test_upgrade_base_cost_defaults_for_unknown(self, catalog):
        assert catalog.upgrade_base_cost("dragon") == 3
        assert catalog.upgrade_base_cost("champion") == 8

    def test_units_for_faction(self, catalog):
        humans = catalog.units_for_faction("humans")
        assert len(humans) == 12
        assert all(u.faction == "humans" for u in humans)
        with pytest.raises(FactionNotFound):
            catalog.units_for_faction("elves")


class TestTierScaling:
    def test_stat_multipliers(self, catalog):
        footman = catalog.lookup("footman")
        assert (footman.stats_at(1).hp, footman.stats_at(2).hp, footman.stats_at(3).hp) == (100, 150, 200)
        assert footman.stats_at(2).atk == 18
        assert footman.stats_at(3).armor == 40

    def test_scaling_rounds_half_up(self, catalog):
        # 45 * 1.5 = 67.5
        assert catalog.resolve_stats("apprentice", 2).hp == 68

    def test_speed_is_not_scaled(self, catalog):
        footman = catalog.lookup("footman")
        assert footman.stats_at(3).speed == footman.stats_at(1).speed

    def test_t3_overrides(self, catalog):
        assert catalog.resolve_stats("archer", 3).range == 5
        assert catalog.resolve_stats("archer", 2).range == catalog.resolve_stats("archer", 1).range
        assert catalog.resolve_stats("ghoul", 3).attack_count == 3

    def test_names_and_abilities_by_tier(self, catalog):
        footman = catalog.lookup("footman")
        assert footman.ability_at(1) is None
        assert footman.ability_at(3) == "shield_wall"
        assert footman.name_at(1) == footman.name

    def test_invalid_tier(self, catalog):
        with pytest.raises(ValueError):
            catalog.lookup("footman").stats_at(4)


class TestUpgradeCost:
    @pytest.mark.parametrize("base,tier,expected", [
        (3, 2, 3), (3, 3, 5), (5, 3, 8), (8, 3, 12), (4, 3, 6),
    ])
    def test_upgrade_cost(self, base, tier, expected):
        assert upgrade_cost(base, tier) == expected

    @pytest.mark.parametrize("tier", [1, 4])
    def test_upgrade_cost_rejects_other_tiers(self, tier):
        with pytest.raises(ValueError):
            upgrade_cost(3, tier)


# ---------------------------------------------------------------------------
# Factions, leaders, spells
# ---------------------------------------------------------------------------

class TestFactions:
    def test_leaders_belong_to_factions(self, catalog):
        assert catalog.default_leader("humans").id == "commander_aldric"
        assert catalog.default_leader("undead").id == "lich_king_malachar"

    def test_each_leader_has_two_spells(self, catalog):
        for leader in catalog.leaders.values():
            assert len(leader.spell_ids) == 2
            for spell_id in leader.spell_ids:
                assert catalog.get_spell(spell_id).faction == leader.faction

    def test_spell_recommended_timing(self, catalog):
        assert catalog.get_spell("rally").recommended_timing is SpellTiming.EARLY

    def test_faction_bonus(self, catalog):
        assert catalog.apply_faction_bonus(100, "humans", "hp") == 110
        assert catalog.apply_faction_bonus(100, "humans", "atk") == 100
        assert catalog.apply_faction_bonus(10, "undead", "atk") == 12
        with pytest.raises(FactionNotFound):
            catalog.apply_faction_bonus(10, "elves", "atk")


# ---------------------------------------------------------------------------
# Starter decks and bot teams
# ---------------------------------------------------------------------------

class TestStarterDecks:
    @pytest.mark.parametrize("faction", ["humans", "undead"])
    def test_deck_size_and_unique_ids(self, catalog, faction):
        deck = catalog.starter_deck(faction)
        assert len(deck) == DECK_SIZE
        assert len({c.instance_id for c in deck}) == DECK_SIZE
        assert all(c.tier == 1 for c in deck)
        assert all(catalog.lookup(c.unit_id).faction == faction for c in deck)

    def test_instance_ids_count_copies(self, catalog):
        ids = [c.instance_id for c in catalog.starter_deck("humans")]
        assert ids[:3] == ["footman-1", "footman-2", "swordsman-1"]

    def test_unknown_faction(self, catalog):
        with pytest.raises(FactionNotFound):
            catalog.starter_deck("elves")


class TestBotTeams:
    def test_variants_sorted(self, catalog):
        variants = catalog.bot_teams(1, "humans")
        assert [t.variant for t in variants] == [1, 2, 3]

    def test_every_round_has_teams(self, catalog):
        for round_number in range(1, 13):
            for faction in ("humans", "undead"):
                assert catalog.bot_teams(round_number, faction)

    def test_teams_fit_the_grid(self, catalog):
        for round_number in range(1, 13):
            for team in catalog.bot_teams(round_number, "undead"):
                cells = [(u.position.x, u.position.y) for u in team.units]
                assert len(cells) == len(set(cells))
                assert all(u.position.in_bounds() for u in team.units)

    def test_budget_clamped(self, catalog):
        assert catalog.budget_for_round(1) == 10
        assert catalog.budget_for_round(0) == 10
        assert catalog.budget_for_round(99) == 65


# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------

class TestUnitsVersion:
    def test_v2_extends_v1(self):
        v1, v2 = UnitCatalog("v1"), UnitCatalog("v2")
        assert set(v1.units) == set(v2.units)

    def test_v2_overrides_apply(self, tmp_path: Path):
        data_dir = tmp_path / "data"
        shutil.copytree(_DATA_DIR, data_dir)
        (data_dir / "units_v2.json").write_text(json.dumps({
            "extends": "v1",
            "overrides": {"footman": {"cost": 4, "hp": 110}},
        }))

        v2 = UnitCatalog("v2", data_dir=data_dir)
        assert v2.unit_cost("footman") == 4
        assert v2.resolve_stats("footman", 1).hp == 110
        assert v2.unit_cost("knight") == 5
        assert UnitCatalog("v1", data_dir=data_dir).unit_cost("footman") == 3

    def test_unknown_version(self):
        with pytest.raises(ValueError, match="Unknown units version"):
            UnitCatalog("v9")
