"""Tests for bot team generation."""

from __future__ import annotations

import pytest

from gridrun.core.models import MAX_FIELD_UNITS
from gridrun.core.rng import GameRNG
from gridrun.matchmaking.bots import BotTeamGenerator


class TestCuratedBots:
    def test_same_seed_same_bot(self, bots, new_run):
        run = new_run()
        for seed in range(20):
            assert bots.generate(run, seed) == bots.generate(run, seed)

    def test_faction_follows_first_draw(self, bots, new_run):
        run = new_run()
        for seed in range(20):
            expected = "humans" if GameRNG(seed=seed).random_float() > 0.5 else "undead"
            assert bots.generate(run, seed).faction == expected

    def test_team_is_a_curated_variant(self, bots, catalog, new_run):
        run = new_run()
        bot = bots.generate(run, 11)
        variants = catalog.bot_teams(run.round, bot.faction)
        chosen = next(t for t in variants if t.variant == bot.variant)
        assert bot.team == chosen.units

    def test_identity_and_rating(self, bots, new_run):
        run = new_run().model_copy(update={"wins": 4, "rating": 1130})
        bot = bots.generate(run, 123)
        assert bot.id == "bot_123"
        assert bot.name == "Bot_4W"
        assert bot.rating == 1130
        assert bot.is_bot

    @pytest.mark.parametrize("wins,expected", [(0, 0.5), (4, 0.7), (8, 0.9), (9, 0.95)])
    def test_difficulty_scales_with_wins(self, bots, new_run, wins, expected):
        run = new_run().model_copy(update={"wins": wins})
        assert bots.generate(run, 1).difficulty == pytest.approx(expected)

    def test_spell_timings_cover_leader_spells(self, bots, catalog, new_run):
        bot = bots.generate(new_run(), 5)
        leader = catalog.get_leader(bot.leader_id)
        assert leader.faction == bot.faction
        assert [t.spell_id for t in bot.spell_timings] == leader.spell_ids


class TestBudgetFill:
    def test_fallback_when_no_curated_team(self, bots, catalog, new_run, monkeypatch):
        monkeypatch.setattr(catalog, "bot_teams", lambda round_number, faction: [])
        run = new_run()
        bot = bots.generate(run, 7)

        assert bot.variant is None
        assert bot.team
        spent = sum(catalog.unit_cost(u.unit_id) for u in bot.team)
        assert spent <= catalog.budget_for_round(run.round)
        assert all(u.tier == 1 for u in bot.team)
        assert all(catalog.lookup(u.unit_id).faction == bot.faction for u in bot.team)
        assert bot == bots.generate(run, 7)

    def test_positions_fill_rows_in_order(self, catalog):
        team = BotTeamGenerator(catalog).fill_budget("undead", 30, GameRNG(seed=2))
        cells = [(u.position.x, u.position.y) for u in team]
        assert cells == [(i % 8, i // 8) for i in range(len(team))]

    def test_large_budget_takes_every_unit(self, catalog):
        team = BotTeamGenerator(catalog).fill_budget("humans", 1000, GameRNG(seed=3))
        assert len(team) == len(catalog.units_for_faction("humans"))
        assert len(team) <= MAX_FIELD_UNITS

    def test_budget_respected(self, catalog):
        for seed in range(20):
            team = BotTeamGenerator(catalog).fill_budget("humans", 10, GameRNG(seed=seed))
            assert sum(catalog.unit_cost(u.unit_id) for u in team) <= 10
