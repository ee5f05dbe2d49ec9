"""Tests for the battle flow: seeds, auto results, log retries, submission."""

from __future__ import annotations

import logging

import pytest

from gridrun.battle import BattleOutcome, BattleResolver, BattleService, battle_seed
from gridrun.core.models import (
    MAX_LOSSES,
    BotOpponent,
    PlacedUnit,
    Position,
    RunStatus,
)
from gridrun.errors import RunAlreadyCompleted
from gridrun.storage import InMemoryBattleLogRepository


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class FixedResolver(BattleResolver):
    """Always reports the same winner."""

    def __init__(self, winner: str) -> None:
        self.winner = winner
        self.calls = 0

    def simulate(self, team_a, team_b, seed):
        self.calls += 1
        return BattleOutcome(winner=self.winner, rounds_elapsed=4, events=[{"seed": seed}])


class FlakyLogRepository(InMemoryBattleLogRepository):
    """Fails the first *failures* writes with an OSError."""

    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures
        self.attempts = 0

    def save(self, log):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise OSError("disk full")
        return super().save(log)


def _bot(team=None) -> BotOpponent:
    if team is None:
        team = [PlacedUnit(unit_id="zombie", position=Position(x=0, y=0))]
    return BotOpponent(
        id="bot_9", name="Bot_0W", faction="undead", leader_id="lich_king_malachar",
        team=team, spell_timings=[], difficulty=0.5,
    )


@pytest.fixture
def make_service(runs, pool, matchmaker, catalog):
    def _make(resolver=None, logs=None) -> BattleService:
        return BattleService(
            runs, pool, matchmaker, resolver or FixedResolver("a"),
            logs if logs is not None else InMemoryBattleLogRepository(), catalog,
        )
    return _make


@pytest.fixture
def fielded(drafted_run, placement):
    run = drafted_run()
    for x, card in enumerate(list(run.hand)):
        run = placement.place(run.id, "p1", card.instance_id, Position(x=x, y=0))
    return run


# ---------------------------------------------------------------------------
# Seeds
# ---------------------------------------------------------------------------

class TestBattleSeed:
    def test_known_value(self):
        # "a-0": 97 -> 97*31+45 -> 3052*31+48
        assert battle_seed("a", 0) == 94660

    def test_deterministic_and_non_negative(self):
        for n in range(20):
            seed = battle_seed("0f8fad5b-d9cb-469f-a165-70867728950e", n)
            assert seed == battle_seed("0f8fad5b-d9cb-469f-a165-70867728950e", n)
            assert 0 <= seed <= 2**31

    def test_differs_per_battle(self):
        assert battle_seed("run", 0) != battle_seed("run", 1)


# ---------------------------------------------------------------------------
# Simulation and logs
# ---------------------------------------------------------------------------

class TestSimulateAndRecordLog:
    def test_win_is_logged(self, make_service, fielded):
        logs = InMemoryBattleLogRepository()
        report = make_service(logs=logs).simulate_and_record_log(fielded, _bot())
        assert report.result == "win"
        assert report.replay_available
        assert report.rounds == 4
        log = logs.logs[report.battle_id]
        assert log.winner == "player"
        assert log.seed == report.seed == battle_seed(fielded.id, 0)
        assert log.opponent_id == "bot_9"
        assert len(log.player_team) == 3

    def test_draw_counts_as_loss(self, make_service, fielded):
        report = make_service(FixedResolver("draw")).simulate_and_record_log(fielded, _bot())
        assert report.result == "loss"

    def test_empty_field_loses_without_battle(self, make_service, new_run):
        resolver, logs = FixedResolver("a"), InMemoryBattleLogRepository()
        report = make_service(resolver, logs).simulate_and_record_log(new_run(), _bot())
        assert (report.result, report.replay_available, report.rounds) == ("loss", False, 0)
        assert resolver.calls == 0
        assert logs.logs == {}

    def test_empty_opponent_wins_without_battle(self, make_service, fielded):
        resolver = FixedResolver("b")
        report = make_service(resolver).simulate_and_record_log(fielded, _bot(team=[]))
        assert (report.result, report.replay_available) == ("win", False)
        assert resolver.calls == 0

    def test_log_retry_recovers(self, make_service, fielded, caplog):
        logs = FlakyLogRepository(failures=2)
        with caplog.at_level(logging.WARNING, logger="gridrun.battle.service"):
            report = make_service(logs=logs).simulate_and_record_log(fielded, _bot())
        assert report.replay_available
        assert logs.attempts == 3
        assert caplog.text.count("Battle log write failed") == 2

    def test_log_retries_exhausted(self, make_service, fielded, caplog):
        logs = FlakyLogRepository(failures=10)
        with caplog.at_level(logging.WARNING, logger="gridrun.battle.service"):
            report = make_service(logs=logs).simulate_and_record_log(fielded, _bot())
        assert not report.replay_available
        assert report.result == "win"
        assert report.battle_id
        assert logs.attempts == 3
        assert any(r.levelno == logging.ERROR for r in caplog.records)


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------

class TestSubmitBattle:
    def test_win_applies_reward_and_rating(self, make_service, fielded, snapshot_repo):
        submission = make_service(FixedResolver("a")).submit_battle(fielded.id, "p1")
        run = submission.run

        assert submission.report.result == "win"
        assert submission.gold_earned == 7
        assert run.gold == fielded.gold + 7
        assert run.rating == 1015
        assert run.wins == 1
        assert all(u.has_battled for u in run.field)
        assert run.battle_history[-1].battle_id == submission.report.battle_id
        assert run.battle_history[-1].opponent.name == submission.opponent.summary().name
        assert snapshot_repo.count_for_player("p1") == 1

    def test_loss_applies_reward_and_rating(self, make_service, fielded):
        submission = make_service(FixedResolver("b")).submit_battle(fielded.id, "p1")
        assert submission.gold_earned == 9
        assert submission.rating_change == -10
        assert submission.run.rating == 990
        assert submission.run.consecutive_losses == 1

    def test_streak_bonus_uses_post_battle_streak(self, make_service, fielded):
        service = make_service(FixedResolver("a"))
        earned = [service.submit_battle(fielded.id, "p1").gold_earned for _ in range(4)]
        assert earned == [7, 7, 9, 11]

    def test_snapshot_failure_does_not_block_battle(self, make_service, new_run, snapshot_repo, caplog):
        run = new_run()
        with caplog.at_level(logging.WARNING, logger="gridrun.battle.service"):
            submission = make_service().submit_battle(run.id, "p1")
        assert submission.report.result == "loss"
        assert submission.run.losses == 1
        assert snapshot_repo.all() == []
        assert "Snapshot for run" in caplog.text

    def test_default_spell_timings_are_mid(self, make_service, fielded, snapshot_repo):
        make_service().submit_battle(fielded.id, "p1")
        [snapshot] = snapshot_repo.all()
        assert {t.timing.value for t in snapshot.spell_timings} == {"mid"}

    def test_previous_snapshot_becomes_opponent(self, make_service, fielded, drafted_run, placement):
        service = make_service(FixedResolver("a"))
        service.submit_battle(fielded.id, "p1")

        other = drafted_run("p2", "undead")
        other = placement.place(other.id, "p2", other.hand[0].instance_id, Position(x=0, y=0))
        submission = service.submit_battle(other.id, "p2")
        assert not submission.opponent.is_bot
        assert submission.opponent.id == "p1"

    def test_run_plays_to_completion(self, make_service, fielded):
        service = make_service(FixedResolver("b"))
        run = fielded
        while run.is_active:
            run = service.submit_battle(run.id, "p1").run
        assert run.status is RunStatus.LOST
        assert run.losses == MAX_LOSSES
        assert len(run.battle_history) == MAX_LOSSES
        assert run.card_count() == len(run.deck)
        with pytest.raises(RunAlreadyCompleted):
            service.submit_battle(run.id, "p1")
