"""Tests for GameRNG."""

import pytest

from gridrun.core.rng import GameRNG


class TestGameRNG:
    def test_same_seed_same_sequence(self):
        a, b = GameRNG(seed=7), GameRNG(seed=7)
        assert [a.random_float() for _ in range(10)] == [b.random_float() for _ in range(10)]

    def test_random_index_in_range(self):
        rng = GameRNG(seed=3)
        for _ in range(200):
            assert 0 <= rng.random_index(5) < 5

    def test_random_index_rejects_empty(self):
        with pytest.raises(ValueError):
            GameRNG(seed=1).random_index(0)

    def test_shuffled_leaves_input(self):
        items = list(range(10))
        shuffled = GameRNG(seed=5).shuffled(items)
        assert items == list(range(10))
        assert sorted(shuffled) == items

    def test_fork_is_stable_and_independent(self):
        parent = GameRNG(seed=99)
        assert parent.fork("matchmaking").seed == GameRNG(seed=99).fork("matchmaking").seed
        assert parent.fork("matchmaking").seed != parent.fork("resolver").seed
