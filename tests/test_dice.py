"""주사위 소스 테스트"""

import pytest

from src.core.dice import ScriptedDice, SystemDice


class TestSystemDice:
    def test_seed_reproducible(self):
        a, b = SystemDice(seed=7), SystemDice(seed=7)
        assert [a.randrange(100) for _ in range(10)] == [b.randrange(100) for _ in range(10)]
        assert a.random() == b.random()

    def test_ranges(self):
        dice = SystemDice(seed=1)
        for _ in range(200):
            assert 0 <= dice.randrange(6) < 6
            assert 0.0 <= dice.random() < 1.0

    def test_unseeded(self):
        assert 0 <= SystemDice().randrange(3) < 3


class TestScriptedDice:
    def test_queues_independent(self):
        dice = ScriptedDice(floats=[0.25], ints=[4, 9])
        assert dice.randrange(10) == 4
        assert dice.random() == 0.25
        assert dice.randrange(10) == 9
        assert dice.remaining == 0

    def test_exhausted(self):
        with pytest.raises(IndexError):
            ScriptedDice().random()

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            ScriptedDice(ints=[100]).randrange(100)
