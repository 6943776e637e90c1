"""캐릭터 생성 스탯 테스트"""

import pytest

from src.core.dice import ScriptedDice
from src.core.progression import base_stats_for_age, roll_starting_stats, starting_hp_for_age


class TestBaseStats:
    def test_archetypes(self):
        assert base_stats_for_age(16).archetype == "Late Bloomer"
        assert base_stats_for_age(18).archetype == "Late Bloomer"
        assert base_stats_for_age(19).archetype == "Standard"
        assert base_stats_for_age(22).archetype == "Standard"
        assert base_stats_for_age(23).archetype == "Veteran"

    def test_later_start_less_vitality(self):
        assert base_stats_for_age(16).vitality > base_stats_for_age(25).vitality

    @pytest.mark.parametrize("age", [15, 26])
    def test_out_of_range(self, age):
        with pytest.raises(ValueError):
            base_stats_for_age(age)


class TestStartingStats:
    def test_hp_range(self):
        assert starting_hp_for_age(16) == 85
        assert starting_hp_for_age(20) == 100
        assert starting_hp_for_age(25) == 120

    def test_no_variance(self):
        stats = roll_starting_stats(20, ScriptedDice(ints=[2, 0, 10]))
        assert stats.archetype == "Standard"
        assert stats.max_hp == 100
        assert stats.max_deck_cost == 10
        assert stats.max_vitality == 150

    def test_max_variance(self):
        stats = roll_starting_stats(20, ScriptedDice(ints=[5, 1, 20]))
        assert stats.max_hp == 103
        assert stats.max_deck_cost == 11
        assert stats.max_vitality == 160

    def test_min_variance(self):
        stats = roll_starting_stats(16, ScriptedDice(ints=[0, 0, 0]))
        assert stats.max_hp == 83
        assert stats.max_vitality == 180
