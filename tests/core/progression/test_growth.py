"""경험치/레벨업 테스트"""

from src.core.player import PlayerSnapshot
from src.core.progression import apply_experience, earned_exp, exp_threshold, quest_base_exp


class TestExperience:
    def test_threshold(self):
        assert exp_threshold(1) == 100
        assert exp_threshold(3) == 900

    def test_quest_base_exp_reward_wins(self):
        assert quest_base_exp(150, 4) == 150

    def test_quest_base_exp_from_difficulty(self):
        assert quest_base_exp(None, 3) == 60
        assert quest_base_exp(0, 0) == 20

    def test_earned_exp_battle_bonus(self):
        assert earned_exp(40, 2) == 100
        assert earned_exp(40, -1) == 40


class TestApplyExperience:
    def test_two_levels_at_once(self):
        player = PlayerSnapshot(player_id="p1", max_deck_cost=8, defense=1)
        result = apply_experience(player, 500)
        assert result.new_level == 3
        assert result.levels_gained == 2
        assert result.exp == 500
        assert result.max_deck_cost == 12
        assert result.defense == 1

    def test_hp_from_initial_hp(self):
        player = PlayerSnapshot(player_id="p1", hp=10, max_hp=100, initial_hp=100)
        result = apply_experience(player, 100)
        assert result.max_hp == 110
        assert result.hp == 110

    def test_missing_initial_hp_uses_base(self):
        player = PlayerSnapshot(player_id="p1")
        assert apply_experience(player, 100).max_hp == 95

    def test_defense_on_milestone(self):
        player = PlayerSnapshot(player_id="p1", level=4, exp=1500, defense=2)
        result = apply_experience(player, 100)
        assert result.new_level == 5
        assert result.defense == 3

    def test_no_level_up_keeps_stats(self):
        player = PlayerSnapshot(player_id="p1", hp=40, max_hp=85)
        result = apply_experience(player, 99)
        assert not result.leveled_up
        assert result.hp == 40
        assert result.exp == 99

    def test_negative_gain_ignored(self):
        player = PlayerSnapshot(player_id="p1", exp=50)
        assert apply_experience(player, -30).exp == 50

    def test_snapshot_not_mutated(self):
        player = PlayerSnapshot(player_id="p1")
        apply_experience(player, 1000)
        assert player.level == 1
        assert player.exp == 0
