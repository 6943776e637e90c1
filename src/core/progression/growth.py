"""경험치 → 레벨업 → 스탯 성장

무작위성 없음. 성장은 레벨만으로 결정된다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from src.core.player import PlayerSnapshot

from .rules import (
    BASE_HP_MIN,
    BATTLE_EXP_BONUS,
    COST_PER_LEVEL,
    DEF_MILESTONE_INTERVAL,
    DEF_PER_MILESTONE,
    HP_PER_LEVEL,
    QUEST_EXP_PER_DIFFICULTY,
    exp_threshold,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LevelUpResult:
    """경험치 적용 결과"""

    old_level: int
    new_level: int
    exp: int
    max_hp: int
    hp: int
    max_deck_cost: int
    defense: int

    @classmethod
    def unchanged(cls, player: PlayerSnapshot) -> "LevelUpResult":
        """경험치 변화 없음 (실패 종료)"""
        return cls(
            old_level=player.level,
            new_level=player.level,
            exp=player.exp,
            max_hp=player.max_hp,
            hp=player.hp,
            max_deck_cost=player.max_deck_cost,
            defense=player.defense,
        )

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level

    @property
    def levels_gained(self) -> int:
        return self.new_level - self.old_level


def quest_base_exp(exp_reward: int | None, difficulty: int) -> int:
    """퀘스트 기본 경험치. 보상 exp가 없으면 difficulty * 20."""
    if exp_reward:
        return exp_reward
    return max(1, difficulty) * QUEST_EXP_PER_DIFFICULTY


def earned_exp(
    base_quest_exp: int,
    battles_fought: int,
    battle_bonus: int = BATTLE_EXP_BONUS,
) -> int:
    """획득 경험치 = 기본 + 전투 보너스 * 전투 횟수"""
    return base_quest_exp + battle_bonus * max(0, battles_fought)


def max_hp_for_level(initial_hp: int, level: int) -> int:
    return initial_hp + (level - 1) * HP_PER_LEVEL


def apply_experience(player: PlayerSnapshot, gained: int) -> LevelUpResult:
    """경험치 가산 후 레벨업 루프.

    while exp >= 100 * level^2: level += 1
    넘은 레벨마다:
    - max_hp = initial_hp + (level-1) * HP_PER_LEVEL, hp 완전 회복
    - max_deck_cost += COST_PER_LEVEL
    - 5의 배수 레벨이면 def +1
    레벨은 내려가지 않는다. exp는 감소하지 않는다.
    """
    exp = player.exp + max(0, gained)
    level = player.level
    max_hp = player.max_hp
    hp = player.hp
    max_deck_cost = player.max_deck_cost
    defense = player.defense
    initial_hp = player.initial_hp or BASE_HP_MIN

    while exp >= exp_threshold(level):
        level += 1
        max_hp = max_hp_for_level(initial_hp, level)
        max_deck_cost += COST_PER_LEVEL
        hp = max_hp
        if level % DEF_MILESTONE_INTERVAL == 0:
            defense += DEF_PER_MILESTONE

    result = LevelUpResult(
        old_level=player.level,
        new_level=level,
        exp=exp,
        max_hp=max_hp,
        hp=hp,
        max_deck_cost=max_deck_cost,
        defense=defense,
    )
    if result.leveled_up:
        logger.info(
            "Level up: player=%s, %d → %d (exp=%d)",
            player.player_id,
            result.old_level,
            result.new_level,
            exp,
        )
    return result
