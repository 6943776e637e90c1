"""퀘스트 완료 처리 - 경험치, 레벨업, 노화, 보상

complete_quest는 플레이어 스냅샷을 바꾸지 않고
영속 계층이 그대로 반영할 필드 갱신 dict를 돌려준다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from src.core.player import PlayerSnapshot
from src.core.scenario.enums import ScenarioResult

from .aging import AgingResult, advance_age
from .growth import LevelUpResult, apply_experience, earned_exp, quest_base_exp
from .rules import DEFAULT_DAYS_PER_QUEST

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuestDefinition:
    """보상 계산에 필요한 퀘스트 정보"""

    quest_id: str
    difficulty: int = 1
    exp_reward: Optional[int] = None  # None/0이면 difficulty * 20
    gold_reward: int = 0
    days_success: int = DEFAULT_DAYS_PER_QUEST
    days_failure: int = DEFAULT_DAYS_PER_QUEST

    def days_for(self, result: ScenarioResult) -> int:
        days = self.days_success if result == ScenarioResult.SUCCESS else self.days_failure
        return days if days and days > 0 else DEFAULT_DAYS_PER_QUEST


@dataclass(frozen=True)
class CompletionResult:
    result: ScenarioResult
    days_passed: int
    earned_exp: int
    gold_gained: int
    level_up: LevelUpResult
    aging: AgingResult
    updates: dict[str, Any] = field(default_factory=dict)

    @property
    def leveled_up(self) -> bool:
        return self.level_up.leveled_up

    def summary(self) -> dict[str, Any]:
        """세션 행에 저장하는 보상 요약 (JSON)"""
        return {
            "result": self.result.value,
            "earned_exp": self.earned_exp,
            "gold_gained": self.gold_gained,
            "days_passed": self.days_passed,
            "old_level": self.level_up.old_level,
            "new_level": self.level_up.new_level,
            "age": self.aging.age,
            "vitality_decay": self.aging.vitality_decay,
        }


def complete_quest(
    player: PlayerSnapshot,
    quest: QuestDefinition,
    result: "ScenarioResult | str",
    battles_fought: int = 0,
) -> CompletionResult:
    """퀘스트 종료 처리.

    1. 성공 시 경험치 = 기본(보상 exp 또는 difficulty*20) + 30 * 전투 횟수
    2. 레벨업 루프 (실패 시 경험치 0, 레벨/HP/코스트/방어 그대로)
    3. 경과 일수만큼 노화 (성공 days_success / 실패 days_failure)
    4. 성공 시 골드 보상
    5. current_quest_id 해제
    """
    result = ScenarioResult(result)
    if result == ScenarioResult.SUCCESS:
        gained = earned_exp(
            quest_base_exp(quest.exp_reward, quest.difficulty), battles_fought
        )
        level_up = apply_experience(player, gained)
    else:
        gained = 0
        level_up = LevelUpResult.unchanged(player)

    days = quest.days_for(result)
    aging = advance_age(
        player.age,
        player.age_days,
        days,
        player.vitality,
        player.max_vitality,
    )

    gold_gained = quest.gold_reward if result == ScenarioResult.SUCCESS else 0

    updates: dict[str, Any] = {
        "exp": level_up.exp,
        "level": level_up.new_level,
        "max_hp": level_up.max_hp,
        "hp": min(level_up.hp, level_up.max_hp),
        "max_deck_cost": level_up.max_deck_cost,
        "defense": level_up.defense,
        "age": aging.age,
        "age_days": aging.age_days,
        "max_vitality": aging.max_vitality,
        "vitality": aging.vitality,
        "gold": player.gold + gold_gained,
        "current_quest_id": None,
    }

    logger.info(
        "Quest %s completed: player=%s, result=%s, exp+%d, gold+%d, days=%d",
        quest.quest_id,
        player.player_id,
        result.value,
        gained,
        gold_gained,
        days,
    )

    return CompletionResult(
        result=result,
        days_passed=days,
        earned_exp=gained,
        gold_gained=gold_gained,
        level_up=level_up,
        aging=aging,
        updates=updates,
    )
