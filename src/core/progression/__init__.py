"""성장/노화 엔진 (DB 무관)"""

from .aging import (
    AgingResult,
    advance_age,
    backfill_age_days_from_birth_date,
    vitality_status,
)
from .character import (
    BaseStats,
    StartingStats,
    base_stats_for_age,
    roll_starting_stats,
    starting_hp_for_age,
)
from .completion import CompletionResult, QuestDefinition, complete_quest
from .growth import LevelUpResult, apply_experience, earned_exp, quest_base_exp
from .rules import exp_threshold

__all__ = [
    "AgingResult",
    "BaseStats",
    "StartingStats",
    "CompletionResult",
    "LevelUpResult",
    "QuestDefinition",
    "advance_age",
    "apply_experience",
    "backfill_age_days_from_birth_date",
    "base_stats_for_age",
    "complete_quest",
    "earned_exp",
    "exp_threshold",
    "quest_base_exp",
    "roll_starting_stats",
    "starting_hp_for_age",
    "vitality_status",
]
