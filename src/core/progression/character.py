"""캐릭터 생성 시 나이별 기본 스탯

늦게 시작할수록 체력/덱 코스트는 높고 남은 활력은 적다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from src.core.dice import Dice, SystemDice

from .rules import BASE_HP_MAX, BASE_HP_MIN

MIN_START_AGE = 16
MAX_START_AGE = 25


@dataclass(frozen=True)
class BaseStats:
    archetype: str
    hp: int
    max_deck_cost: int
    vitality: int


LATE_BLOOMER = BaseStats(archetype="Late Bloomer", hp=16, max_deck_cost=8, vitality=190)
STANDARD = BaseStats(archetype="Standard", hp=20, max_deck_cost=10, vitality=150)
VETERAN = BaseStats(archetype="Veteran", hp=24, max_deck_cost=12, vitality=110)


def base_stats_for_age(age: int) -> BaseStats:
    """16~18 Late Bloomer, 19~22 Standard, 23~25 Veteran.

    범위 밖 나이는 ValueError.
    """
    if not MIN_START_AGE <= age <= MAX_START_AGE:
        raise ValueError(
            f"Starting age must be {MIN_START_AGE}-{MAX_START_AGE}, got {age}"
        )
    if age <= 18:
        return LATE_BLOOMER
    if age <= 22:
        return STANDARD
    return VETERAN


@dataclass(frozen=True)
class StartingStats:
    """캐릭터 생성 결과 (편차 적용 후)"""

    archetype: str
    age: int
    max_hp: int
    max_deck_cost: int
    max_vitality: int


def starting_hp_for_age(age: int) -> int:
    """16세 BASE_HP_MIN ~ 25세 BASE_HP_MAX 선형 보간"""
    span = MAX_START_AGE - MIN_START_AGE
    clamped = max(MIN_START_AGE, min(age, MAX_START_AGE))
    return BASE_HP_MIN + (clamped - MIN_START_AGE) * (BASE_HP_MAX - BASE_HP_MIN) // span


def roll_starting_stats(age: int, dice: Optional[Dice] = None) -> StartingStats:
    """나이별 기본값 + 편차.

    HP -2~+3, 덱 코스트 0~+1, 최대 활력 -10~+10.
    """
    base = base_stats_for_age(age)
    dice = dice or SystemDice()
    hp_var = dice.randrange(6) - 2
    cost_var = dice.randrange(2)
    vit_var = dice.randrange(21) - 10
    return StartingStats(
        archetype=base.archetype,
        age=age,
        max_hp=starting_hp_for_age(age) + hp_var,
        max_deck_cost=base.max_deck_cost + cost_var,
        max_vitality=base.vitality + vit_var,
    )
