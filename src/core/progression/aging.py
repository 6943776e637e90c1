"""노화 - 누적 일수 → 나이 → 활력 감소

나이의 기준은 age + age_days 하나뿐이다. birth_date는 구 데이터
이관용 backfill_age_days_from_birth_date에서만 읽는다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .rules import DAYS_PER_YEAR, TWILIGHT_VITALITY, decay_rate_for_age

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AgingResult:
    age: int
    age_days: int
    years_added: int
    vitality: int
    max_vitality: int
    vitality_decay: int

    @property
    def aged(self) -> bool:
        return self.years_added > 0


def advance_age(
    age: int,
    age_days: int,
    days: int,
    vitality: int,
    max_vitality: int,
) -> AgingResult:
    """일수 경과 처리.

    age_days >= 365 이면 지난 햇수만큼 age 증가, age_days는 365로 나눈 나머지.
    새로 맞은 나이마다 연령대별 감소량을 max_vitality에서 뺀다
    (40대 -2, 50대 -5, 60대 이상 -10). vitality는 새 max_vitality를 넘지 않는다.
    """
    total_days = age_days + max(0, days)
    years = total_days // DAYS_PER_YEAR
    new_days = total_days % DAYS_PER_YEAR

    decay = sum(decay_rate_for_age(age + y + 1) for y in range(years))
    new_max_vitality = max(0, max_vitality - decay)
    new_vitality = max(0, min(vitality, new_max_vitality))

    if years:
        logger.info(
            "Aged %d → %d (vitality decay %d, max_vitality %d → %d)",
            age,
            age + years,
            decay,
            max_vitality,
            new_max_vitality,
        )

    return AgingResult(
        age=age + years,
        age_days=new_days,
        years_added=years,
        vitality=new_vitality,
        max_vitality=new_max_vitality,
        vitality_decay=decay,
    )


def vitality_status(vitality: int) -> str:
    """'Prime' | 'Twilight' | 'Retired'"""
    if vitality <= 0:
        return "Retired"
    if vitality < TWILIGHT_VITALITY:
        return "Twilight"
    return "Prime"


def backfill_age_days_from_birth_date(
    birth_date: date, today: Optional[date] = None
) -> tuple[int, int]:
    """구 데이터 이관: birth_date → (age, age_days).

    런타임 계산에 쓰지 않는다. 이관 스크립트에서 한 번만 호출.
    """
    today = today or date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1

    try:
        last_birthday = birth_date.replace(year=birth_date.year + age)
    except ValueError:
        # 2/29 생일
        last_birthday = date(birth_date.year + age, 3, 1)
    return age, (today - last_birthday).days % DAYS_PER_YEAR
