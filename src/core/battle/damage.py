"""피해 계산 - 결정론적 순수 함수

전투 수치의 단일 기준. 단계마다 정수 내림, 순서 고정:
1. base = card_power + attacker_atk
2. 공격 측 atk_up 배율 → 내림
3. 물리면 target_def 차감, 최소 1
4. 방어 측 def_up 배율 → 내림, 최소 1
"""

import math
from typing import Optional

from .models import StatusEffect
from .status_effects import attack_modifier, defense_modifier

MIN_DAMAGE = 1


def calculate_damage(
    card_power: int,
    target_def: int,
    attacker_effects: Optional[list[StatusEffect]] = None,
    defender_effects: Optional[list[StatusEffect]] = None,
    is_magic: bool = False,
    attacker_atk: int = 0,
) -> int:
    """공격 결과 피해량. 항상 1 이상."""
    damage = card_power + attacker_atk
    damage = math.floor(damage * attack_modifier(attacker_effects or []))

    if not is_magic:
        damage = max(MIN_DAMAGE, damage - target_def)

    damage = math.floor(damage * defense_modifier(defender_effects or []))
    return max(MIN_DAMAGE, damage)
