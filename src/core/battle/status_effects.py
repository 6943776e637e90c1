"""상태 이상 - 부여/판정/턴 종료 처리

같은 효과를 다시 걸면 효과는 중첩되지 않고 기간만 갱신된다.
"""

import logging

from .models import StatusEffect, TickResult

logger = logging.getLogger(__name__)

ATK_UP = "atk_up"  # 공격 x1.5
DEF_UP = "def_up"  # 피해 x0.5 (DEF 차감 후)
TAUNT = "taunt"
REGEN = "regen"  # 턴 종료 시 MaxHP 5% 회복
POISON = "poison"  # 턴 종료 시 MaxHP 5% 피해
STUN = "stun"
BLEED = "bleed"  # 카드 사용마다 3 피해
FEAR = "fear"

ATTACK_UP_MULTIPLIER = 1.5
DEFENSE_UP_MULTIPLIER = 0.5
TICK_RATIO = 0.05
BLEED_DAMAGE = 3


def has_effect(effects: list[StatusEffect], effect_id: str) -> bool:
    return any(e.effect_id == effect_id and e.duration > 0 for e in effects)


def apply_effect(
    effects: list[StatusEffect], effect_id: str, duration: int
) -> list[StatusEffect]:
    """효과 부여. 이미 있으면 기간만 덮어쓴다. 새 리스트 반환."""
    if any(e.effect_id == effect_id for e in effects):
        return [
            StatusEffect(e.effect_id, duration) if e.effect_id == effect_id else e
            for e in effects
        ]
    return [*effects, StatusEffect(effect_id, duration)]


def remove_effect(effects: list[StatusEffect], effect_id: str) -> list[StatusEffect]:
    return [e for e in effects if e.effect_id != effect_id]


def attack_modifier(effects: list[StatusEffect]) -> float:
    return ATTACK_UP_MULTIPLIER if has_effect(effects, ATK_UP) else 1.0


def defense_modifier(effects: list[StatusEffect]) -> float:
    return DEFENSE_UP_MULTIPLIER if has_effect(effects, DEF_UP) else 1.0


def bleed_damage(effects: list[StatusEffect]) -> int:
    return BLEED_DAMAGE if has_effect(effects, BLEED) else 0


def is_stunned(effects: list[StatusEffect]) -> bool:
    return has_effect(effects, STUN)


def tick_effects(
    effects: list[StatusEffect], max_hp: int, target_name: str = ""
) -> TickResult:
    """턴 종료: regen/poison 적용 → 기간 1 감소 → 만료 제거.

    regen/poison 양은 MaxHP의 5% (최소 1).
    """
    result = TickResult()
    amount = max(1, int(max_hp * TICK_RATIO))

    if has_effect(effects, REGEN):
        result.hp_delta += amount
        result.messages.append(f"{target_name} regen +{amount}")
    if has_effect(effects, POISON):
        result.hp_delta -= amount
        result.messages.append(f"{target_name} poison -{amount}")

    for effect in effects:
        remaining = effect.duration - 1
        if remaining <= 0:
            result.expired.append(effect.effect_id)
            result.messages.append(f"{target_name} {effect.effect_id} expired")
        else:
            result.effects.append(StatusEffect(effect.effect_id, remaining))

    if result.expired:
        logger.debug("Effects expired on %s: %s", target_name or "?", result.expired)
    return result
