"""피해 라우팅 (엄호) - 플레이어를 향한 공격을 동료가 대신 맞는지 판정

판정 순서는 파티 목록 순서 그대로. 자격(활성 + 내구도 > 0)이 있는
동료마다 d100을 한 번 굴려 cover_rate 미만이면 그 동료가 맞는다.
라우팅은 아무것도 변경하지 않는다. 피해 적용은 apply_* 함수가 갱신 필드로 돌려준다.
"""

import logging
from typing import Optional, Sequence

from src.core.dice import Dice, SystemDice

from .models import MEMBER_TARGET, PLAYER_TARGET, DamageRoute, PartyMember

logger = logging.getLogger(__name__)


def route_damage(
    members: Sequence[PartyMember],
    raw_damage: int,
    dice: Optional[Dice] = None,
) -> DamageRoute:
    """피격 대상 결정."""
    dice = dice or SystemDice()

    for member in members:
        if not member.can_fight:
            continue
        roll = dice.randrange(100)
        if roll < member.cover_rate:
            logger.info(
                "Cover: %s takes the hit (roll=%d < %d, dmg=%d)",
                member.name,
                roll,
                member.cover_rate,
                raw_damage,
            )
            return DamageRoute(
                target=MEMBER_TARGET,
                target_id=member.member_id,
                damage=raw_damage,
                is_covered=True,
                message=f"{member.name} takes the hit! (-{raw_damage} Durability)",
            )

    return DamageRoute(
        target=PLAYER_TARGET,
        damage=raw_damage,
        is_covered=False,
        message=f"Direct hit to Player! (-{raw_damage} HP)",
    )


def apply_damage_to_member(member: PartyMember, damage: int) -> dict:
    """동료 피해 적용 → 갱신 필드.

    Returns:
        {"durability": int, "is_active": bool, "knocked_out": bool}

    내구도 0이면 로테이션에서 제외 (삭제 아님).
    """
    new_durability = max(0, member.durability - damage)
    knocked_out = new_durability <= 0
    if knocked_out:
        logger.info("Party member %s knocked out", member.member_id)
    return {
        "durability": new_durability,
        "is_active": member.is_active and not knocked_out,
        "knocked_out": knocked_out,
    }


def apply_damage_to_player(hp: int, damage: int) -> dict:
    """플레이어 HP 피해 적용 → {"hp": int, "defeated": bool}"""
    new_hp = max(0, hp - damage)
    return {"hp": new_hp, "defeated": new_hp <= 0}
