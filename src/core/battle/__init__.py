"""전투 규칙 Core 패키지

덱 구성, 피해 계산, 엄호 라우팅, 상태 이상.
DB 무관 순수 Python 로직.
"""

from src.core.battle.cover import (
    apply_damage_to_member,
    apply_damage_to_player,
    route_damage,
)
from src.core.battle.damage import MIN_DAMAGE, calculate_damage
from src.core.battle.deck import (
    BASIC_ATTACK,
    BASIC_DEFEND,
    MIN_DECK_SIZE,
    NOISE_CARD,
    ZENITH_SUPPORT_CARD,
    WorldTier,
    build_battle_deck,
    can_afford_card,
)
from src.core.battle.models import (
    Card,
    CardInstance,
    CardType,
    CostType,
    DamageRoute,
    PartyMember,
    StatusEffect,
)
from src.core.battle.registry import CardRegistry, GuestRegistry

__all__ = [
    # models
    "Card",
    "CardInstance",
    "CardType",
    "CostType",
    "DamageRoute",
    "PartyMember",
    "StatusEffect",
    "CardRegistry",
    "GuestRegistry",
    # deck
    "WorldTier",
    "build_battle_deck",
    "can_afford_card",
    "MIN_DECK_SIZE",
    "BASIC_ATTACK",
    "BASIC_DEFEND",
    "NOISE_CARD",
    "ZENITH_SUPPORT_CARD",
    # damage
    "calculate_damage",
    "MIN_DAMAGE",
    # cover
    "route_damage",
    "apply_damage_to_member",
    "apply_damage_to_player",
]
