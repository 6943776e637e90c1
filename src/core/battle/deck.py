"""전투 덱 구성 - 기본 덱 + 동료 주입 + 세계 정세 주입

순수 함수. 같은 입력이면 같은 구성 (주입 카드의 instance_tag는
덱 안에서 순번으로 매겨지므로 역시 같다).
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional, Sequence

from .models import Card, CardInstance, CardType, CostType, PartyMember

logger = logging.getLogger(__name__)

CardLookup = Callable[[str], Optional[Card]]

MIN_DECK_SIZE = 5
NOISE_LEVEL_THRESHOLD = 5  # 이 레벨 초과부터 노이즈 주입

# === 내장 카드 원형 ===
BASIC_ATTACK = Card(
    card_id="card_basic_attack",
    name="Attack",
    card_type=CardType.BASIC,
    cost=0,
    power=10,
    description="Basic attack",
)
BASIC_DEFEND = Card(
    card_id="card_basic_defend",
    name="Defend",
    card_type=CardType.BASIC,
    cost=0,
    power=0,
    description="Reduces damage",
    effect_id="def_up",
    effect_duration=1,
)
NOISE_CARD = Card(
    card_id="card_noise",
    name="Noise",
    card_type=CardType.NOISE,
    cost=0,
    power=0,
    description="Unusable. Clogs the hand.",
    usable=False,
)
ZENITH_SUPPORT_CARD = Card(
    card_id="card_world_blessing",
    name="Blessing of Prosperity",
    card_type=CardType.ITEM,
    cost=0,
    power=30,
    description="Restores HP. Free.",
    effect_id="regen",
    effect_duration=3,
)


class WorldTier(str, Enum):
    """세계 위험 등급 (외부에서 계산되어 주어짐)"""

    ZENITH = "Zenith"
    PROSPEROUS = "Prosperous"
    STAGNANT = "Stagnant"
    DECLINING = "Declining"
    RUINED = "Ruined"

    @classmethod
    def parse(cls, value: "str | WorldTier | None") -> "WorldTier":
        """영문/일문 라벨 모두 허용. 모르는 값은 STAGNANT (주입 없음)."""
        if isinstance(value, WorldTier):
            return value
        if value is None:
            return cls.STAGNANT
        tier = _TIER_ALIASES.get(value.strip().lower())
        if tier is None:
            logger.warning("Unknown world tier %r, treated as Stagnant", value)
            return cls.STAGNANT
        return tier


_TIER_ALIASES: dict[str, WorldTier] = {
    "zenith": WorldTier.ZENITH,
    "絶頂": WorldTier.ZENITH,
    "prosperous": WorldTier.PROSPEROUS,
    "繁栄": WorldTier.PROSPEROUS,
    "stagnant": WorldTier.STAGNANT,
    "normal": WorldTier.STAGNANT,
    "停滞": WorldTier.STAGNANT,
    "declining": WorldTier.DECLINING,
    "衰退": WorldTier.DECLINING,
    "ruined": WorldTier.RUINED,
    "崩壊": WorldTier.RUINED,
}

NOISE_COUNT_BY_TIER: dict[WorldTier, int] = {
    WorldTier.DECLINING: 1,
    WorldTier.RUINED: 3,
}


class _TagCounter:
    """덱 하나 안에서 주입 카드 instance_tag 발급"""

    def __init__(self) -> None:
        self._next = 0

    def inject(self, card: Card, source: str) -> CardInstance:
        self._next += 1
        return CardInstance(card=card, instance_tag=f"inj{self._next}", source=source)


def build_battle_deck(
    base_deck: Sequence[Card | CardInstance],
    members: Sequence[PartyMember],
    world_tier: "str | WorldTier | None",
    player_level: int,
    card_lookup: CardLookup,
) -> list[CardInstance]:
    """전투 덱 구성.

    1. 기본 덱 복사 (원본 변경 없음)
    2. 활성 + 내구도 > 0 동료의 inject_cards 각 1장 (source="Party:<이름>")
    3. 쇠퇴 1장 / 붕괴 3장 노이즈 (레벨 5 초과일 때만)
    4. 절정: 무료 지원 카드 1장
    5. 5장 미만이면 기본 공격/방어를 번갈아 채움
    """
    tier = WorldTier.parse(world_tier)
    counter = _TagCounter()

    deck: list[CardInstance] = [
        c if isinstance(c, CardInstance) else CardInstance(card=c) for c in base_deck
    ]

    for member in members:
        if not member.can_fight:
            continue
        for card_id in member.inject_cards:
            card = card_lookup(card_id)
            if card is None:
                logger.warning(
                    "Inject card %s of %s not found, skipped", card_id, member.name
                )
                continue
            deck.append(counter.inject(card, f"Party:{member.name}"))

    noise_count = NOISE_COUNT_BY_TIER.get(tier, 0)
    if noise_count and player_level > NOISE_LEVEL_THRESHOLD:
        for _ in range(noise_count):
            deck.append(counter.inject(NOISE_CARD, f"World:{tier.value}"))

    if tier == WorldTier.ZENITH:
        deck.append(counter.inject(ZENITH_SUPPORT_CARD, f"World:{tier.value}"))

    padding = (BASIC_ATTACK, BASIC_DEFEND)
    while len(deck) < MIN_DECK_SIZE:
        filler = padding[len(deck) % 2]
        deck.append(counter.inject(filler, "Padding"))

    logger.debug(
        "Battle deck built: %d cards (%d injected, tier=%s, lv=%d)",
        len(deck),
        sum(1 for c in deck if c.is_injected),
        tier.value,
        player_level,
    )
    return deck


def can_afford_card(card: Card, current_mp: int, current_vitality: int) -> bool:
    """카드 사용 비용 확인. cost_type에 따라 MP 또는 활력."""
    if not card.usable:
        return False
    if card.cost_type == CostType.VITALITY:
        return current_vitality >= card.cost
    return current_mp >= card.cost
