"""전투 도메인 모델 (DB 무관)"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class CardType(str, Enum):
    SKILL = "Skill"
    ITEM = "Item"
    BASIC = "Basic"
    PERSONALITY = "Personality"
    CONSUMABLE = "Consumable"
    NOISE = "noise"


class CostType(str, Enum):
    MP = "mp"
    VITALITY = "vitality"


@dataclass(frozen=True)
class Card:
    """카드 원형 - 불변. cards.json에서 로드."""

    card_id: str
    name: str
    card_type: CardType
    cost: int = 0
    power: int = 0
    description: str = ""

    cost_type: CostType = CostType.MP
    is_magic: bool = False
    effect_id: Optional[str] = None  # "atk_up", "poison", ...
    effect_duration: int = 0
    usable: bool = True  # noise 카드는 False


@dataclass(frozen=True)
class CardInstance:
    """덱 안의 카드 한 장.

    보유 카드: instance_tag=None, instance_id == template_id
    주입 카드: instance_tag로 구분, source에 출처 ("Party:<이름>", "World:Ruined" 등)
    """

    card: Card
    instance_tag: Optional[str] = None
    source: Optional[str] = None

    @property
    def template_id(self) -> str:
        return self.card.card_id

    @property
    def instance_id(self) -> str:
        if self.instance_tag is None:
            return self.card.card_id
        return f"{self.card.card_id}#{self.instance_tag}"

    @property
    def is_injected(self) -> bool:
        return self.instance_tag is not None


@dataclass
class PartyMember:
    """동료 (전투 스냅샷)"""

    member_id: str
    name: str
    durability: int
    max_durability: int
    cover_rate: int = 0  # 0~100
    is_active: bool = True
    inject_cards: tuple[str, ...] = ()
    defense: int = 0
    slug: Optional[str] = None

    @property
    def can_fight(self) -> bool:
        """덱 주입/엄호 자격: 활성 + 내구도 > 0"""
        return self.is_active and self.durability > 0


@dataclass(frozen=True)
class DamageRoute:
    """피격 대상 결정 결과. 적용은 호출자 몫."""

    target: str  # "Player" | "PartyMember"
    damage: int
    is_covered: bool
    target_id: Optional[str] = None
    message: str = ""


PLAYER_TARGET = "Player"
MEMBER_TARGET = "PartyMember"


@dataclass
class StatusEffect:
    """상태 이상. duration = 남은 턴 수."""

    effect_id: str
    duration: int


@dataclass
class TickResult:
    """턴 종료 처리 결과"""

    effects: list[StatusEffect] = field(default_factory=list)
    hp_delta: int = 0  # 양수 = 회복, 음수 = 피해
    expired: list[str] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)
