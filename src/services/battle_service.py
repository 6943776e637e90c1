"""전투 Service - 덱 구성, 적 공격 라우팅, 카드 피해 계산

전투 진행(턴, AI)은 외부 몫. 이 Service는 규칙 계산과 결과 반영만 한다.
동료 피해는 damage_routed 이벤트로 PartyService가 반영한다.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.orm import Session

from src.core.battle.cover import apply_damage_to_player, route_damage
from src.core.battle.damage import calculate_damage
from src.core.battle.deck import WorldTier, build_battle_deck, can_afford_card
from src.core.battle.models import (
    MEMBER_TARGET,
    CardInstance,
    DamageRoute,
    PartyMember,
    StatusEffect,
)
from src.core.battle.registry import CardRegistry
from src.core.dice import Dice, SystemDice
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.db.models import PartyMemberModel, PlayerModel
from src.services.errors import PlayerNotFoundError

logger = logging.getLogger(__name__)

SOURCE = "battle_service"


@dataclass
class EnemyAttackOutcome:
    """적 공격 1회의 결과"""

    route: DamageRoute
    damage: int
    player_hp: int
    player_defeated: bool = False
    member_durability: Optional[int] = None
    member_knocked_out: bool = False


@dataclass
class CardPlayOutcome:
    card_id: str
    damage: int
    effect_id: Optional[str] = None
    effect_duration: int = 0
    messages: list[str] = field(default_factory=list)


class BattleService:
    """전투 규칙 적용"""

    def __init__(
        self,
        db: Session,
        event_bus: EventBus,
        card_registry: CardRegistry,
        dice: Optional[Dice] = None,
        default_world_tier: str = WorldTier.STAGNANT.value,
    ):
        self._db = db
        self._bus = event_bus
        self._cards = card_registry
        self._dice: Dice = dice or SystemDice()
        self._default_tier = default_world_tier

    # === 덱 ===

    def build_deck(
        self, player_id: str, world_tier: Optional[str] = None
    ) -> list[CardInstance]:
        """보유 카드 + 활성 동료 주입 + 세계 정세 주입"""
        player = self._get_player(player_id)

        base_deck = []
        for card_id in player.deck or []:
            card = self._cards.get(card_id)
            if card is None:
                logger.warning("Deck card %s of %s not found, skipped", card_id, player_id)
                continue
            base_deck.append(card)

        return build_battle_deck(
            base_deck,
            self._active_party(player_id),
            world_tier or self._default_tier,
            player.level,
            card_lookup=self._cards.get,
        )

    # === 적 공격 ===

    def enemy_attack(
        self,
        player_id: str,
        power: int,
        is_magic: bool = False,
        attacker_effects: Optional[list[StatusEffect]] = None,
        defender_effects: Optional[list[StatusEffect]] = None,
    ) -> EnemyAttackOutcome:
        """피격 대상 결정 → 대상 방어력으로 피해 계산 → 반영.

        엄호는 원 피해(power)로 판정하고, 방어력은 실제로 맞는 쪽 것을 쓴다.
        """
        self._bus.reset_chain()
        player = self._get_player(player_id)
        party = self._active_party(player_id)

        route = route_damage(party, power, self._dice)

        if route.target == MEMBER_TARGET:
            member = next(m for m in party if m.member_id == route.target_id)
            damage = calculate_damage(
                power, member.defense, attacker_effects, None, is_magic
            )
            self._emit_routed(player_id, route, damage)
            orm = self._db.get(PartyMemberModel, member.member_id)
            self._db.refresh(orm)
            return EnemyAttackOutcome(
                route=route,
                damage=damage,
                player_hp=player.hp,
                member_durability=orm.durability,
                member_knocked_out=orm.durability <= 0,
            )

        damage = calculate_damage(
            power, player.defense, attacker_effects, defender_effects, is_magic
        )
        updates = apply_damage_to_player(player.hp, damage)
        player.hp = updates["hp"]
        self._db.commit()
        self._emit_routed(player_id, route, damage)

        if updates["defeated"]:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.PLAYER_DEFEATED,
                    data={"player_id": player_id},
                    source=SOURCE,
                )
            )
            logger.info("Player %s defeated", player_id)

        return EnemyAttackOutcome(
            route=route,
            damage=damage,
            player_hp=player.hp,
            player_defeated=updates["defeated"],
        )

    # === 카드 사용 ===

    def play_card(
        self,
        player_id: str,
        card_id: str,
        target_def: int,
        current_mp: int,
        attacker_effects: Optional[list[StatusEffect]] = None,
        defender_effects: Optional[list[StatusEffect]] = None,
    ) -> CardPlayOutcome:
        """플레이어 카드 → 적 피해. 비용 부족/사용 불가 카드는 ValueError."""
        player = self._get_player(player_id)
        card = self._cards.get(card_id)
        if card is None:
            raise LookupError(f"Card not found: {card_id}")
        if not can_afford_card(card, current_mp, player.vitality):
            raise ValueError(f"Cannot play card {card_id}")

        damage = 0
        if card.power > 0:
            damage = calculate_damage(
                card.power,
                target_def,
                attacker_effects,
                defender_effects,
                is_magic=card.is_magic,
                attacker_atk=player.atk,
            )
        return CardPlayOutcome(
            card_id=card.card_id,
            damage=damage,
            effect_id=card.effect_id,
            effect_duration=card.effect_duration,
            messages=[f"{card.name}: {damage} damage"] if damage else [card.name],
        )

    # === 내부 ===

    def _emit_routed(self, player_id: str, route: DamageRoute, damage: int) -> None:
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.DAMAGE_ROUTED,
                data={
                    "player_id": player_id,
                    "target": route.target,
                    "member_id": route.target_id,
                    "damage": damage,
                },
                source=SOURCE,
            )
        )

    def _get_player(self, player_id: str) -> PlayerModel:
        player = self._db.get(PlayerModel, player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        return player

    def _active_party(self, player_id: str) -> list[PartyMember]:
        rows = (
            self._db.query(PartyMemberModel)
            .filter(
                PartyMemberModel.owner_id == player_id,
                PartyMemberModel.is_active.is_(True),
            )
            .order_by(PartyMemberModel.position, PartyMemberModel.joined_at)
            .all()
        )
        return [
            PartyMember(
                member_id=r.member_id,
                name=r.name,
                durability=r.durability,
                max_durability=r.max_durability,
                cover_rate=r.cover_rate,
                is_active=r.is_active,
                inject_cards=tuple(r.inject_cards or ()),
                defense=r.defense,
                slug=r.slug,
            )
            for r in rows
        ]
