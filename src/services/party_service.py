"""파티 Service - 동료 CRUD, 합류 이벤트 처리, 피해 반영

Service → Service 금지, EventBus 경유.
- guest_joined(ScenarioService) → 원형으로 동료 생성
- damage_routed(BattleService) → 엄호한 동료 내구도 차감
"""

import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from src.core.battle.cover import apply_damage_to_member
from src.core.battle.models import MEMBER_TARGET, PartyMember
from src.core.battle.registry import GuestRegistry
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.db.models import PartyMemberModel, PlayerModel
from src.services.errors import PartyMemberNotFoundError, PlayerNotFoundError

logger = logging.getLogger(__name__)

SOURCE = "party_service"


class PartyService:
    """동료 관리"""

    def __init__(
        self,
        db: Session,
        event_bus: EventBus,
        guest_registry: Optional[GuestRegistry] = None,
    ):
        self._db = db
        self._bus = event_bus
        self._guests = guest_registry or GuestRegistry()
        self._register_event_handlers()

    def _register_event_handlers(self) -> None:
        self._bus.subscribe(EventTypes.GUEST_JOINED, self._on_guest_joined)
        self._bus.subscribe(EventTypes.DAMAGE_ROUTED, self._on_damage_routed)

    # === 조회 ===

    def get_party(self, player_id: str, active_only: bool = False) -> list[PartyMember]:
        """파티 목록 (position 순 = 엄호 판정 순)"""
        query = self._db.query(PartyMemberModel).filter(
            PartyMemberModel.owner_id == player_id
        )
        if active_only:
            query = query.filter(PartyMemberModel.is_active.is_(True))
        rows = query.order_by(PartyMemberModel.position, PartyMemberModel.joined_at).all()
        return [self._member_to_core(r) for r in rows]

    def get_member(self, member_id: str) -> PartyMember:
        return self._member_to_core(self._get_member_orm(member_id))

    # === 합류 ===

    def add_member(
        self, player_id: str, template: PartyMember, origin: str = "guest"
    ) -> PartyMember:
        """원형으로 동료 생성.

        같은 slug 동료가 이미 있으면 새로 만들지 않는다
        (쓰러지지 않은 비활성 동료는 다시 활성화).
        """
        if self._db.get(PlayerModel, player_id) is None:
            raise PlayerNotFoundError(player_id)

        if template.slug:
            existing = (
                self._db.query(PartyMemberModel)
                .filter(
                    PartyMemberModel.owner_id == player_id,
                    PartyMemberModel.slug == template.slug,
                )
                .first()
            )
            if existing is not None:
                if not existing.is_active and existing.durability > 0:
                    existing.is_active = True
                    self._db.commit()
                    logger.info("Party member rejoined: %s", existing.member_id)
                return self._member_to_core(existing)

        position = (
            self._db.query(PartyMemberModel)
            .filter(PartyMemberModel.owner_id == player_id)
            .count()
        )
        member = PartyMember(
            member_id=str(uuid.uuid4()),
            name=template.name,
            durability=template.max_durability,
            max_durability=template.max_durability,
            cover_rate=template.cover_rate,
            is_active=True,
            inject_cards=template.inject_cards,
            defense=template.defense,
            slug=template.slug,
        )
        orm = self._member_to_orm(member, player_id, origin, position)
        self._db.add(orm)
        self._db.commit()
        logger.info(
            "Party member joined: player=%s, member=%s (%s)",
            player_id,
            member.name,
            member.member_id,
        )
        return member

    def add_guest(self, player_id: str, guest_id: str) -> Optional[PartyMember]:
        """guest_id(slug)로 원형 조회 후 합류. 원형이 없으면 None."""
        template = self._guests.get(guest_id)
        if template is None:
            logger.warning("Unknown guest '%s' for player %s", guest_id, player_id)
            return None
        return self.add_member(player_id, template, origin="guest")

    # === 피해 / 회복 ===

    def apply_damage(self, member_id: str, damage: int) -> dict:
        """동료 피해 반영. 반환: apply_damage_to_member 갱신 필드."""
        orm = self._get_member_orm(member_id)
        updates = apply_damage_to_member(self._member_to_core(orm), damage)
        orm.durability = updates["durability"]
        orm.is_active = updates["is_active"]
        self._db.commit()

        if updates["knocked_out"]:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.PARTY_MEMBER_KNOCKED_OUT,
                    data={"player_id": orm.owner_id, "member_id": member_id},
                    source=SOURCE,
                )
            )
        return updates

    def restore_durability(self, player_id: str, percentage: int) -> int:
        """활성 동료 내구도를 최대치의 percentage% 만큼 회복. 반환: 회복한 인원 수."""
        rows = (
            self._db.query(PartyMemberModel)
            .filter(
                PartyMemberModel.owner_id == player_id,
                PartyMemberModel.is_active.is_(True),
            )
            .all()
        )
        for orm in rows:
            amount = orm.max_durability * percentage // 100
            orm.durability = min(orm.max_durability, orm.durability + amount)
        self._db.commit()
        return len(rows)

    # === 해산 ===

    def dismiss(self, player_id: str, member_id: str) -> PartyMember:
        """동료 해산 (비활성화, 삭제 아님)"""
        orm = self._get_member_orm(member_id)
        if orm.owner_id != player_id:
            raise PartyMemberNotFoundError(member_id)
        orm.is_active = False
        self._db.commit()

        self._bus.emit(
            GameEvent(
                event_type=EventTypes.PARTY_MEMBER_DISMISSED,
                data={"player_id": player_id, "member_id": member_id},
                source=SOURCE,
            )
        )
        logger.info("Party member dismissed: %s", member_id)
        return self._member_to_core(orm)

    # === 이벤트 핸들러 ===

    def _on_guest_joined(self, event: GameEvent) -> None:
        self.add_guest(event.data["player_id"], event.data["guest_id"])

    def _on_damage_routed(self, event: GameEvent) -> None:
        if event.data.get("target") != MEMBER_TARGET or not event.data.get("member_id"):
            return
        self.apply_damage(event.data["member_id"], event.data["damage"])

    # === 변환 ===

    def _get_member_orm(self, member_id: str) -> PartyMemberModel:
        orm = self._db.get(PartyMemberModel, member_id)
        if orm is None:
            raise PartyMemberNotFoundError(member_id)
        return orm

    def _member_to_core(self, orm: PartyMemberModel) -> PartyMember:
        """ORM → Core"""
        return PartyMember(
            member_id=orm.member_id,
            name=orm.name,
            durability=orm.durability,
            max_durability=orm.max_durability,
            cover_rate=orm.cover_rate,
            is_active=orm.is_active,
            inject_cards=tuple(orm.inject_cards or ()),
            defense=orm.defense,
            slug=orm.slug,
        )

    def _member_to_orm(
        self, core: PartyMember, owner_id: str, origin: str, position: int
    ) -> PartyMemberModel:
        """Core → ORM"""
        return PartyMemberModel(
            member_id=core.member_id,
            owner_id=owner_id,
            slug=core.slug,
            name=core.name,
            origin=origin,
            durability=core.durability,
            max_durability=core.max_durability,
            cover_rate=core.cover_rate,
            defense=core.defense,
            inject_cards=list(core.inject_cards),
            is_active=core.is_active,
            position=position,
        )
