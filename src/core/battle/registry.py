"""카드 원형 저장소 - JSON 로드 + 동적 등록"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from .models import Card, CardType, CostType, PartyMember

logger = logging.getLogger(__name__)


def card_from_dict(raw: dict) -> Card:
    """JSON 객체 → Card. 필수: card_id, name, card_type"""
    return Card(
        card_id=raw["card_id"],
        name=raw["name"],
        card_type=CardType(raw["card_type"]),
        cost=int(raw.get("cost", 0)),
        power=int(raw.get("power", 0)),
        description=raw.get("description", ""),
        cost_type=CostType(raw.get("cost_type", "mp")),
        is_magic=bool(raw.get("is_magic", False)),
        effect_id=raw.get("effect_id"),
        effect_duration=int(raw.get("effect_duration", 0)),
        usable=bool(raw.get("usable", True)),
    )


class CardRegistry:
    """
    카드 원형 저장소.
    초기 데이터(JSON) + 동적 등록 관리.
    """

    def __init__(self) -> None:
        self._cards: dict[str, Card] = {}

    def load_from_json(self, path: str | Path) -> int:
        """cards.json 로드. 반환: 로드된 수량. 잘못된 항목은 경고 후 건너뜀."""
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f)

        count = 0
        for raw in raw_list:
            try:
                card = card_from_dict(raw)
            except (KeyError, ValueError) as e:
                logger.warning("Failed to load card: %s: %s", raw.get("card_id", "?"), e)
                continue
            self._cards[card.card_id] = card
            count += 1

        logger.info("Loaded %d cards from %s", count, path)
        return count

    def register(self, card: Card) -> None:
        if card.card_id in self._cards:
            logger.warning("Overwriting existing card: %s", card.card_id)
        self._cards[card.card_id] = card

    def get(self, card_id: str) -> Optional[Card]:
        return self._cards.get(card_id)

    def get_many(self, card_ids: list[str]) -> list[Card]:
        """있는 것만 순서대로 반환."""
        return [c for c in (self._cards.get(cid) for cid in card_ids) if c is not None]

    def count(self) -> int:
        return len(self._cards)


def guest_from_dict(raw: dict) -> PartyMember:
    """JSON 객체 → 동료 원형. member_id는 slug로 채운다 (합류 시 새 ID 발급)."""
    slug = raw["slug"]
    max_durability = int(raw.get("max_durability", raw.get("durability", 100)))
    return PartyMember(
        member_id=slug,
        slug=slug,
        name=raw.get("name", slug),
        durability=int(raw.get("durability", max_durability)),
        max_durability=max_durability,
        cover_rate=max(0, min(100, int(raw.get("cover_rate", 0)))),
        defense=int(raw.get("def", raw.get("defense", 0))),
        inject_cards=tuple(raw.get("inject_cards", ())),
    )


class GuestRegistry:
    """guest_join 노드가 참조하는 동료 원형 (slug 기준)"""

    def __init__(self) -> None:
        self._guests: dict[str, PartyMember] = {}

    def load_from_json(self, path: str | Path) -> int:
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f)

        count = 0
        for raw in raw_list:
            try:
                guest = guest_from_dict(raw)
            except (KeyError, ValueError) as e:
                logger.warning("Failed to load guest: %s: %s", raw.get("slug", "?"), e)
                continue
            self._guests[guest.slug] = guest
            count += 1

        logger.info("Loaded %d guest templates from %s", count, path)
        return count

    def register(self, guest: PartyMember) -> None:
        self._guests[guest.slug or guest.member_id] = guest

    def get(self, slug: str) -> Optional[PartyMember]:
        return self._guests.get(slug)

    def count(self) -> int:
        return len(self._guests)
