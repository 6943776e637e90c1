"""플레이어 Service - 캐릭터 생성, 조회, 보유 카드/태그"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from src.core.dice import Dice, SystemDice
from src.core.player import PlayerSnapshot
from src.core.progression.character import roll_starting_stats
from src.db.models import PlayerModel
from src.services.errors import PlayerNotFoundError

logger = logging.getLogger(__name__)


class PlayerService:
    """플레이어 CRUD"""

    def __init__(self, db: Session, dice: Optional[Dice] = None):
        self._db = db
        self._dice: Dice = dice or SystemDice()

    def create_player(
        self,
        player_id: str,
        age: int,
        name: str = "",
        deck: Optional[list[str]] = None,
    ) -> PlayerSnapshot:
        """나이별 기본 스탯 + 편차로 캐릭터 생성.

        이미 있는 ID면 ValueError, 시작 나이 범위(16~25) 밖이면 ValueError.
        """
        if self._db.get(PlayerModel, player_id) is not None:
            raise ValueError(f"Player already exists: {player_id}")

        stats = roll_starting_stats(age, self._dice)
        orm = PlayerModel(
            player_id=player_id,
            name=name,
            level=1,
            exp=0,
            hp=stats.max_hp,
            max_hp=stats.max_hp,
            initial_hp=stats.max_hp,
            atk=1,
            defense=1,
            max_deck_cost=stats.max_deck_cost,
            age=age,
            age_days=0,
            vitality=stats.max_vitality,
            max_vitality=stats.max_vitality,
            gold=0,
            tags=[],
            deck=list(deck or []),
            alignment={},
        )
        self._db.add(orm)
        self._db.commit()
        logger.info(
            "Player created: %s (%s, age %d, hp %d, vitality %d)",
            player_id,
            stats.archetype,
            age,
            stats.max_hp,
            stats.max_vitality,
        )
        return orm.to_snapshot()

    def get_player(self, player_id: str) -> PlayerSnapshot:
        return self._get(player_id).to_snapshot()

    def add_cards(self, player_id: str, card_ids: list[str]) -> PlayerSnapshot:
        orm = self._get(player_id)
        orm.deck = list(orm.deck or []) + list(card_ids)
        self._db.commit()
        return orm.to_snapshot()

    def add_tags(self, player_id: str, tags: list[str]) -> PlayerSnapshot:
        orm = self._get(player_id)
        current = list(orm.tags or [])
        orm.tags = current + [t for t in tags if t not in current]
        self._db.commit()
        return orm.to_snapshot()

    def _get(self, player_id: str) -> PlayerModel:
        orm = self._db.get(PlayerModel, player_id)
        if orm is None:
            raise PlayerNotFoundError(player_id)
        return orm
