"""SQLAlchemy declarative base and ORM models."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from src.core.player import PlayerSnapshot


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""


class PlayerModel(Base):
    """ORM model for players."""

    __tablename__ = "players"

    player_id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, default="")

    # 성장
    level: Mapped[int] = mapped_column(Integer, default=1)
    exp: Mapped[int] = mapped_column(Integer, default=0)
    hp: Mapped[int] = mapped_column(Integer, default=85)
    max_hp: Mapped[int] = mapped_column(Integer, default=85)
    initial_hp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    atk: Mapped[int] = mapped_column(Integer, default=1)
    defense: Mapped[int] = mapped_column(Integer, default=1)
    max_deck_cost: Mapped[int] = mapped_column(Integer, default=8)

    # 수명 (나이의 기준은 age + age_days)
    age: Mapped[int] = mapped_column(Integer, default=18)
    age_days: Mapped[int] = mapped_column(Integer, default=0)
    vitality: Mapped[int] = mapped_column(Integer, default=100)
    max_vitality: Mapped[int] = mapped_column(Integer, default=100)

    gold: Mapped[int] = mapped_column(Integer, default=0)
    tags: Mapped[list] = mapped_column(JSON, default=list)
    deck: Mapped[list] = mapped_column(JSON, default=list)  # 보유 카드 ID
    alignment: Mapped[dict] = mapped_column(JSON, default=dict)

    current_quest_id: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    party_members: Mapped[list["PartyMemberModel"]] = relationship(
        "PartyMemberModel",
        back_populates="owner",
        cascade="all, delete-orphan",
    )

    def to_snapshot(self) -> PlayerSnapshot:
        return PlayerSnapshot(
            player_id=self.player_id,
            level=self.level,
            exp=self.exp,
            hp=self.hp,
            max_hp=self.max_hp,
            initial_hp=self.initial_hp,
            atk=self.atk,
            defense=self.defense,
            max_deck_cost=self.max_deck_cost,
            age=self.age,
            age_days=self.age_days,
            vitality=self.vitality,
            max_vitality=self.max_vitality,
            gold=self.gold,
            tags=frozenset(self.tags or ()),
            card_ids=frozenset(self.deck or ()),
            alignment=dict(self.alignment or {}),
            current_quest_id=self.current_quest_id,
        )

    def apply_updates(self, updates: dict) -> None:
        """엔진이 돌려준 갱신 필드 반영. 모르는 키는 KeyError."""
        for key, value in updates.items():
            if key not in self.__table__.columns:
                raise KeyError(f"Unknown player field: {key}")
            setattr(self, key, value)


class PartyMemberModel(Base):
    """ORM model for party members."""

    __tablename__ = "party_members"

    member_id: Mapped[str] = mapped_column(String, primary_key=True)
    owner_id: Mapped[str] = mapped_column(
        String, ForeignKey("players.player_id", ondelete="CASCADE"), nullable=False
    )
    slug: Mapped[str | None] = mapped_column(String, nullable=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    origin: Mapped[str] = mapped_column(String, default="guest")  # guest | hired

    durability: Mapped[int] = mapped_column(Integer, nullable=False)
    max_durability: Mapped[int] = mapped_column(Integer, nullable=False)
    cover_rate: Mapped[int] = mapped_column(Integer, default=0)
    defense: Mapped[int] = mapped_column(Integer, default=0)
    inject_cards: Mapped[list] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 파티 내 순서. 엄호 판정 순서와 같다
    position: Mapped[int] = mapped_column(Integer, default=0)

    joined_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    owner: Mapped["PlayerModel"] = relationship(
        "PlayerModel", back_populates="party_members"
    )


class ScenarioModel(Base):
    """ORM model for imported quest scenarios."""

    __tablename__ = "scenarios"

    scenario_id: Mapped[str] = mapped_column(String, primary_key=True)
    title: Mapped[str] = mapped_column(String, default="")
    # 정규화된 그래프 {"entry_id": ..., "nodes": {...}}
    script: Mapped[dict] = mapped_column(JSON, nullable=False)
    source_path: Mapped[str | None] = mapped_column(Text, nullable=True)

    difficulty: Mapped[int] = mapped_column(Integer, default=1)
    exp_reward: Mapped[int | None] = mapped_column(Integer, nullable=True)
    gold_reward: Mapped[int] = mapped_column(Integer, default=0)
    days_success: Mapped[int] = mapped_column(Integer, default=1)
    days_failure: Mapped[int] = mapped_column(Integer, default=1)

    imported_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)


class QuestSessionModel(Base):
    """ORM model for a player's scenario progress."""

    __tablename__ = "quest_sessions"

    session_id: Mapped[str] = mapped_column(String, primary_key=True)
    player_id: Mapped[str] = mapped_column(
        String, ForeignKey("players.player_id", ondelete="CASCADE"), nullable=False
    )
    scenario_id: Mapped[str] = mapped_column(
        String, ForeignKey("scenarios.scenario_id"), nullable=False
    )

    current_node_id: Mapped[str] = mapped_column(String, nullable=False)
    phase: Mapped[str] = mapped_column(String, nullable=False)  # SessionPhase
    history: Mapped[list] = mapped_column(JSON, default=list)
    battles_fought: Mapped[int] = mapped_column(Integer, default=0)
    joined_guests: Mapped[list] = mapped_column(JSON, default=list)
    pending_enemy_group_id: Mapped[str | None] = mapped_column(String, nullable=True)
    result: Mapped[str | None] = mapped_column(String, nullable=True)

    vitality_spent: Mapped[int] = mapped_column(Integer, default=0)
    gold_spent: Mapped[int] = mapped_column(Integer, default=0)
    completion: Mapped[dict | None] = mapped_column(JSON, nullable=True)  # 보상 요약

    started_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
