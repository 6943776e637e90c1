"""성장 Service - 퀘스트 완료 보상, 레벨업, 노화 반영

scenario_completed(ScenarioService) 구독.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.progression.aging import vitality_status
from src.core.progression.completion import (
    CompletionResult,
    QuestDefinition,
    complete_quest,
)
from src.core.scenario.enums import ScenarioResult
from src.db.models import PlayerModel, QuestSessionModel, ScenarioModel
from src.services.errors import PlayerNotFoundError, ScenarioNotFoundError

logger = logging.getLogger(__name__)

SOURCE = "progression_service"


class ProgressionService:
    """퀘스트 종료 처리"""

    def __init__(self, db: Session, event_bus: EventBus):
        self._db = db
        self._bus = event_bus
        self._register_event_handlers()

    def _register_event_handlers(self) -> None:
        self._bus.subscribe(EventTypes.SCENARIO_COMPLETED, self._on_scenario_completed)

    def complete(
        self,
        player_id: str,
        scenario_id: str,
        result: str,
        battles_fought: int,
        session_id: Optional[str] = None,
    ) -> CompletionResult:
        """보상 계산 → 플레이어 갱신 → 이벤트 발행

        session_id가 주어지면 보상 요약을 해당 세션 행에 저장한다.
        """
        player = self._db.get(PlayerModel, player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        quest = self._quest_definition(scenario_id)

        outcome = complete_quest(
            player.to_snapshot(), quest, ScenarioResult(result), battles_fought
        )
        player.apply_updates(outcome.updates)
        if session_id is not None:
            session = self._db.get(QuestSessionModel, session_id)
            if session is None:
                logger.warning("Quest session %s not found, summary not stored", session_id)
            else:
                session.completion = outcome.summary()
        self._db.commit()

        if outcome.leveled_up:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.PLAYER_LEVELED_UP,
                    data={
                        "player_id": player_id,
                        "old_level": outcome.level_up.old_level,
                        "new_level": outcome.level_up.new_level,
                    },
                    source=SOURCE,
                )
            )
        if outcome.aging.aged:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.PLAYER_AGED,
                    data={
                        "player_id": player_id,
                        "age": outcome.aging.age,
                        "vitality_decay": outcome.aging.vitality_decay,
                    },
                    source=SOURCE,
                )
            )
        if vitality_status(player.vitality) == "Retired":
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.PLAYER_RETIRED,
                    data={"player_id": player_id},
                    source=SOURCE,
                )
            )
            logger.info("Player %s retired (vitality exhausted)", player_id)
        return outcome

    def get_completion(self, session_id: str) -> Optional[dict]:
        """종료된 세션의 보상 요약. 없으면 None."""
        session = self._db.get(QuestSessionModel, session_id)
        return session.completion if session is not None else None

    def _quest_definition(self, scenario_id: str) -> QuestDefinition:
        orm = self._db.get(ScenarioModel, scenario_id)
        if orm is None:
            raise ScenarioNotFoundError(scenario_id)
        return QuestDefinition(
            quest_id=orm.scenario_id,
            difficulty=orm.difficulty,
            exp_reward=orm.exp_reward,
            gold_reward=orm.gold_reward,
            days_success=orm.days_success,
            days_failure=orm.days_failure,
        )

    def _on_scenario_completed(self, event: GameEvent) -> None:
        self.complete(
            event.data["player_id"],
            event.data["scenario_id"],
            event.data["result"],
            event.data.get("battles_fought", 0),
            session_id=event.data.get("session_id"),
        )
