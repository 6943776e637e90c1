"""시나리오 Service - 스크립트 임포트, 퀘스트 진행, EventBus 통신

Service → Core, Service → DB 허용.
다른 Service는 import하지 않는다. 동료 합류/보상 적용은 이벤트로 넘긴다:
- guest_joined → PartyService
- scenario_completed → ProgressionService
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from src.core.dice import Dice, SystemDice
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.scenario.csv_parser import parse_scenario_csv
from src.core.scenario.enums import ScenarioResult, SessionPhase
from src.core.scenario.models import Node, Scenario
from src.core.scenario.serialization import scenario_from_dict, scenario_to_dict
from src.core.scenario.session import (
    BattleDirective,
    ChoiceView,
    CompletionDirective,
    GuestJoinDirective,
    ResourceDelta,
    ScenarioSession,
    StepResult,
)
from src.core.scenario.state_machine import ScenarioRunner
from src.core.scenario.validation import find_dangling_references
from src.db.models import PlayerModel, QuestSessionModel, ScenarioModel
from src.services.errors import (
    NoActiveQuestError,
    PlayerNotFoundError,
    QuestLockedError,
    ScenarioNotFoundError,
)

logger = logging.getLogger(__name__)

SOURCE = "scenario_service"


@dataclass
class QuestStep:
    """API에 돌려주는 한 스텝의 결과"""

    session_id: str
    session: ScenarioSession
    node: Optional[Node]
    choices: list[ChoiceView] = field(default_factory=list)
    visited: list[str] = field(default_factory=list)
    encounter: Optional[bool] = None
    enemy_group_id: Optional[str] = None
    joined_guests: list[str] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.session.finished

    @property
    def result(self) -> Optional[ScenarioResult]:
        return self.session.result


@dataclass(frozen=True)
class QuestMeta:
    """임포트 시 함께 저장하는 보상 정보"""

    title: str = ""
    difficulty: int = 1
    exp_reward: Optional[int] = None
    gold_reward: int = 0
    days_success: int = 1
    days_failure: int = 1


def _load_meta(path: Path) -> Optional[QuestMeta]:
    if not path.is_file():
        return None
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    return QuestMeta(
        title=raw.get("title", ""),
        difficulty=int(raw.get("difficulty", 1)),
        exp_reward=raw.get("exp"),
        gold_reward=int(raw.get("gold", 0)),
        days_success=int(raw.get("days_success", 1)),
        days_failure=int(raw.get("days_failure", 1)),
    )


class ScenarioService:
    """시나리오 임포트 + 퀘스트 진행"""

    def __init__(
        self,
        db: Session,
        event_bus: EventBus,
        dice: Optional[Dice] = None,
    ):
        self._db = db
        self._bus = event_bus
        self._dice: Dice = dice or SystemDice()
        self._runners: dict[str, ScenarioRunner] = {}

    # === 임포트 ===

    def import_csv(
        self,
        scenario_id: str,
        csv_text: str,
        meta: Optional[QuestMeta] = None,
        source_path: Optional[str] = None,
    ) -> Scenario:
        """CSV → 그래프 → scenarios 테이블 (같은 ID면 덮어씀)"""
        self._bus.reset_chain()
        meta = meta or QuestMeta()
        scenario = parse_scenario_csv(csv_text, scenario_id)

        for ref in find_dangling_references(scenario):
            logger.warning(
                "Scenario %s: '%s' → '%s' (%s) does not resolve",
                scenario_id,
                ref.source_id,
                ref.target_id,
                ref.via,
            )

        orm = self._db.get(ScenarioModel, scenario_id)
        if orm is None:
            orm = ScenarioModel(scenario_id=scenario_id)
            self._db.add(orm)
        orm.title = meta.title or scenario_id
        orm.script = scenario_to_dict(scenario)
        orm.source_path = source_path
        orm.difficulty = meta.difficulty
        orm.exp_reward = meta.exp_reward
        orm.gold_reward = meta.gold_reward
        orm.days_success = meta.days_success
        orm.days_failure = meta.days_failure
        self._db.commit()

        self._runners.pop(scenario_id, None)
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.SCENARIO_IMPORTED,
                data={"scenario_id": scenario_id, "node_count": len(scenario)},
                source=SOURCE,
            )
        )
        logger.info("Scenario imported: %s (%d nodes)", scenario_id, len(scenario))
        return scenario

    def import_directory(self, directory: str | Path) -> int:
        """디렉터리의 *.csv 일괄 임포트. 파일명(확장자 제외) = scenario_id.

        같은 이름의 .json 파일이 있으면 보상 정보(QuestMeta)로 읽는다.
        """
        directory = Path(directory)
        if not directory.is_dir():
            logger.warning("Scenario directory not found: %s", directory)
            return 0

        count = 0
        for path in sorted(directory.glob("*.csv")):
            self.import_csv(
                path.stem,
                path.read_text(encoding="utf-8"),
                meta=_load_meta(path.with_suffix(".json")),
                source_path=str(path),
            )
            count += 1
        return count

    def get_scenario(self, scenario_id: str) -> Scenario:
        return self._runner(scenario_id).scenario

    def list_scenarios(self) -> list[ScenarioModel]:
        return self._db.query(ScenarioModel).order_by(ScenarioModel.scenario_id).all()

    # === 진행 ===

    def start_quest(self, player_id: str, scenario_id: str) -> QuestStep:
        """퀘스트 시작. 진행 중인 퀘스트가 있으면 QuestLockedError."""
        self._bus.reset_chain()
        player = self._get_player(player_id)
        if player.current_quest_id:
            raise QuestLockedError(player_id, player.current_quest_id)

        runner = self._runner(scenario_id)
        step = runner.start(player.to_snapshot())

        session_id = str(uuid.uuid4())
        player.current_quest_id = scenario_id
        orm = QuestSessionModel(
            session_id=session_id, player_id=player_id, scenario_id=scenario_id
        )
        self._db.add(orm)
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.SCENARIO_STARTED,
                data={
                    "player_id": player_id,
                    "scenario_id": scenario_id,
                    "session_id": session_id,
                },
                source=SOURCE,
            )
        )
        return self._commit_step(orm, player, runner, step)

    def get_current_step(self, player_id: str) -> QuestStep:
        """진행 중인 세션의 현재 상태 (재개용)"""
        player = self._get_player(player_id)
        orm = self._active_session(player_id)
        runner = self._runner(orm.scenario_id)
        session = self._session_to_core(orm)
        node = runner.scenario.get(session.current_node_id)
        return QuestStep(
            session_id=orm.session_id,
            session=session,
            node=node,
            choices=runner.available_choices(session, player.to_snapshot()),
            enemy_group_id=orm.pending_enemy_group_id,
            joined_guests=list(session.joined_guests),
        )

    def choose(self, player_id: str, choice_index: int) -> QuestStep:
        """선택지 선택. 거부되면 ChoiceRejectedError (세션 변경 없음)."""
        self._bus.reset_chain()
        player = self._get_player(player_id)
        orm = self._active_session(player_id)
        runner = self._runner(orm.scenario_id)

        step = runner.choose(self._session_to_core(orm), player.to_snapshot(), choice_index)
        return self._commit_step(orm, player, runner, step)

    def resolve_battle(self, player_id: str, won: bool) -> QuestStep:
        """외부 전투 결과로 시나리오 재개"""
        self._bus.reset_chain()
        player = self._get_player(player_id)
        orm = self._active_session(player_id)
        runner = self._runner(orm.scenario_id)

        step = runner.resolve_battle(self._session_to_core(orm), player.to_snapshot(), won)
        orm.pending_enemy_group_id = None
        return self._commit_step(orm, player, runner, step)

    def give_up(self, player_id: str) -> QuestStep:
        """퀘스트 포기 → 실패로 종료"""
        self._bus.reset_chain()
        player = self._get_player(player_id)
        orm = self._active_session(player_id)
        runner = self._runner(orm.scenario_id)

        step = runner.give_up(self._session_to_core(orm))
        orm.pending_enemy_group_id = None
        return self._commit_step(orm, player, runner, step)

    # === 내부 ===

    def _runner(self, scenario_id: str) -> ScenarioRunner:
        runner = self._runners.get(scenario_id)
        if runner is None:
            orm = self._db.get(ScenarioModel, scenario_id)
            if orm is None:
                raise ScenarioNotFoundError(scenario_id)
            scenario = scenario_from_dict(orm.script, scenario_id)
            runner = ScenarioRunner(scenario, self._dice)
            self._runners[scenario_id] = runner
        return runner

    def _get_player(self, player_id: str) -> PlayerModel:
        player = self._db.get(PlayerModel, player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        return player

    def _active_session(self, player_id: str) -> QuestSessionModel:
        orm = (
            self._db.query(QuestSessionModel)
            .filter(
                QuestSessionModel.player_id == player_id,
                QuestSessionModel.phase != SessionPhase.FINISHED.value,
            )
            .order_by(QuestSessionModel.started_at.desc())
            .first()
        )
        if orm is None:
            raise NoActiveQuestError(player_id)
        return orm

    def _commit_step(
        self,
        orm: QuestSessionModel,
        player: PlayerModel,
        runner: ScenarioRunner,
        step: StepResult,
    ) -> QuestStep:
        """세션 저장 → 지시 처리 → 커밋 → 이벤트 발행.

        자원 차감은 같은 트랜잭션에서 반영한다.
        완료 이벤트는 커밋 후 발행 (핸들러가 새 상태를 읽도록).
        """
        self._session_to_orm(step.session, orm)
        completion: Optional[CompletionDirective] = None
        guests: list[str] = []

        for directive in step.directives:
            if isinstance(directive, ResourceDelta):
                player.vitality = max(0, player.vitality + directive.vitality)
                player.gold = max(0, player.gold + directive.gold)
            elif isinstance(directive, BattleDirective):
                orm.pending_enemy_group_id = directive.enemy_group_id
            elif isinstance(directive, GuestJoinDirective):
                guests.append(directive.guest_id)
            elif isinstance(directive, CompletionDirective):
                completion = directive
                orm.finished_at = datetime.now(timezone.utc)
                player.current_quest_id = None

        self._db.commit()

        for node_id in step.visited:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.NODE_ENTERED,
                    data={"player_id": player.player_id, "node_id": node_id},
                    source=SOURCE,
                )
            )
        self._emit_directives(player.player_id, orm, step, guests, completion)

        # 핸들러가 플레이어를 갱신했을 수 있음
        self._db.refresh(player)
        session = step.session
        return QuestStep(
            session_id=orm.session_id,
            session=session,
            node=step.node,
            choices=runner.available_choices(session, player.to_snapshot()),
            visited=list(step.visited),
            encounter=step.encounter,
            enemy_group_id=orm.pending_enemy_group_id,
            joined_guests=guests,
        )

    def _emit_directives(
        self,
        player_id: str,
        orm: QuestSessionModel,
        step: StepResult,
        guests: list[str],
        completion: Optional[CompletionDirective],
    ) -> None:
        deltas = [d for d in step.directives if isinstance(d, ResourceDelta)]
        if deltas:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.CHOICE_COSTS_PAID,
                    data={
                        "player_id": player_id,
                        "vitality": sum(d.vitality for d in deltas),
                        "gold": sum(d.gold for d in deltas),
                    },
                    source=SOURCE,
                )
            )

        for guest_id in guests:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.GUEST_JOINED,
                    data={
                        "player_id": player_id,
                        "guest_id": guest_id,
                        "scenario_id": orm.scenario_id,
                    },
                    source=SOURCE,
                )
            )

        if step.session.phase == SessionPhase.IN_BATTLE:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.BATTLE_STARTED,
                    data={
                        "player_id": player_id,
                        "enemy_group_id": orm.pending_enemy_group_id,
                        "node_id": step.session.current_node_id,
                    },
                    source=SOURCE,
                )
            )

        if completion is not None:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.SCENARIO_COMPLETED,
                    data={
                        "player_id": player_id,
                        "scenario_id": orm.scenario_id,
                        "session_id": orm.session_id,
                        "result": completion.result.value,
                        "battles_fought": completion.battles_fought,
                    },
                    source=SOURCE,
                )
            )

    def _session_to_core(self, orm: QuestSessionModel) -> ScenarioSession:
        """ORM → Core"""
        return ScenarioSession(
            scenario_id=orm.scenario_id,
            current_node_id=orm.current_node_id,
            phase=SessionPhase(orm.phase),
            history=list(orm.history or []),
            battles_fought=orm.battles_fought,
            joined_guests=list(orm.joined_guests or []),
            result=ScenarioResult(orm.result) if orm.result else None,
            vitality_spent=orm.vitality_spent,
            gold_spent=orm.gold_spent,
        )

    def _session_to_orm(self, session: ScenarioSession, orm: QuestSessionModel) -> None:
        """Core → ORM (기존 행 갱신)"""
        orm.current_node_id = session.current_node_id
        orm.phase = session.phase.value
        orm.history = list(session.history)
        orm.battles_fought = session.battles_fought
        orm.joined_guests = list(session.joined_guests)
        orm.result = session.result.value if session.result else None
        orm.vitality_spent = session.vitality_spent
        orm.gold_spent = session.gold_spent
