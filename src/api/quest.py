"""Quest (scenario) API endpoints."""

from fastapi import APIRouter, Depends

from src.api.deps import (
    build_player_info,
    get_player_service,
    get_progression_service,
    get_scenario_service,
    to_http_error,
)
from src.api.schemas import (
    BattleResultRequest,
    ChoiceInfo,
    ChoiceRequest,
    CompletionInfo,
    ErrorResponse,
    NodeInfo,
    PlayerRequest,
    QuestStartRequest,
    QuestStepResponse,
    ScenarioImportRequest,
    ScenarioImportResponse,
    ScenarioInfo,
)
from src.core.logging import get_logger
from src.core.scenario.errors import ScenarioError
from src.core.scenario.validation import (
    find_dangling_references,
    find_unreachable_nodes,
)
from src.services.player_service import PlayerService
from src.services.progression_service import ProgressionService
from src.services.scenario_service import QuestMeta, QuestStep, ScenarioService

logger = get_logger(__name__)

router = APIRouter(prefix="/quest", tags=["quest"])

_STEP_ERRORS = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}


def _build_step_response(
    step: QuestStep,
    players: PlayerService,
    progression: ProgressionService,
    player_id: str,
) -> QuestStepResponse:
    """QuestStep → 응답. 종료 스텝이면 보상 요약 포함."""
    node = None
    if step.node is not None:
        node = NodeInfo(
            node_id=step.node.node_id,
            node_type=step.node.node_type.value,
            text=step.node.text,
            bg_key=step.node.bg_key,
            bgm=step.node.bgm,
        )

    completion = None
    if step.finished:
        summary = progression.get_completion(step.session_id)
        if summary is not None:
            completion = CompletionInfo(**summary)

    return QuestStepResponse(
        session_id=step.session_id,
        scenario_id=step.session.scenario_id,
        phase=step.session.phase.value,
        node=node,
        choices=[
            ChoiceInfo(
                index=c.index,
                label=c.label,
                available=c.available,
                reason=c.reason,
                cost_vitality=c.cost_vitality,
                cost_gold=c.cost_gold,
                req_tag=c.req_tag,
                req_card=c.req_card,
            )
            for c in step.choices
        ],
        visited=step.visited,
        encounter=step.encounter,
        enemy_group_id=step.enemy_group_id,
        joined_guests=step.joined_guests,
        finished=step.finished,
        result=step.result.value if step.result else None,
        completion=completion,
        player=build_player_info(players.get_player(player_id)),
    )


# === 시나리오 ===


@router.get("/scenarios", response_model=list[ScenarioInfo])
def list_scenarios(
    service: ScenarioService = Depends(get_scenario_service),
) -> list[ScenarioInfo]:
    """임포트된 시나리오 목록"""
    return [
        ScenarioInfo(
            scenario_id=s.scenario_id,
            title=s.title,
            difficulty=s.difficulty,
            node_count=len((s.script or {}).get("nodes", {})),
        )
        for s in service.list_scenarios()
    ]


@router.post(
    "/scenarios",
    response_model=ScenarioImportResponse,
    responses={400: {"model": ErrorResponse}},
)
def import_scenario(
    request: ScenarioImportRequest,
    service: ScenarioService = Depends(get_scenario_service),
) -> ScenarioImportResponse:
    """
    CSV 스크립트 임포트

    끊긴 참조/도달 불가 노드는 경고로 함께 돌려줍니다 (임포트는 진행).
    """
    meta = QuestMeta(
        title=request.title,
        difficulty=request.difficulty,
        exp_reward=request.exp,
        gold_reward=request.gold,
        days_success=request.days_success,
        days_failure=request.days_failure,
    )
    try:
        scenario = service.import_csv(request.scenario_id, request.csv_text, meta)
    except ScenarioError as e:
        raise to_http_error(e)

    return ScenarioImportResponse(
        scenario_id=scenario.scenario_id,
        node_count=len(scenario),
        entry_id=scenario.entry_id,
        dangling=[
            f"{r.source_id} -> {r.target_id}" for r in find_dangling_references(scenario)
        ],
        unreachable=sorted(find_unreachable_nodes(scenario)),
    )


# === 진행 ===


@router.post("/start", response_model=QuestStepResponse, responses=_STEP_ERRORS)
def start_quest(
    request: QuestStartRequest,
    service: ScenarioService = Depends(get_scenario_service),
    players: PlayerService = Depends(get_player_service),
    progression: ProgressionService = Depends(get_progression_service),
) -> QuestStepResponse:
    """
    퀘스트 시작

    진행 중인 퀘스트가 있으면 409.
    """
    try:
        step = service.start_quest(request.player_id, request.scenario_id)
        return _build_step_response(step, players, progression, request.player_id)
    except Exception as e:
        raise to_http_error(e)


@router.get("/{player_id}", response_model=QuestStepResponse, responses=_STEP_ERRORS)
def get_current_quest(
    player_id: str,
    service: ScenarioService = Depends(get_scenario_service),
    players: PlayerService = Depends(get_player_service),
    progression: ProgressionService = Depends(get_progression_service),
) -> QuestStepResponse:
    """진행 중인 퀘스트의 현재 노드 (재개용)"""
    try:
        step = service.get_current_step(player_id)
        return _build_step_response(step, players, progression, player_id)
    except Exception as e:
        raise to_http_error(e)


@router.post("/choose", response_model=QuestStepResponse, responses=_STEP_ERRORS)
def choose(
    request: ChoiceRequest,
    service: ScenarioService = Depends(get_scenario_service),
    players: PlayerService = Depends(get_player_service),
    progression: ProgressionService = Depends(get_progression_service),
) -> QuestStepResponse:
    """
    선택지 선택

    조건/비용 불충족이면 422 (detail.reason).
    """
    try:
        step = service.choose(request.player_id, request.choice_index)
        return _build_step_response(step, players, progression, request.player_id)
    except Exception as e:
        raise to_http_error(e)


@router.post("/battle-result", response_model=QuestStepResponse, responses=_STEP_ERRORS)
def battle_result(
    request: BattleResultRequest,
    service: ScenarioService = Depends(get_scenario_service),
    players: PlayerService = Depends(get_player_service),
    progression: ProgressionService = Depends(get_progression_service),
) -> QuestStepResponse:
    """전투 종료 후 시나리오 재개"""
    try:
        step = service.resolve_battle(request.player_id, request.won)
        return _build_step_response(step, players, progression, request.player_id)
    except Exception as e:
        raise to_http_error(e)


@router.post("/give-up", response_model=QuestStepResponse, responses=_STEP_ERRORS)
def give_up(
    request: PlayerRequest,
    service: ScenarioService = Depends(get_scenario_service),
    players: PlayerService = Depends(get_player_service),
    progression: ProgressionService = Depends(get_progression_service),
) -> QuestStepResponse:
    """퀘스트 포기 (실패 처리)"""
    try:
        step = service.give_up(request.player_id)
        return _build_step_response(step, players, progression, request.player_id)
    except Exception as e:
        raise to_http_error(e)
