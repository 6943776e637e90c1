"""Service 의존성 주입 + 예외 → HTTP 상태 매핑"""

from fastapi import HTTPException, Request

from src.core.logging import get_logger
from src.core.progression.aging import vitality_status
from src.core.player import PlayerSnapshot
from src.core.scenario.errors import (
    ChoiceRejectedError,
    ScenarioError,
    ScenarioStateError,
    UnresolvedNodeError,
)
from src.api.schemas import PlayerInfo
from src.services.battle_service import BattleService
from src.services.party_service import PartyService
from src.services.player_service import PlayerService
from src.services.progression_service import ProgressionService
from src.services.scenario_service import ScenarioService

logger = get_logger(__name__)


def get_player_service(request: Request) -> PlayerService:
    service: PlayerService = request.app.state.player_service
    return service


def get_scenario_service(request: Request) -> ScenarioService:
    service: ScenarioService = request.app.state.scenario_service
    return service


def get_party_service(request: Request) -> PartyService:
    service: PartyService = request.app.state.party_service
    return service


def get_battle_service(request: Request) -> BattleService:
    service: BattleService = request.app.state.battle_service
    return service


def get_progression_service(request: Request) -> ProgressionService:
    service: ProgressionService = request.app.state.progression_service
    return service


def to_http_error(exc: Exception) -> HTTPException:
    """Service/Core 예외 → HTTPException

    - LookupError (플레이어/시나리오/동료 없음): 404
    - ChoiceRejectedError: 422 (detail에 reason)
    - 진행 상태 충돌 (퀘스트 잠금, 전투 대기 중 선택 등): 409
    - 끊긴 노드 참조: 500 (스크립트 데이터 결함)
    - ValueError: 400
    """
    if isinstance(exc, LookupError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ChoiceRejectedError):
        return HTTPException(
            status_code=422, detail={"reason": exc.reason, "message": str(exc)}
        )
    if isinstance(exc, ScenarioStateError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, UnresolvedNodeError):
        logger.error("Broken scenario data: %s", exc)
        return HTTPException(status_code=500, detail=str(exc))
    if isinstance(exc, (ValueError, ScenarioError)):
        return HTTPException(status_code=400, detail=str(exc))
    logger.exception("Unhandled error: %s", exc)
    return HTTPException(status_code=500, detail=str(exc))


def build_player_info(player: PlayerSnapshot) -> PlayerInfo:
    return PlayerInfo(
        player_id=player.player_id,
        level=player.level,
        exp=player.exp,
        hp=player.hp,
        max_hp=player.max_hp,
        atk=player.atk,
        defense=player.defense,
        max_deck_cost=player.max_deck_cost,
        age=player.age,
        age_days=player.age_days,
        vitality=player.vitality,
        max_vitality=player.max_vitality,
        vitality_status=vitality_status(player.vitality),
        gold=player.gold,
        current_quest_id=player.current_quest_id,
    )
