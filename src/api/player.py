"""Player API endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from src.api.deps import build_player_info, get_player_service, to_http_error
from src.api.schemas import ErrorResponse, PlayerCreateRequest, PlayerInfo
from src.core.logging import get_logger
from src.services.errors import PlayerNotFoundError
from src.services.player_service import PlayerService

logger = get_logger(__name__)

router = APIRouter(prefix="/player", tags=["player"])


@router.post(
    "",
    response_model=PlayerInfo,
    responses={400: {"model": ErrorResponse}},
)
def create_player(
    request: PlayerCreateRequest,
    service: PlayerService = Depends(get_player_service),
) -> PlayerInfo:
    """
    캐릭터 생성

    시작 나이에 따라 HP/덱 코스트/활력이 정해집니다.
    """
    try:
        player = service.create_player(
            request.player_id, request.age, request.name, request.deck
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return build_player_info(player)


@router.get(
    "/{player_id}",
    response_model=PlayerInfo,
    responses={404: {"model": ErrorResponse}},
)
def get_player(
    player_id: str,
    service: PlayerService = Depends(get_player_service),
) -> PlayerInfo:
    try:
        return build_player_info(service.get_player(player_id))
    except PlayerNotFoundError as e:
        raise to_http_error(e)
