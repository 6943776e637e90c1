"""Party API endpoints."""

from fastapi import APIRouter, Depends

from src.api.deps import get_party_service, to_http_error
from src.api.schemas import (
    DismissRequest,
    ErrorResponse,
    PartyMemberInfo,
    PartyResponse,
)
from src.core.battle.models import PartyMember
from src.services.party_service import PartyService

router = APIRouter(prefix="/party", tags=["party"])


def _member_info(member: PartyMember) -> PartyMemberInfo:
    return PartyMemberInfo(
        member_id=member.member_id,
        name=member.name,
        slug=member.slug,
        durability=member.durability,
        max_durability=member.max_durability,
        cover_rate=member.cover_rate,
        defense=member.defense,
        is_active=member.is_active,
        inject_cards=list(member.inject_cards),
    )


@router.get("/{player_id}", response_model=PartyResponse)
def get_party(
    player_id: str,
    active_only: bool = False,
    service: PartyService = Depends(get_party_service),
) -> PartyResponse:
    """파티 목록 (엄호 판정 순)"""
    members = service.get_party(player_id, active_only=active_only)
    return PartyResponse(
        player_id=player_id, members=[_member_info(m) for m in members]
    )


@router.post(
    "/{player_id}/dismiss",
    response_model=PartyMemberInfo,
    responses={404: {"model": ErrorResponse}},
)
def dismiss_member(
    player_id: str,
    request: DismissRequest,
    service: PartyService = Depends(get_party_service),
) -> PartyMemberInfo:
    """동료 해산 (비활성화)"""
    try:
        return _member_info(service.dismiss(player_id, request.member_id))
    except LookupError as e:
        raise to_http_error(e)
