"""Battle API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends

from src.api.deps import get_battle_service, to_http_error
from src.api.schemas import (
    CardInfo,
    CardPlayResponse,
    DeckResponse,
    EnemyAttackRequest,
    EnemyAttackResponse,
    ErrorResponse,
    PlayCardRequest,
)
from src.core.battle.deck import WorldTier
from src.services.battle_service import BattleService

router = APIRouter(prefix="/battle", tags=["battle"])


@router.get(
    "/{player_id}/deck",
    response_model=DeckResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_battle_deck(
    player_id: str,
    world_tier: Optional[str] = None,
    service: BattleService = Depends(get_battle_service),
) -> DeckResponse:
    """
    전투 덱 구성

    보유 카드 + 활성 동료 주입 카드 + 세계 정세 주입 카드.
    """
    try:
        deck = service.build_deck(player_id, world_tier)
    except LookupError as e:
        raise to_http_error(e)

    tier = WorldTier.parse(world_tier) if world_tier else None
    return DeckResponse(
        player_id=player_id,
        world_tier=tier.value if tier else "default",
        cards=[
            CardInfo(
                instance_id=c.instance_id,
                template_id=c.template_id,
                name=c.card.name,
                card_type=c.card.card_type.value,
                cost=c.card.cost,
                cost_type=c.card.cost_type.value,
                power=c.card.power,
                source=c.source,
                usable=c.card.usable,
            )
            for c in deck
        ],
    )


@router.post(
    "/enemy-attack",
    response_model=EnemyAttackResponse,
    responses={404: {"model": ErrorResponse}},
)
def enemy_attack(
    request: EnemyAttackRequest,
    service: BattleService = Depends(get_battle_service),
) -> EnemyAttackResponse:
    """적 공격 1회: 엄호 판정 → 피해 계산 → 반영"""
    try:
        outcome = service.enemy_attack(
            request.player_id, request.power, is_magic=request.is_magic
        )
    except LookupError as e:
        raise to_http_error(e)

    return EnemyAttackResponse(
        target=outcome.route.target,
        target_id=outcome.route.target_id,
        damage=outcome.damage,
        is_covered=outcome.route.is_covered,
        message=outcome.route.message,
        player_hp=outcome.player_hp,
        player_defeated=outcome.player_defeated,
        member_durability=outcome.member_durability,
        member_knocked_out=outcome.member_knocked_out,
    )


@router.post(
    "/play-card",
    response_model=CardPlayResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def play_card(
    request: PlayCardRequest,
    service: BattleService = Depends(get_battle_service),
) -> CardPlayResponse:
    """카드 사용 → 적에게 주는 피해"""
    try:
        outcome = service.play_card(
            request.player_id,
            request.card_id,
            target_def=request.target_def,
            current_mp=request.current_mp,
        )
    except (LookupError, ValueError) as e:
        raise to_http_error(e)

    return CardPlayResponse(
        card_id=outcome.card_id,
        damage=outcome.damage,
        effect_id=outcome.effect_id,
        effect_duration=outcome.effect_duration,
        messages=outcome.messages,
    )
