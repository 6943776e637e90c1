"""API request/response schemas."""

from typing import Optional

from pydantic import BaseModel, Field


# === Request Schemas ===


class PlayerCreateRequest(BaseModel):
    """캐릭터 생성 요청"""

    player_id: str = Field(..., min_length=1, max_length=50, description="플레이어 ID")
    age: int = Field(..., ge=16, le=25, description="시작 나이 (16~25)")
    name: str = Field("", max_length=50)
    deck: list[str] = Field(default_factory=list, description="초기 보유 카드 ID")


class QuestStartRequest(BaseModel):
    player_id: str = Field(..., min_length=1)
    scenario_id: str = Field(..., min_length=1)


class ChoiceRequest(BaseModel):
    player_id: str = Field(..., min_length=1)
    choice_index: int = Field(..., ge=0, description="선택지 번호 (0부터)")


class BattleResultRequest(BaseModel):
    player_id: str = Field(..., min_length=1)
    won: bool


class PlayerRequest(BaseModel):
    player_id: str = Field(..., min_length=1)


class ScenarioImportRequest(BaseModel):
    """CSV 스크립트 임포트 요청"""

    scenario_id: str = Field(..., min_length=1)
    csv_text: str = Field(..., min_length=1)
    title: str = ""
    difficulty: int = Field(1, ge=1)
    exp: Optional[int] = Field(None, ge=0, description="없으면 difficulty * 20")
    gold: int = Field(0, ge=0)
    days_success: int = Field(1, ge=1)
    days_failure: int = Field(1, ge=1)


class EnemyAttackRequest(BaseModel):
    player_id: str = Field(..., min_length=1)
    power: int = Field(..., ge=0)
    is_magic: bool = False


class PlayCardRequest(BaseModel):
    player_id: str = Field(..., min_length=1)
    card_id: str = Field(..., min_length=1)
    target_def: int = Field(0, ge=0)
    current_mp: int = Field(0, ge=0)


class DismissRequest(BaseModel):
    member_id: str = Field(..., min_length=1)


# === Response Schemas ===


class PlayerInfo(BaseModel):
    """플레이어 정보"""

    player_id: str
    level: int
    exp: int
    hp: int
    max_hp: int
    atk: int
    defense: int
    max_deck_cost: int
    age: int
    age_days: int
    vitality: int
    max_vitality: int
    vitality_status: str
    gold: int
    current_quest_id: Optional[str] = None


class NodeInfo(BaseModel):
    node_id: str
    node_type: str
    text: str = ""
    bg_key: Optional[str] = None
    bgm: Optional[str] = None


class ChoiceInfo(BaseModel):
    index: int
    label: str
    available: bool
    reason: Optional[str] = None
    cost_vitality: int = 0
    cost_gold: int = 0
    req_tag: Optional[str] = None
    req_card: Optional[str] = None


class CompletionInfo(BaseModel):
    """퀘스트 종료 보상 요약"""

    result: str
    earned_exp: int
    gold_gained: int
    days_passed: int
    old_level: int
    new_level: int
    age: int
    vitality_decay: int


class QuestStepResponse(BaseModel):
    """퀘스트 진행 응답"""

    success: bool = True
    session_id: str
    scenario_id: str
    phase: str
    node: Optional[NodeInfo] = None
    choices: list[ChoiceInfo] = []
    visited: list[str] = []
    encounter: Optional[bool] = None
    enemy_group_id: Optional[str] = None
    joined_guests: list[str] = []
    finished: bool = False
    result: Optional[str] = None
    completion: Optional[CompletionInfo] = None
    player: PlayerInfo


class ScenarioInfo(BaseModel):
    scenario_id: str
    title: str
    difficulty: int
    node_count: int


class ScenarioImportResponse(BaseModel):
    success: bool = True
    scenario_id: str
    node_count: int
    entry_id: Optional[str] = None
    dangling: list[str] = []
    unreachable: list[str] = []


class CardInfo(BaseModel):
    instance_id: str
    template_id: str
    name: str
    card_type: str
    cost: int
    cost_type: str
    power: int
    source: Optional[str] = None
    usable: bool = True


class DeckResponse(BaseModel):
    player_id: str
    world_tier: str
    cards: list[CardInfo]


class EnemyAttackResponse(BaseModel):
    target: str
    target_id: Optional[str] = None
    damage: int
    is_covered: bool
    message: str
    player_hp: int
    player_defeated: bool = False
    member_durability: Optional[int] = None
    member_knocked_out: bool = False


class CardPlayResponse(BaseModel):
    card_id: str
    damage: int
    effect_id: Optional[str] = None
    effect_duration: int = 0
    messages: list[str] = []


class PartyMemberInfo(BaseModel):
    member_id: str
    name: str
    slug: Optional[str] = None
    durability: int
    max_durability: int
    cover_rate: int
    defense: int
    is_active: bool
    inject_cards: list[str] = []


class PartyResponse(BaseModel):
    player_id: str
    members: list[PartyMemberInfo]


class ErrorResponse(BaseModel):
    """에러 응답"""

    success: bool = False
    error: str
    detail: Optional[str] = None
