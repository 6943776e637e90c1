"""시나리오 진행 상태와 한 스텝의 결과

진행 상태(ScenarioSession)는 시나리오 밖, 플레이어별로 저장된다.
엔진은 세션 사본을 갱신해 StepResult로 돌려줄 뿐 원본을 바꾸지 않는다.
부수효과(동료 합류, 전투 개시, 자원 차감, 종료)는 지시(directive)로만 표현한다.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Optional, Union

from src.core.scenario.enums import ScenarioResult, SessionPhase
from src.core.scenario.models import Node


@dataclass
class ScenarioSession:
    """플레이어 한 명의 시나리오 진행 상태"""

    scenario_id: str
    current_node_id: str
    phase: SessionPhase = SessionPhase.AWAITING_CHOICE
    history: list[str] = field(default_factory=list)  # 진입한 노드 순서
    battles_fought: int = 0
    joined_guests: list[str] = field(default_factory=list)
    result: Optional[ScenarioResult] = None

    # 세션 중 차감된 누적 비용
    vitality_spent: int = 0
    gold_spent: int = 0

    @property
    def finished(self) -> bool:
        return self.phase == SessionPhase.FINISHED

    def clone(self) -> "ScenarioSession":
        return copy.deepcopy(self)


# === 지시 ===


@dataclass(frozen=True)
class GuestJoinDirective:
    """동료 합류. 파티 협력자가 guest_id를 실제 멤버로 해석한다."""

    guest_id: str
    node_id: str


@dataclass(frozen=True)
class BattleDirective:
    """전투 개시. 전투 종료 후 resolve_battle로 재개."""

    enemy_group_id: Optional[str]
    node_id: str


@dataclass(frozen=True)
class ResourceDelta:
    """선택지 비용 차감 (항상 0 이하)"""

    vitality: int = 0
    gold: int = 0


@dataclass(frozen=True)
class CompletionDirective:
    """시나리오 종료. 보상 적용은 성장 엔진 몫."""

    result: ScenarioResult
    battles_fought: int


Directive = Union[GuestJoinDirective, BattleDirective, ResourceDelta, CompletionDirective]


@dataclass
class StepResult:
    """상태 머신 한 스텝의 결과"""

    session: ScenarioSession
    node: Optional[Node]  # 현재 노드. 센티널로 끝났으면 None
    visited: list[str] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    encounter: Optional[bool] = None  # 이번 스텝에서 이동 조우 판정이 있었으면 그 결과

    @property
    def finished(self) -> bool:
        return self.session.finished

    @property
    def result(self) -> Optional[ScenarioResult]:
        return self.session.result


@dataclass(frozen=True)
class ChoiceView:
    """표시용 선택지 (조건 평가 완료)"""

    index: int
    label: str
    available: bool
    reason: Optional[str] = None
    cost_vitality: int = 0
    cost_gold: int = 0
    req_tag: Optional[str] = None
    req_card: Optional[str] = None
