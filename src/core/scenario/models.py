"""시나리오 그래프 도메인 모델 (DB 무관)

노드 type마다 별도 dataclass를 두는 닫힌 태그 유니온.
각 변형은 자신이 쓰는 필드만 가지며, 알 수 없는 파라미터는 extra로 보존한다.
파싱 후 불변(frozen).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Union

from src.core.scenario.enums import NodeType, ScenarioResult


@dataclass(frozen=True)
class Choice:
    """플레이어가 고를 수 있는 전이"""

    label: str
    next: str  # 노드 ID 또는 센티널

    # 비용 (차감만, 음수 금지)
    cost_vitality: int = 0
    cost_gold: int = 0

    # 조건
    req_tag: Optional[str] = None
    req_card: Optional[str] = None

    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NodeCondition:
    """노드 진입 시 평가하는 분기 조건 (params의 cond/next/fallback)

    expr 예: "has_tag:torch", "has_card:c2", "min_level:5", "min_gold:100"
    """

    expr: str
    next: Optional[str] = None
    fallback: Optional[str] = None


@dataclass(frozen=True)
class BaseNode:
    """모든 노드 변형의 공통 필드"""

    node_type: ClassVar[NodeType]

    node_id: str
    text: str = ""
    choices: tuple[Choice, ...] = ()
    bg_key: Optional[str] = None
    bgm: Optional[str] = None
    condition: Optional[NodeCondition] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return False


@dataclass(frozen=True)
class DialogueNode(BaseNode):
    node_type: ClassVar[NodeType] = NodeType.DIALOGUE


@dataclass(frozen=True)
class TravelNode(BaseNode):
    """이동. 진입 시 encounter_rate로 조우 판정."""

    node_type: ClassVar[NodeType] = NodeType.TRAVEL

    target_location: Optional[str] = None
    encounter_rate: float = 0.0  # 0.0 ~ 1.0
    next_node_success: Optional[str] = None
    next_node_battle: Optional[str] = None


@dataclass(frozen=True)
class BattleNode(BaseNode):
    """전투. 해결은 외부 전투 세션에 위임."""

    node_type: ClassVar[NodeType] = NodeType.BATTLE

    enemy_group_id: Optional[str] = None


@dataclass(frozen=True)
class GuestJoinNode(BaseNode):
    """동료 합류 지시. 실제 파티 반영은 협력자 몫."""

    node_type: ClassVar[NodeType] = NodeType.GUEST_JOIN

    guest_id: Optional[str] = None


@dataclass(frozen=True)
class RandomBranchNode(BaseNode):
    """d100 < prob 이면 hit, 아니면 miss 선택지로 분기"""

    node_type: ClassVar[NodeType] = NodeType.RANDOM_BRANCH

    prob: int = 50


@dataclass(frozen=True)
class CheckStatusNode(BaseNode):
    """플레이어 스탯 >= req_val 이면 success, 아니면 failure 선택지로 분기"""

    node_type: ClassVar[NodeType] = NodeType.CHECK_STATUS

    req_stat: Optional[str] = None
    req_val: int = 0


@dataclass(frozen=True)
class ShopSpecialNode(BaseNode):
    node_type: ClassVar[NodeType] = NodeType.SHOP_SPECIAL


@dataclass(frozen=True)
class ProcessRewardsNode(BaseNode):
    node_type: ClassVar[NodeType] = NodeType.PROCESS_REWARDS

    result: ScenarioResult = ScenarioResult.SUCCESS

    @property
    def is_terminal(self) -> bool:
        return True


@dataclass(frozen=True)
class EndNode(BaseNode):
    node_type: ClassVar[NodeType] = NodeType.END

    result: ScenarioResult = ScenarioResult.SUCCESS

    @property
    def is_terminal(self) -> bool:
        return True


Node = Union[
    DialogueNode,
    TravelNode,
    BattleNode,
    GuestJoinNode,
    RandomBranchNode,
    CheckStatusNode,
    ShopSpecialNode,
    ProcessRewardsNode,
    EndNode,
]

NODE_CLASSES: dict[NodeType, type] = {
    cls.node_type: cls
    for cls in (
        DialogueNode,
        TravelNode,
        BattleNode,
        GuestJoinNode,
        RandomBranchNode,
        CheckStatusNode,
        ShopSpecialNode,
        ProcessRewardsNode,
        EndNode,
    )
}


@dataclass(frozen=True)
class Scenario:
    """파싱 완료된 퀘스트 스크립트. 진행 상태는 포함하지 않는다."""

    scenario_id: str
    nodes: dict[str, Node]
    entry_id: str = ""

    def get(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def __len__(self) -> int:
        return len(self.nodes)


def resolve_entry_id(nodes: dict[str, Node]) -> str:
    """진입 노드: 'start'가 있으면 그것, 없으면 첫 노드."""
    if "start" in nodes:
        return "start"
    return next(iter(nodes), "")


def build_node(
    node_type: NodeType,
    node_id: str,
    attrs: dict[str, Any],
    choices: tuple[Choice, ...] = (),
    extra: Optional[dict[str, Any]] = None,
) -> Node:
    """type에 맞는 노드 변형 생성.

    attrs 중 해당 변형이 갖지 않는 필드는 extra로 옮긴다.
    """
    cls = NODE_CLASSES[node_type]
    accepted = set(cls.__dataclass_fields__)
    merged_extra = dict(extra or {})
    kwargs: dict[str, Any] = {}
    for key, value in attrs.items():
        if key in accepted and key not in ("node_id", "choices", "extra"):
            kwargs[key] = value
        else:
            merged_extra[key] = value
    return cls(node_id=node_id, choices=choices, extra=merged_extra, **kwargs)
