"""시나리오 그래프 정적 검사 - 끊긴 참조, 도달 불가 노드

임포트 시점에 작성 오류를 알려주기 위한 진단용. 진행 중 실제로
끊긴 참조를 밟으면 상태 머신이 UnresolvedNodeError를 던진다.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from src.core.scenario.enums import SENTINELS
from src.core.scenario.models import Node, Scenario, TravelNode


@dataclass(frozen=True)
class DanglingReference:
    source_id: str
    target_id: str
    via: str  # "choice" | "travel" | "condition"


def outgoing_targets(node: Node) -> list[tuple[str, str]]:
    """노드에서 나가는 (대상 ID, 경로 종류) 목록"""
    targets = [(c.next, "choice") for c in node.choices]
    if isinstance(node, TravelNode):
        for target in (node.next_node_success, node.next_node_battle):
            if target:
                targets.append((target, "travel"))
    if node.condition is not None:
        for target in (node.condition.next, node.condition.fallback):
            if target:
                targets.append((target, "condition"))
    return targets


def find_dangling_references(scenario: Scenario) -> list[DanglingReference]:
    """존재하지 않는 노드를 가리키는 전이 (센티널 제외)"""
    dangling: list[DanglingReference] = []
    for node in scenario.nodes.values():
        for target, via in outgoing_targets(node):
            if target in SENTINELS or target in scenario.nodes:
                continue
            dangling.append(DanglingReference(node.node_id, target, via))
    return dangling


def find_unreachable_nodes(scenario: Scenario) -> list[str]:
    """진입 노드에서 도달할 수 없는 노드 ID (정의 순서)"""
    if not scenario.entry_id:
        return []
    seen = {scenario.entry_id}
    queue = deque([scenario.entry_id])
    while queue:
        node = scenario.nodes.get(queue.popleft())
        if node is None:
            continue
        for target, _ in outgoing_targets(node):
            if target in scenario.nodes and target not in seen:
                seen.add(target)
                queue.append(target)
    return [nid for nid in scenario.nodes if nid not in seen]
