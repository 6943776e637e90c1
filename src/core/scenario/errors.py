"""시나리오 엔진 예외"""

from __future__ import annotations

from typing import Optional


class ScenarioError(Exception):
    """시나리오 엔진 예외의 기반 클래스"""


class ScenarioParseError(ScenarioError):
    """스크립트 표 구조 오류 (헤더 누락 등)"""

    def __init__(self, message: str, row_number: Optional[int] = None) -> None:
        self.row_number = row_number
        if row_number is not None:
            message = f"row {row_number}: {message}"
        super().__init__(message)


class UnresolvedNodeError(ScenarioError):
    """전이 대상 노드가 없음. 해당 진행 경로에서는 복구 불가."""

    def __init__(self, node_id: str, source_id: Optional[str] = None) -> None:
        self.node_id = node_id
        self.source_id = source_id
        where = f" (from '{source_id}')" if source_id else ""
        super().__init__(f"Node '{node_id}' not found{where}")


class ScenarioStateError(ScenarioError):
    """현재 진행 단계에서 허용되지 않는 조작"""


class ChoiceRejectedError(ScenarioError):
    """선택지 거부. 상태 머신은 현재 노드에 머무른다.

    reason: "not_found" | "req_tag" | "req_card"
            | "insufficient_vitality" | "insufficient_gold"
    """

    def __init__(self, reason: str, message: str = "") -> None:
        self.reason = reason
        super().__init__(message or reason)


class InvalidChoiceError(ChoiceRejectedError):
    """존재하지 않는 선택지"""

    def __init__(self, choice_index: int, node_id: str) -> None:
        self.choice_index = choice_index
        self.node_id = node_id
        super().__init__(
            "not_found", f"Choice {choice_index} does not exist on node '{node_id}'"
        )
