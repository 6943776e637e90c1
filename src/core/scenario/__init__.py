"""시나리오 엔진 Core 패키지

표 형식 스크립트 파싱 → 시나리오 그래프 → 상태 머신.
DB 무관 순수 Python 로직.
"""

from src.core.scenario.csv_parser import parse_params, parse_scenario_csv, read_rows
from src.core.scenario.enums import NodeType, ScenarioResult, SessionPhase
from src.core.scenario.errors import (
    ChoiceRejectedError,
    InvalidChoiceError,
    ScenarioError,
    ScenarioParseError,
    ScenarioStateError,
    UnresolvedNodeError,
)
from src.core.scenario.models import Choice, Node, Scenario
from src.core.scenario.serialization import scenario_from_dict, scenario_to_dict
from src.core.scenario.session import ScenarioSession, StepResult
from src.core.scenario.state_machine import ScenarioRunner
from src.core.scenario.validation import (
    find_dangling_references,
    find_unreachable_nodes,
)

__all__ = [
    # parser
    "parse_params",
    "parse_scenario_csv",
    "read_rows",
    "scenario_from_dict",
    "scenario_to_dict",
    # models
    "Choice",
    "Node",
    "Scenario",
    "NodeType",
    "ScenarioResult",
    "SessionPhase",
    "ScenarioSession",
    "StepResult",
    # engine
    "ScenarioRunner",
    "find_dangling_references",
    "find_unreachable_nodes",
    # errors
    "ScenarioError",
    "ScenarioParseError",
    "UnresolvedNodeError",
    "ScenarioStateError",
    "ChoiceRejectedError",
    "InvalidChoiceError",
]
