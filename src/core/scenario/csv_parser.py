"""표 형식 시나리오 스크립트 파서 - CSV → 시나리오 그래프

열: row_type (NODE|CHOICE), node_id, text_label, next_node, params
params: "key:value, key:value" 미니 언어 (중첩 없음)

NODE 행이 "현재 노드" 문맥을 열고, 이어지는 CHOICE 행은 다음 NODE 행까지
그 노드에 붙는다. 문맥은 루프 안의 지역 누산기로만 유지한다.

오류 정책:
- 헤더에 row_type/node_id 열이 없음 → ScenarioParseError
- NODE 이전의 CHOICE 행, node_id 없는 NODE 행 → 경고 로그 후 건너뜀
- 콜론 없는 params 항목, 정수 변환 실패 → 무시
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from src.core.scenario.enums import (
    CONTINUE_LABEL,
    NodeType,
    ScenarioResult,
)
from src.core.scenario.errors import ScenarioParseError
from src.core.scenario.models import (
    Choice,
    Node,
    NodeCondition,
    Scenario,
    build_node,
    resolve_entry_id,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("row_type", "node_id")
COLUMNS = ("row_type", "node_id", "text_label", "next_node", "params")

# type 값 정규화: 원본 태그 → (NodeType, result)
END_TYPE_ALIASES: dict[str, ScenarioResult] = {
    "end": ScenarioResult.SUCCESS,
    "end_success": ScenarioResult.SUCCESS,
    "end_failure": ScenarioResult.FAILURE,
}

# 노드 params 중 그대로 문자열로 복사되는 키 → 필드명
NODE_STRING_PARAMS: dict[str, str] = {
    "bg": "bg_key",
    "bgm": "bgm",
    "enemy": "enemy_group_id",
    "req_stat": "req_stat",
    "target_location": "target_location",
    "next_node_success": "next_node_success",
    "next_node_battle": "next_node_battle",
    "guest": "guest_id",
    "guest_id": "guest_id",
}

NODE_INT_PARAMS: dict[str, str] = {
    "prob": "prob",
    "req_val": "req_val",
}

# 노드 params 중 별도로 처리되는 키
NODE_SPECIAL_PARAMS = frozenset(
    {"type", "cond", "next", "fallback", "encounter_rate", "result"}
)


@dataclass
class ScriptRow:
    """CSV 한 행"""

    row_number: int  # 1-based, 헤더 포함
    row_type: str
    node_id: str = ""
    text_label: str = ""
    next_node: str = ""
    params: str = ""


@dataclass
class _NodeDraft:
    """조립 중인 노드"""

    node_id: str
    node_type: NodeType
    attrs: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)
    choices: list[Choice] = field(default_factory=list)


@dataclass
class _Accumulator:
    """행 루프를 따라 전달되는 파서 상태"""

    drafts: dict[str, _NodeDraft] = field(default_factory=dict)
    current_id: Optional[str] = None


# === params 미니 언어 ===


def parse_params(params_str: str) -> dict[str, str]:
    """'bg:forest, type:battle, enemy:goblin' → dict.

    첫 번째 콜론에서만 나눈다 ("cond:has_tag:torch" → cond="has_tag:torch").
    콜론이 없거나 키가 빈 항목은 무시.
    """
    result: dict[str, str] = {}
    if not params_str or not params_str.strip():
        return result

    for part in params_str.split(","):
        part = part.strip()
        if not part:
            continue
        key, sep, value = part.partition(":")
        key = key.strip()
        if not sep or not key:
            logger.debug("Ignoring malformed param: %r", part)
            continue
        result[key] = value.strip()
    return result


def unescape_text(text: str) -> str:
    """리터럴 '\\n'을 실제 줄바꿈으로."""
    return text.replace("\\n", "\n")


def _to_int(value: str, key: str, row_number: int) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("row %d: param %s=%r is not an integer", row_number, key, value)
        return None


def _to_rate(value: str, row_number: int) -> Optional[float]:
    """encounter_rate: 0~1 실수. 1 초과 값은 백분율로 간주."""
    try:
        rate = float(value)
    except (TypeError, ValueError):
        logger.warning("row %d: encounter_rate=%r is not a number", row_number, value)
        return None
    if rate > 1.0:
        rate = rate / 100.0
    return max(0.0, min(rate, 1.0))


# === CSV 읽기 ===


def read_rows(csv_text: str) -> list[ScriptRow]:
    """CSV 텍스트(헤더 포함) → ScriptRow 목록.

    열은 헤더 이름으로 찾는다 (대소문자 무시, 순서 무관).
    빈 행은 건너뛴다.
    """
    reader = csv.reader(io.StringIO(csv_text.lstrip("\ufeff")))
    header: Optional[list[str]] = None
    rows: list[ScriptRow] = []

    for line_no, raw in enumerate(reader, start=1):
        if not any(cell.strip() for cell in raw):
            continue
        if header is None:
            header = [h.strip().lower() for h in raw]
            missing = [c for c in REQUIRED_COLUMNS if c not in header]
            if missing:
                raise ScenarioParseError(
                    f"missing required column(s): {', '.join(missing)}", line_no
                )
            continue

        def cell(name: str) -> str:
            if name not in header:
                return ""
            idx = header.index(name)
            return raw[idx].strip() if idx < len(raw) else ""

        rows.append(
            ScriptRow(
                row_number=line_no,
                row_type=cell("row_type").upper(),
                node_id=cell("node_id"),
                text_label=cell("text_label"),
                next_node=cell("next_node"),
                params=cell("params"),
            )
        )

    return rows


# === 행 처리 ===


def _normalize_type(raw_type: Optional[str], draft: _NodeDraft, row_number: int) -> None:
    if not raw_type:
        return
    if raw_type in END_TYPE_ALIASES:
        draft.node_type = NodeType.END
        draft.attrs["result"] = END_TYPE_ALIASES[raw_type]
        return
    try:
        draft.node_type = NodeType(raw_type)
    except ValueError:
        # 알 수 없는 type은 가장 보수적인 dialogue로 취급
        logger.warning(
            "row %d: unknown node type %r on '%s', treated as dialogue",
            row_number,
            raw_type,
            draft.node_id,
        )
        draft.node_type = NodeType.DIALOGUE
        draft.extra["type"] = raw_type


def _open_node(row: ScriptRow) -> _NodeDraft:
    params = parse_params(row.params)
    draft = _NodeDraft(node_id=row.node_id, node_type=NodeType.DIALOGUE)

    if row.text_label:
        draft.attrs["text"] = unescape_text(row.text_label)

    _normalize_type(params.get("type"), draft, row.row_number)

    for key, value in params.items():
        if key in NODE_STRING_PARAMS:
            draft.attrs[NODE_STRING_PARAMS[key]] = value
        elif key in NODE_INT_PARAMS:
            parsed = _to_int(value, key, row.row_number)
            if parsed is not None:
                draft.attrs[NODE_INT_PARAMS[key]] = parsed
        elif key == "encounter_rate":
            rate = _to_rate(value, row.row_number)
            if rate is not None:
                draft.attrs["encounter_rate"] = rate
        elif key == "result":
            try:
                draft.attrs["result"] = ScenarioResult(value)
            except ValueError:
                logger.warning("row %d: unknown result %r", row.row_number, value)
        elif key not in NODE_SPECIAL_PARAMS:
            draft.extra[key] = value

    if "cond" in params:
        draft.attrs["condition"] = NodeCondition(
            expr=params["cond"],
            next=params.get("next") or None,
            fallback=params.get("fallback") or None,
        )
    else:
        for key in ("next", "fallback"):
            if key in params:
                draft.extra[key] = params[key]

    # NODE 행의 next_node: 센티널이면 종료 노드, 아니면 "계속" 선택지 합성
    if row.next_node == "EXIT":
        draft.node_type = NodeType.END
        draft.attrs["result"] = ScenarioResult.SUCCESS
    elif row.next_node == "EXIT_FAIL":
        draft.node_type = NodeType.END
        draft.attrs["result"] = ScenarioResult.FAILURE
    elif row.next_node:
        draft.choices.append(Choice(label=CONTINUE_LABEL, next=row.next_node))

    return draft


def _make_choice(row: ScriptRow, current_id: str) -> Choice:
    params = parse_params(row.params)
    kwargs: dict[str, Any] = {}
    extra: dict[str, Any] = {}

    for key, value in params.items():
        if key == "cost_gold":
            parsed = _to_int(value, key, row.row_number)
            if parsed is not None:
                kwargs["cost_gold"] = max(0, parsed)
        elif key in ("req_card", "req_tag"):
            kwargs[key] = value
        elif key in ("cost_type", "cost_val"):
            continue
        else:
            extra[key] = value

    cost_type = params.get("cost_type")
    if cost_type and "cost_val" in params:
        parsed = _to_int(params["cost_val"], "cost_val", row.row_number)
        if parsed is not None and cost_type in ("vitality", "gold"):
            kwargs[f"cost_{cost_type}"] = max(0, parsed)

    return Choice(
        label=unescape_text(row.text_label) or "...",
        next=row.next_node or current_id,
        extra=extra,
        **kwargs,
    )


def _consume(acc: _Accumulator, row: ScriptRow) -> _Accumulator:
    if row.row_type == "NODE":
        if not row.node_id:
            logger.warning("row %d: NODE row without node_id skipped", row.row_number)
            acc.current_id = None
            return acc
        if row.node_id in acc.drafts:
            logger.warning(
                "row %d: duplicate node_id '%s' overrides earlier definition",
                row.row_number,
                row.node_id,
            )
        acc.drafts[row.node_id] = _open_node(row)
        acc.current_id = row.node_id
    elif row.row_type == "CHOICE":
        if acc.current_id is None:
            logger.warning(
                "row %d: CHOICE row before any NODE row skipped", row.row_number
            )
            return acc
        acc.drafts[acc.current_id].choices.append(_make_choice(row, acc.current_id))
    else:
        logger.warning(
            "row %d: unknown row_type %r skipped", row.row_number, row.row_type
        )
    return acc


def _finish(draft: _NodeDraft) -> Node:
    return build_node(
        draft.node_type,
        draft.node_id,
        draft.attrs,
        choices=tuple(draft.choices),
        extra=draft.extra,
    )


def parse_rows(rows: list[ScriptRow], scenario_id: str = "") -> Scenario:
    """ScriptRow 목록 → Scenario"""
    acc = _Accumulator()
    for row in rows:
        acc = _consume(acc, row)

    nodes = {node_id: _finish(draft) for node_id, draft in acc.drafts.items()}
    return Scenario(
        scenario_id=scenario_id,
        nodes=nodes,
        entry_id=resolve_entry_id(nodes),
    )


def parse_scenario_csv(csv_text: str, scenario_id: str = "") -> Scenario:
    """CSV 텍스트 → Scenario. 같은 입력이면 항상 같은 그래프."""
    scenario = parse_rows(read_rows(csv_text), scenario_id)
    logger.info(
        "Parsed scenario '%s': %d nodes, entry=%s",
        scenario_id,
        len(scenario),
        scenario.entry_id or "-",
    )
    return scenario
