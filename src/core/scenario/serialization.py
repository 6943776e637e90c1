"""정규화 JSON 형식 ↔ Scenario

형식: { "nodes": { id: { "type": ..., "text": ..., "choices": [{label, next, ...}], ... } } }
DB의 scenario.script 컬럼이 이 형식을 저장한다.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from src.core.scenario.enums import NodeType, ScenarioResult
from src.core.scenario.models import (
    Choice,
    Node,
    NodeCondition,
    Scenario,
    build_node,
    resolve_entry_id,
)

logger = logging.getLogger(__name__)

_CHOICE_FIELDS = ("cost_vitality", "cost_gold", "req_tag", "req_card")
_SKIP_NODE_FIELDS = ("node_id", "choices", "extra", "condition", "text")


def choice_to_dict(choice: Choice) -> dict[str, Any]:
    data: dict[str, Any] = {"label": choice.label, "next": choice.next}
    for name in _CHOICE_FIELDS:
        value = getattr(choice, name)
        if value:
            data[name] = value
    data.update(choice.extra)
    return data


def node_to_dict(node: Node) -> dict[str, Any]:
    node_type = node.node_type.value
    if node.node_type == NodeType.DIALOGUE and "type" in node.extra:
        # 알 수 없는 type 태그는 원래 값으로 저장
        node_type = node.extra["type"]
    data: dict[str, Any] = {"type": node_type}
    if node.text:
        data["text"] = node.text
    for f in dataclasses.fields(node):
        if f.name in _SKIP_NODE_FIELDS:
            continue
        value = getattr(node, f.name)
        if value is None:
            continue
        if isinstance(value, ScenarioResult):
            value = value.value
        data[f.name] = value
    if node.condition is not None:
        data["cond"] = node.condition.expr
        if node.condition.next:
            data["cond_next"] = node.condition.next
        if node.condition.fallback:
            data["cond_fallback"] = node.condition.fallback
    for key, value in node.extra.items():
        if key == "type":
            continue
        data.setdefault(key, value)
    data["choices"] = [choice_to_dict(c) for c in node.choices]
    return data


def scenario_to_dict(scenario: Scenario) -> dict[str, Any]:
    return {"nodes": {nid: node_to_dict(n) for nid, n in scenario.nodes.items()}}


def choice_from_dict(data: dict[str, Any]) -> Choice:
    extra = {
        k: v
        for k, v in data.items()
        if k not in ("label", "next") and k not in _CHOICE_FIELDS
    }
    return Choice(
        label=str(data.get("label", "...")),
        next=str(data.get("next", "")),
        cost_vitality=int(data.get("cost_vitality", 0) or 0),
        cost_gold=int(data.get("cost_gold", 0) or 0),
        req_tag=data.get("req_tag"),
        req_card=data.get("req_card"),
        extra=extra,
    )


def node_from_dict(node_id: str, data: dict[str, Any]) -> Node:
    raw_type = data.get("type") or NodeType.DIALOGUE.value
    attrs: dict[str, Any] = {}
    extra: dict[str, Any] = {}

    try:
        node_type = NodeType(raw_type)
    except ValueError:
        logger.warning("Unknown node type %r on '%s', treated as dialogue", raw_type, node_id)
        node_type = NodeType.DIALOGUE
        extra["type"] = raw_type

    for key, value in data.items():
        if key in ("type", "choices", "cond", "cond_next", "cond_fallback"):
            continue
        if key == "result":
            attrs["result"] = ScenarioResult(value)
        else:
            attrs[key] = value

    if data.get("cond"):
        attrs["condition"] = NodeCondition(
            expr=data["cond"],
            next=data.get("cond_next"),
            fallback=data.get("cond_fallback"),
        )

    choices = tuple(choice_from_dict(c) for c in data.get("choices") or [])
    return build_node(node_type, node_id, attrs, choices=choices, extra=extra)


def scenario_from_dict(data: dict[str, Any], scenario_id: str = "") -> Scenario:
    raw_nodes: dict[str, Any] = data.get("nodes") or {}
    nodes = {nid: node_from_dict(nid, raw) for nid, raw in raw_nodes.items()}
    return Scenario(
        scenario_id=scenario_id, nodes=nodes, entry_id=resolve_entry_id(nodes)
    )
