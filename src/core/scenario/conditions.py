"""선택지/노드 조건 판정 - 순수 Python"""

import logging
from typing import Optional

from src.core.player import PlayerSnapshot
from src.core.scenario.models import Choice

logger = logging.getLogger(__name__)

# "min_*" 조건 → 스냅샷 필드
MIN_CONDITIONS: dict[str, str] = {
    "min_level": "level",
    "min_gold": "gold",
    "min_vitality": "vitality",
    "min_age": "age",
}


def evaluate_condition(expr: str, player: PlayerSnapshot) -> bool:
    """노드 조건식 평가.

    지원:
    - has_tag:<tag>, has_card:<card_id>
    - min_level:<n>, min_gold:<n>, min_vitality:<n>, min_age:<n>
    - <stat>:<n>  (player.stat(stat) >= n, 예: "order:50")
    알 수 없는 식은 False (보수적으로 fallback 경로).
    """
    kind, _, arg = expr.partition(":")
    kind = kind.strip()
    arg = arg.strip()

    if kind == "has_tag":
        return arg in player.tags
    if kind == "has_card":
        return arg in player.card_ids

    try:
        threshold = int(arg)
    except ValueError:
        logger.warning("Unsupported condition expression: %r", expr)
        return False

    if kind in MIN_CONDITIONS:
        return getattr(player, MIN_CONDITIONS[kind]) >= threshold
    return player.stat(kind) >= threshold


def check_choice(choice: Choice, player: PlayerSnapshot) -> Optional[str]:
    """선택 가능 여부. 가능하면 None, 불가하면 사유 태그.

    순서: req_tag → req_card → 활력 비용 → 골드 비용
    비용은 자원을 음수로 만들 수 없다.
    """
    if choice.req_tag and choice.req_tag not in player.tags:
        return "req_tag"
    if choice.req_card and choice.req_card not in player.card_ids:
        return "req_card"
    if choice.cost_vitality and player.vitality < choice.cost_vitality:
        return "insufficient_vitality"
    if choice.cost_gold and player.gold < choice.cost_gold:
        return "insufficient_gold"
    return None
