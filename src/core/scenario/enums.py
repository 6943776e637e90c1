"""시나리오 관련 열거형 및 센티널"""

from enum import Enum


class NodeType(str, Enum):
    DIALOGUE = "dialogue"
    TRAVEL = "travel"
    BATTLE = "battle"
    GUEST_JOIN = "guest_join"
    RANDOM_BRANCH = "random_branch"
    CHECK_STATUS = "check_status"
    SHOP_SPECIAL = "shop_special"
    PROCESS_REWARDS = "process_rewards"
    END = "end"


class ScenarioResult(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class SessionPhase(str, Enum):
    AWAITING_CHOICE = "awaiting_choice"
    IN_BATTLE = "in_battle"
    FINISHED = "finished"


# === 종료 센티널 ===
# 노드로 존재하지 않아도 되는 next 값
SENTINEL_SUCCESS = ("end", "EXIT")
SENTINEL_FAILURE = ("EXIT_FAIL",)
SENTINELS = SENTINEL_SUCCESS + SENTINEL_FAILURE

# 자동 진행 선택지 라벨
CONTINUE_LABEL = "続ける"

# 분기 노드의 예약 라벨
BRANCH_HIT = "hit"
BRANCH_MISS = "miss"
CHECK_SUCCESS = "success"
CHECK_FAILURE = "failure"
BATTLE_WIN = "win"
BATTLE_LOSE = "lose"


def sentinel_result(next_id: str) -> ScenarioResult | None:
    """센티널이면 결과, 아니면 None."""
    if next_id in SENTINEL_SUCCESS:
        return ScenarioResult.SUCCESS
    if next_id in SENTINEL_FAILURE:
        return ScenarioResult.FAILURE
    return None
