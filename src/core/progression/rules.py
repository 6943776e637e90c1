"""성장/노화 규칙 상수"""

# === HP ===
BASE_HP_MIN = 85  # initial_hp 미기록 시 기본값
BASE_HP_MAX = 120
HP_PER_LEVEL = 10

# === 덱 코스트 ===
BASE_DECK_COST = 8
COST_PER_LEVEL = 2

# === 방어 ===
DEF_MILESTONE_INTERVAL = 5  # 5레벨마다
DEF_PER_MILESTONE = 1

# === 경험치 ===
EXP_BASE = 100  # 다음 레벨 임계값 = EXP_BASE * level^2
BATTLE_EXP_BONUS = 30  # 전투 노드 1회당
QUEST_EXP_PER_DIFFICULTY = 20  # 보상 exp 미지정 시 difficulty * 20

# === 노화 ===
DAYS_PER_YEAR = 365
DECAY_START_AGE = 40
# 연령대 하한 → 1년당 최대 활력 감소량
DECAY_RATES: dict[int, int] = {
    40: 2,
    50: 5,
    60: 10,
}

# === 활력 상태 ===
TWILIGHT_VITALITY = 40  # 미만이면 Twilight
DEFAULT_DAYS_PER_QUEST = 1


def exp_threshold(level: int) -> int:
    """level → level+1 에 필요한 누적 경험치"""
    return EXP_BASE * level**2


def decay_rate_for_age(age: int) -> int:
    """해당 나이가 되는 해의 활력 감소량. 40세 미만 0."""
    if age < DECAY_START_AGE:
        return 0
    if age < 50:
        return DECAY_RATES[40]
    if age < 60:
        return DECAY_RATES[50]
    return DECAY_RATES[60]
