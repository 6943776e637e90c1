"""플레이어 스냅샷 (DB 무관)

영속 계층이 조회해서 넘겨주는 평범한 데이터.
엔진은 이 값을 직접 바꾸지 않고, 갱신할 필드를 dict로 돌려준다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class PlayerSnapshot:
    """플레이어 상태"""

    player_id: str

    # 성장
    level: int = 1
    exp: int = 0
    hp: int = 85
    max_hp: int = 85
    initial_hp: Optional[int] = None  # 캐릭터 생성 시 HP. None이면 BASE_HP_MIN
    atk: int = 1
    defense: int = 1
    max_deck_cost: int = 8

    # 수명
    age: int = 18
    age_days: int = 0
    vitality: int = 100
    max_vitality: int = 100

    # 자원
    gold: int = 0

    # 선택지 조건 판정용
    tags: frozenset[str] = field(default_factory=frozenset)
    card_ids: frozenset[str] = field(default_factory=frozenset)
    alignment: dict[str, int] = field(default_factory=dict)  # order/chaos/justice/evil

    current_quest_id: Optional[str] = None

    def stat(self, name: str) -> int:
        """check_status 노드용 스탯 조회. 없으면 0."""
        if name in self.alignment:
            return self.alignment[name]
        if name == "def":
            return self.defense
        value = getattr(self, name, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return 0
