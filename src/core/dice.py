"""주사위 소스 - 엔진의 유일한 난수 경계

엔진 안의 무작위 판정:
- 이동 조우 판정 (random() < encounter_rate)
- 엄호 판정 (randrange(100) < cover_rate)
- 무작위 분기 노드 (randrange(100) < prob)
- 캐릭터 생성 편차

모두 Dice를 주입받아 굴린다. 테스트는 ScriptedDice로 결과를 고정한다.
"""

from __future__ import annotations

import random
from typing import Optional, Protocol, Sequence


class Dice(Protocol):
    """난수 소스 인터페이스"""

    def random(self) -> float:
        """[0, 1) 균등 분포 실수"""
        ...

    def randrange(self, stop: int) -> int:
        """[0, stop) 정수"""
        ...


class SystemDice:
    """기본 구현. seed가 None이면 모듈 전역 random을 사용한다."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed) if seed is not None else None

    def random(self) -> float:
        if self._rng is not None:
            return self._rng.random()
        return random.random()

    def randrange(self, stop: int) -> int:
        if self._rng is not None:
            return self._rng.randrange(stop)
        return random.randrange(stop)


class ScriptedDice:
    """미리 정해둔 값을 순서대로 돌려주는 주사위 (테스트/리플레이용).

    floats, ints 각각 독립된 큐. 소진되면 IndexError.
    """

    def __init__(
        self,
        floats: Sequence[float] = (),
        ints: Sequence[int] = (),
    ) -> None:
        self._floats = list(floats)
        self._ints = list(ints)

    def random(self) -> float:
        return self._floats.pop(0)

    def randrange(self, stop: int) -> int:
        value = self._ints.pop(0)
        if not 0 <= value < stop:
            raise ValueError(f"scripted roll {value} out of range [0, {stop})")
        return value

    @property
    def remaining(self) -> int:
        return len(self._floats) + len(self._ints)
