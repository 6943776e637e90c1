"""EventBus - 서비스 간 이벤트 통신

규칙:
- 서비스는 다른 서비스를 직접 import하지 않는다 (시나리오 → 파티, 시나리오 → 성장)
- 이벤트 data에는 ID와 원시값만 담는다
- 전파 깊이 최대 MAX_DEPTH 단계
- 한 요청(체인) 안에서 같은 source의 같은 이벤트는 한 번만
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Set

from src.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5


@dataclass
class GameEvent:
    """이벤트 데이터 컨테이너

    Args:
        event_type: EventTypes 상수 (예: "guest_joined")
        data: ID 위주 데이터
        source: 발행한 서비스 이름
    """

    event_type: str
    data: Dict[str, Any]
    source: str

    # 내부 추적용
    _depth: int = field(default=0, repr=False)

    @property
    def depth(self) -> int:
        return self._depth


EventHandler = Callable[[GameEvent], None]


class EventBus:
    """동기식 이벤트 버스

    사용 패턴:
        bus = EventBus()
        bus.subscribe(EventTypes.GUEST_JOINED, party_service.handle_guest_joined)
        bus.emit(GameEvent(EventTypes.GUEST_JOINED, {"player_id": "p1", "guest_id": "ally"}, "scenario_service"))
        bus.reset_chain()  # 요청 처리 끝에서

    핸들러 예외는 로그만 남기고 다음 핸들러로 진행한다.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._current_depth: int = 0
        self._emitted_in_chain: Set[str] = set()

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug("EventBus subscribe: %s → %s", event_type, handler.__qualname__)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type)
        if not handlers or handler not in handlers:
            logger.warning(
                "EventBus: handler not registered: %s → %s",
                event_type,
                handler.__qualname__,
            )
            return
        handlers.remove(handler)

    def emit(self, event: GameEvent) -> bool:
        """이벤트 발행. 핸들러를 등록 순서대로 동기 호출.

        Returns:
            전파되었으면 True, 깊이 초과/중복으로 차단되었으면 False
        """
        if self._current_depth >= MAX_DEPTH:
            logger.warning(
                "EventBus depth limit (%d) reached, dropped %s:%s",
                MAX_DEPTH,
                event.source,
                event.event_type,
            )
            return False

        # 같은 유형이라도 data가 다르면 별개 이벤트
        chain_key = f"{event.source}:{event.event_type}:{sorted(event.data.items())!r}"
        if chain_key in self._emitted_in_chain:
            logger.warning("EventBus duplicate blocked: %s", chain_key)
            return False

        self._emitted_in_chain.add(chain_key)
        event._depth = self._current_depth

        handlers = list(self._handlers.get(event.event_type, []))
        if not handlers:
            logger.debug("EventBus: no subscribers for %s", event.event_type)
            return True

        logger.info(
            "EventBus emit: %s (source=%s, depth=%d, handlers=%d)",
            event.event_type,
            event.source,
            self._current_depth,
            len(handlers),
        )

        self._current_depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        "EventBus handler error: %s (event=%s)",
                        handler.__qualname__,
                        event.event_type,
                    )
        finally:
            self._current_depth -= 1
        return True

    def reset_chain(self) -> None:
        """요청 처리 종료 시 호출. 중복 추적 초기화."""
        self._emitted_in_chain.clear()
        self._current_depth = 0

    def clear(self) -> None:
        """모든 구독 해제 (테스트용)"""
        self._handlers.clear()
        self.reset_chain()

    @property
    def handler_count(self) -> int:
        return sum(len(h) for h in self._handlers.values())
