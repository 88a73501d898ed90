from __future__ import annotations

from typing import Optional, Type

from inventorymsa.core import (
    AbstractEventStore,
    AppError,
    DuplicateEventRaisedError,
    InvalidArgumentsError,
    UnrecognizedError,
    get_logger,
)
from inventorymsa.domain.events import InventoryEvent, OrderEventData, OutgoingOrderEvent

logger = get_logger("inventorymsa.services")


class WorkerService:
    """워커 서비스의 공통 동작.

    하위 클래스의 핸들러는 :meth:`handle` 로 감싸서 호출됩니다. 도메인 에러는 그대로
    전파하고, 그 밖의 예외는 :class:`UnrecognizedError` 로 바꿉니다.
    """

    event_class: Type[InventoryEvent]

    def __init__(self, events: AbstractEventStore):
        self.events = events

    def check_event(self, event: object):
        if not isinstance(event, self.event_class):
            raise InvalidArgumentsError.from_cause(
                message=f"{type(self).__name__}: expected {self.event_class.__name__} but got {event!r}"
            )

    def handle(self, event: InventoryEvent) -> None:
        logger.info("%s init: %r", type(self).__name__, event)
        try:
            self.check_event(event)
            self.process(event)
        except AppError as e:
            logger.error("%s exit error: %r", type(self).__name__, e)
            raise
        except Exception as e:
            logger.exception("%s exit error: unexpected", type(self).__name__)
            raise UnrecognizedError.from_cause(e) from e
        logger.info("%s exit success", type(self).__name__)

    def process(self, event: InventoryEvent) -> None:
        raise NotImplementedError

    def raise_event(self, event: InventoryEvent) -> None:
        """이벤트 스토어에 이벤트를 저장합니다. 이미 저장된 이벤트라면 성공으로 봅니다."""
        try:
            self.events.append(event)
        except DuplicateEventRaisedError as e:
            logger.info("event already raised, skipping: %r", e)

    def raise_order_event(
        self, event_class: Optional[Type[OutgoingOrderEvent]], data: OrderEventData
    ) -> None:
        if event_class is None:
            return
        self.raise_event(event_class.validate_and_build(data))
