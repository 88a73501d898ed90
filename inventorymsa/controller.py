"""큐에서 받은 메세지 배치를 서비스로 전달하는 컨트롤러."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Generic, Optional, Sequence, Type, TypeVar

from inventorymsa.cdc import parse_new_image
from inventorymsa.core import get_logger, is_transient_error
from inventorymsa.domain.events import (
    IncomingEvent,
    IncomingOrderCreatedEvent,
    IncomingOrderPaymentAcceptedEvent,
    IncomingOrderPaymentRejectedEvent,
    IncomingSkuRestockedEvent,
)

if TYPE_CHECKING:
    from inventorymsa.services import Services

logger = get_logger("inventorymsa.controller")

E = TypeVar("E", bound=IncomingEvent)


@dataclass(frozen=True)
class QueueMessage:
    """큐에서 받은 메세지.

    ``attempts`` 는 이전에 처리에 실패해서 다시 큐에 들어간 횟수이고, ``raw`` 는
    큐에 저장된 원본 문자열로 처리 완료 후 처리중 목록에서 지울 때 씁니다.
    """

    message_id: str
    body: str
    attempts: int = 0
    raw: Optional[str] = field(default=None, compare=False, repr=False)


@dataclass
class BatchResponse:
    """재전송이 필요한 메세지 ID 목록. 입력 순서를 유지합니다."""

    batch_item_failures: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "batchItemFailures": [
                {"itemIdentifier": message_id} for message_id in self.batch_item_failures
            ]
        }


class BatchDispatchController(Generic[E]):
    """메세지 배치를 순서대로 처리하고 재전송할 메세지를 골라냅니다.

    처리에 실패한 메세지는 에러가 일시적(transient)일 때만 실패 목록에 들어가고,
    그렇지 않으면 로그를 남기고 버립니다. 메세지 하나의 실패가 다른 메세지 처리에
    영향을 주지 않습니다.
    """

    def __init__(self, name: str, event_class: Type[E], handler: Callable[[E], None]):
        self.name = name
        self.event_class = event_class
        self.handler = handler

    def dispatch(self, messages: Optional[Sequence[QueueMessage]]) -> BatchResponse:
        response = BatchResponse()
        if messages is None:
            logger.error("%s: received no message batch", self.name)
            return response

        logger.info("%s: dispatching %d message(s)", self.name, len(messages))
        for message in messages:
            try:
                self.dispatch_single(message)
            except Exception as e:
                if is_transient_error(e):
                    logger.warning("%s: message %s will be redelivered: %r", self.name, message.message_id, e)
                    response.batch_item_failures.append(message.message_id)
                else:
                    logger.warning("%s: message %s dropped: %r", self.name, message.message_id, e)

        return response

    def dispatch_single(self, message: QueueMessage) -> None:
        event = self.event_class.validate_and_build(parse_new_image(message.body))
        self.handler(event)


def build_controller(worker: str, services: Services) -> BatchDispatchController:
    """워커 이름(``allocate``, ``complete``, ``deallocate``, ``restock``)에 맞는 컨트롤러."""
    if worker == "allocate":
        return BatchDispatchController(
            "AllocateOrderStockWorker",
            IncomingOrderCreatedEvent,
            services.allocate.allocate_order_stock,
        )
    if worker == "complete":
        return BatchDispatchController(
            "CompleteOrderPaymentAcceptedWorker",
            IncomingOrderPaymentAcceptedEvent,
            services.complete.complete_order,
        )
    if worker == "deallocate":
        return BatchDispatchController(
            "DeallocateOrderPaymentRejectedWorker",
            IncomingOrderPaymentRejectedEvent,
            services.deallocate.deallocate_order,
        )
    if worker == "restock":
        return BatchDispatchController(
            "RestockSkuWorker",
            IncomingSkuRestockedEvent,
            services.restock.restock_sku,
        )
    raise ValueError(f"unknown worker: {worker}")
