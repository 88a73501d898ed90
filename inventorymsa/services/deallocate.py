from __future__ import annotations

from inventorymsa import policy
from inventorymsa.core import AbstractEventStore, AbstractOrderAllocationStore, get_logger
from inventorymsa.domain.commands import TransitionOrderAllocationCommand
from inventorymsa.domain.events import IncomingOrderPaymentRejectedEvent, OrderEventData
from inventorymsa.services.base import WorkerService

logger = get_logger("inventorymsa.services.deallocate")


class DeallocateOrderPaymentRejectedWorkerService(WorkerService):
    """결제가 거절된 주문의 할당을 해제하고 재고를 되돌립니다.

    상태 변경과 재고 복원은 하나의 트랜잭션으로 처리되므로 한쪽만 반영되는 일은
    없습니다.
    """

    event_class = IncomingOrderPaymentRejectedEvent

    def __init__(self, allocations: AbstractOrderAllocationStore, events: AbstractEventStore):
        super().__init__(events)
        self.allocations = allocations

    def deallocate_order(self, event: IncomingOrderPaymentRejectedEvent) -> None:
        self.handle(event)

    def process(self, event: IncomingOrderPaymentRejectedEvent) -> None:  # type: ignore[override]
        data: OrderEventData = event.event_data  # type: ignore
        existing = self.allocations.get(data.order_id, data.sku)
        decision = policy.decide_on_payment_rejected(existing)

        if decision.requires_write and existing is not None:
            command = TransitionOrderAllocationCommand.validate_and_build(existing, decision)
            outcome = self.allocations.conditional_write(command)
            decision = policy.decide_after_write(decision, outcome)

        logger.info("deallocate %s/%s: %s", data.order_id, data.sku, decision.action.value)
        self.raise_order_event(decision.emit, data)
