from __future__ import annotations

from inventorymsa import policy
from inventorymsa.core import AbstractEventStore, AbstractOrderAllocationStore, get_logger
from inventorymsa.domain.commands import TransitionOrderAllocationCommand
from inventorymsa.domain.events import IncomingOrderPaymentAcceptedEvent, OrderEventData
from inventorymsa.services.base import WorkerService

logger = get_logger("inventorymsa.services.complete")


class CompleteOrderPaymentAcceptedWorkerService(WorkerService):
    """결제가 승인된 주문의 할당을 완료 상태로 바꿉니다."""

    event_class = IncomingOrderPaymentAcceptedEvent

    def __init__(self, allocations: AbstractOrderAllocationStore, events: AbstractEventStore):
        super().__init__(events)
        self.allocations = allocations

    def complete_order(self, event: IncomingOrderPaymentAcceptedEvent) -> None:
        self.handle(event)

    def process(self, event: IncomingOrderPaymentAcceptedEvent) -> None:  # type: ignore[override]
        data: OrderEventData = event.event_data  # type: ignore
        existing = self.allocations.get(data.order_id, data.sku)
        decision = policy.decide_on_payment_accepted(existing)

        if decision.requires_write and existing is not None:
            command = TransitionOrderAllocationCommand.validate_and_build(existing, decision)
            outcome = self.allocations.conditional_write(command)
            decision = policy.decide_after_write(decision, outcome)

        logger.info("complete %s/%s: %s", data.order_id, data.sku, decision.action.value)
        self.raise_order_event(decision.emit, data)
