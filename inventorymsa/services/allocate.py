from __future__ import annotations

from inventorymsa import policy
from inventorymsa.core import AbstractEventStore, AbstractOrderAllocationStore, get_logger
from inventorymsa.domain.commands import AllocateOrderStockCommand
from inventorymsa.domain.events import IncomingOrderCreatedEvent, OrderEventData
from inventorymsa.services.base import WorkerService

logger = get_logger("inventorymsa.services.allocate")


class AllocateOrderStockWorkerService(WorkerService):
    """주문 생성 이벤트를 받아 재고를 할당합니다.

    재고가 충분하면 할당 레코드를 만들고 ``ORDER_STOCK_ALLOCATED_EVENT`` 를,
    부족하면 ``ORDER_STOCK_DEPLETED_EVENT`` 를 발행합니다. 이미 할당된 주문이면
    할당 이벤트만 다시 발행합니다.
    """

    event_class = IncomingOrderCreatedEvent

    def __init__(self, allocations: AbstractOrderAllocationStore, events: AbstractEventStore):
        super().__init__(events)
        self.allocations = allocations

    def allocate_order_stock(self, event: IncomingOrderCreatedEvent) -> None:
        self.handle(event)

    def process(self, event: IncomingOrderCreatedEvent) -> None:  # type: ignore[override]
        data: OrderEventData = event.event_data  # type: ignore
        existing = self.allocations.get(data.order_id, data.sku)
        decision = policy.decide_on_order_created(existing)

        if decision.requires_write:
            command = AllocateOrderStockCommand.validate_and_build(event)
            outcome = self.allocations.conditional_write(command)
            decision = policy.decide_after_write(decision, outcome)

        logger.info("allocate %s/%s: %s", data.order_id, data.sku, decision.action.value)
        self.raise_order_event(decision.emit, data)
