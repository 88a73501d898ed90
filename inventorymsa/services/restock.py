from __future__ import annotations

from inventorymsa.core import AbstractEventStore, AbstractSkuStore, WriteOutcome, get_logger
from inventorymsa.domain.commands import RestockSkuCommand
from inventorymsa.domain.events import IncomingSkuRestockedEvent
from inventorymsa.services.base import WorkerService

logger = get_logger("inventorymsa.services.restock")


class RestockSkuWorkerService(WorkerService):
    """입고 이벤트를 받아 SKU 재고를 늘립니다. 같은 로트는 한 번만 반영됩니다."""

    event_class = IncomingSkuRestockedEvent

    def __init__(self, skus: AbstractSkuStore, events: AbstractEventStore):
        super().__init__(events)
        self.skus = skus

    def restock_sku(self, event: IncomingSkuRestockedEvent) -> None:
        self.handle(event)

    def process(self, event: IncomingSkuRestockedEvent) -> None:  # type: ignore[override]
        command = RestockSkuCommand.validate_and_build(event)
        outcome = self.skus.restock(command)
        if outcome == WriteOutcome.GUARD_FAILED:
            logger.info("lot %s already restocked for %s", command.lot_id, command.sku)
