"""관리자용 SKU API 서비스."""
from __future__ import annotations

from typing import Any, Mapping

from inventorymsa.core import AbstractEventStore, AbstractSkuStore, get_logger
from inventorymsa.domain.commands import ListSkusCommand
from inventorymsa.domain.events import SkuRestockedEvent
from inventorymsa.domain.models import Sku
from inventorymsa.services.base import WorkerService

logger = get_logger("inventorymsa.services.sku")


class RestockSkuApiService(WorkerService):
    """입고 요청을 ``SKU_RESTOCKED_EVENT`` 로 이벤트 스토어에 기록합니다.

    실제 재고 반영은 이 이벤트를 받은 :class:`RestockSkuWorkerService` 가 합니다.
    """

    event_class = SkuRestockedEvent

    def restock_sku(self, request: Mapping[str, Any]) -> SkuRestockedEvent:
        event = SkuRestockedEvent.validate_and_build(request)
        self.handle(event)
        return event

    def process(self, event: SkuRestockedEvent) -> None:  # type: ignore[override]
        self.raise_event(event)


class ListSkusApiService:
    def __init__(self, skus: AbstractSkuStore):
        self.skus = skus

    def list_skus(self, request: Mapping[str, Any]) -> list[Sku]:
        command = ListSkusCommand.validate_and_build(request)
        logger.info("list_skus: %r", command)
        return self.skus.list_skus(command)
