"""재고 서비스의 유스케이스."""
from __future__ import annotations

from dataclasses import dataclass

from inventorymsa.core import AbstractEventStore, AbstractOrderAllocationStore, AbstractSkuStore

from .allocate import AllocateOrderStockWorkerService
from .complete import CompleteOrderPaymentAcceptedWorkerService
from .deallocate import DeallocateOrderPaymentRejectedWorkerService
from .restock import RestockSkuWorkerService
from .sku import ListSkusApiService, RestockSkuApiService


@dataclass
class Services:
    allocate: AllocateOrderStockWorkerService
    complete: CompleteOrderPaymentAcceptedWorkerService
    deallocate: DeallocateOrderPaymentRejectedWorkerService
    restock: RestockSkuWorkerService
    restock_api: RestockSkuApiService
    list_skus_api: ListSkusApiService


def build_services(
    allocations: AbstractOrderAllocationStore,
    skus: AbstractSkuStore,
    events: AbstractEventStore,
) -> Services:
    return Services(
        allocate=AllocateOrderStockWorkerService(allocations, events),
        complete=CompleteOrderPaymentAcceptedWorkerService(allocations, events),
        deallocate=DeallocateOrderPaymentRejectedWorkerService(allocations, events),
        restock=RestockSkuWorkerService(skus, events),
        restock_api=RestockSkuApiService(events),
        list_skus_api=ListSkusApiService(skus),
    )
