"""재고 도메인 모델.

모든 모델은 불변 객체이며, 상태 변경은 저장소의 조건부 쓰기로만 일어납니다.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass


class AllocationStatus(str, enum.Enum):
    ALLOCATED = "ALLOCATED"
    COMPLETED_PAYMENT_ACCEPTED = "COMPLETED_PAYMENT_ACCEPTED"
    PAYMENT_REJECTED = "PAYMENT_REJECTED"
    DEALLOCATED_ORDER_CANCELED = "DEALLOCATED_ORDER_CANCELED"


@dataclass(frozen=True)
class OrderAllocation:
    """주문 하나가 SKU 하나에 대해 예약한 재고.

    (sku, order_id) 쌍마다 최대 하나만 존재합니다.
    """

    order_id: str
    sku: str
    units: int
    price: float
    user_id: str
    allocation_status: AllocationStatus
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class Sku:
    """SKU 별 가용 재고 카운터."""

    sku: str
    units: int
    created_at: str
    updated_at: str

    def to_dict(self) -> dict:
        return {
            "sku": self.sku,
            "units": self.units,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class RestockLot:
    sku: str
    units: int
    lot_id: str
    created_at: str
    updated_at: str
