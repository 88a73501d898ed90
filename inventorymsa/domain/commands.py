"""저장소에 전달되는 조건부 쓰기 커맨드."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional

from inventorymsa.core.errors import InvalidArgumentsError
from inventorymsa.core.models import Command
from inventorymsa.domain.events import (
    IncomingOrderCreatedEvent,
    IncomingSkuRestockedEvent,
    OrderEventData,
    RestockEventData,
)
from inventorymsa.domain.models import AllocationStatus, OrderAllocation
from inventorymsa.schema import ListSkusRequestSchema, validate
from inventorymsa.utils import later_of, utcnow_iso

if TYPE_CHECKING:
    from inventorymsa.policy import Decision


@dataclass(frozen=True)
class AllocateOrderStockCommand(Command):
    """할당 레코드를 새로 만들고 SKU 재고를 차감합니다.

    할당 레코드가 없고, SKU 재고가 ``units`` 이상일 때만 성공합니다.
    """

    order_id: str
    sku: str
    units: int
    price: float
    user_id: str
    created_at: str
    updated_at: str
    allocation_status: AllocationStatus = AllocationStatus.ALLOCATED

    @classmethod
    def validate_and_build(
        cls, event: IncomingOrderCreatedEvent
    ) -> AllocateOrderStockCommand:
        if not isinstance(event, IncomingOrderCreatedEvent):
            raise InvalidArgumentsError.from_cause(
                message=f"{cls.__name__}: expected IncomingOrderCreatedEvent but got {event!r}"
            )
        data: OrderEventData = event.event_data  # type: ignore
        now = utcnow_iso()
        return cls(
            order_id=data.order_id,
            sku=data.sku,
            units=data.units,
            price=data.price,
            user_id=data.user_id,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True)
class TransitionOrderAllocationCommand(Command):
    """할당 레코드의 상태를 바꿉니다.

    레코드가 존재하고 ``order_id``, ``sku``, ``units`` 가 일치하며 현재 상태가
    ``expected_allocation_status`` 일 때만 성공합니다. ``restore_units`` 가 0 보다
    크면 같은 트랜잭션 안에서 SKU 재고를 그만큼 되돌립니다.
    """

    order_id: str
    sku: str
    units: int
    allocation_status: AllocationStatus
    expected_allocation_status: AllocationStatus
    updated_at: str
    restore_units: int = 0

    @classmethod
    def validate_and_build(
        cls, existing: OrderAllocation, decision: Decision
    ) -> TransitionOrderAllocationCommand:
        if not isinstance(existing, OrderAllocation):
            raise InvalidArgumentsError.from_cause(
                message=f"{cls.__name__}: expected OrderAllocation but got {existing!r}"
            )
        if decision.allocation_status is None or decision.expected_allocation_status is None:
            raise InvalidArgumentsError.from_cause(
                message=f"{cls.__name__}: decision has no transition: {decision!r}"
            )
        if existing.allocation_status != decision.expected_allocation_status:
            raise InvalidArgumentsError.from_cause(
                message=(
                    f"{cls.__name__}: allocation is {existing.allocation_status.value}, "
                    f"expected {decision.expected_allocation_status.value}"
                )
            )
        return cls(
            order_id=existing.order_id,
            sku=existing.sku,
            # 수량은 들어온 이벤트가 아니라 기존 레코드를 따릅니다.
            units=existing.units,
            allocation_status=decision.allocation_status,
            expected_allocation_status=decision.expected_allocation_status,
            updated_at=later_of(utcnow_iso(), existing.updated_at),
            restore_units=existing.units if decision.restore_units else 0,
        )


@dataclass(frozen=True)
class RestockSkuCommand(Command):
    sku: str
    units: int
    lot_id: str
    created_at: str
    updated_at: str

    @classmethod
    def validate_and_build(cls, event: IncomingSkuRestockedEvent) -> RestockSkuCommand:
        if not isinstance(event, IncomingSkuRestockedEvent):
            raise InvalidArgumentsError.from_cause(
                message=f"{cls.__name__}: expected IncomingSkuRestockedEvent but got {event!r}"
            )
        data: RestockEventData = event.event_data  # type: ignore
        now = utcnow_iso()
        return cls(
            sku=data.sku,
            units=data.units,
            lot_id=data.lot_id,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True)
class ListSkusCommand(Command):
    sku: Optional[str] = None
    sort_direction: str = "ASC"
    limit: int = 50

    @classmethod
    def validate_and_build(cls, request: Mapping[str, Any]) -> ListSkusCommand:
        data = validate(ListSkusRequestSchema, request)
        return cls(sku=data.sku, sort_direction=data.sort_direction, limit=data.limit)
