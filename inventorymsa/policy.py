"""할당 상태 전이 정책.

저장소나 이벤트 스토어를 전혀 모르는 순수 함수들로, 현재 레코드와 들어온 이벤트를
보고 무엇을 해야 할지 :class:`Decision` 으로 리턴합니다. 조건부 쓰기가 실패하면
:func:`decide_after_write` 로 결과를 다시 정책에 물어봅니다.

========================= ========================= ==============================
이벤트                    현재 레코드               결정
========================= ========================= ==============================
ORDER_CREATED             없음                      CREATE, ALLOCATED 이벤트
ORDER_CREATED             있음                      SKIP_CREATE, ALLOCATED 이벤트
ORDER_PAYMENT_ACCEPTED    ALLOCATED                 TRANSITION → COMPLETED_PAYMENT_ACCEPTED
ORDER_PAYMENT_REJECTED    ALLOCATED                 TRANSITION → PAYMENT_REJECTED, 재고 복원
ORDER_PAYMENT_*           없음 또는 다른 상태       SKIP
========================= ========================= ==============================
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Optional, Type

from inventorymsa.core.errors import UnrecognizedError
from inventorymsa.core.models import WriteOutcome
from inventorymsa.domain.events import (
    OrderStockAllocatedEvent,
    OrderStockDepletedEvent,
    OutgoingOrderEvent,
)
from inventorymsa.domain.models import AllocationStatus, OrderAllocation


class AllocationAction(str, enum.Enum):
    CREATE = "CREATE"
    SKIP_CREATE = "SKIP_CREATE"
    EMIT_DEPLETED = "EMIT_DEPLETED"
    TRANSITION = "TRANSITION"
    SKIP = "SKIP"


@dataclass(frozen=True)
class Decision:
    action: AllocationAction
    allocation_status: Optional[AllocationStatus] = None
    expected_allocation_status: Optional[AllocationStatus] = None
    restore_units: bool = False
    emit: Optional[Type[OutgoingOrderEvent]] = None

    @property
    def requires_write(self) -> bool:
        return self.action in (AllocationAction.CREATE, AllocationAction.TRANSITION)


def decide_on_order_created(existing: Optional[OrderAllocation]) -> Decision:
    if existing is not None:
        # 이전 전달이 할당까지 하고 이벤트 발행 전에 죽었을 수 있으므로 다시 발행합니다.
        return Decision(AllocationAction.SKIP_CREATE, emit=OrderStockAllocatedEvent)
    return Decision(
        AllocationAction.CREATE,
        allocation_status=AllocationStatus.ALLOCATED,
        emit=OrderStockAllocatedEvent,
    )


def decide_on_payment_accepted(existing: Optional[OrderAllocation]) -> Decision:
    if existing is None or existing.allocation_status != AllocationStatus.ALLOCATED:
        return Decision(AllocationAction.SKIP)
    return Decision(
        AllocationAction.TRANSITION,
        allocation_status=AllocationStatus.COMPLETED_PAYMENT_ACCEPTED,
        expected_allocation_status=AllocationStatus.ALLOCATED,
    )


def decide_on_payment_rejected(existing: Optional[OrderAllocation]) -> Decision:
    if existing is None or existing.allocation_status != AllocationStatus.ALLOCATED:
        return Decision(AllocationAction.SKIP)
    return Decision(
        AllocationAction.TRANSITION,
        allocation_status=AllocationStatus.PAYMENT_REJECTED,
        expected_allocation_status=AllocationStatus.ALLOCATED,
        restore_units=True,
    )


def decide_after_write(decision: Decision, outcome: WriteOutcome) -> Decision:
    """조건부 쓰기의 결과를 반영한 최종 결정을 리턴합니다."""
    if outcome == WriteOutcome.WRITTEN:
        return decision

    if decision.action == AllocationAction.CREATE:
        if outcome == WriteOutcome.GUARD_FAILED:
            # 중복이 재고 부족보다 우선합니다.
            return replace(decision, action=AllocationAction.SKIP_CREATE)
        if outcome == WriteOutcome.CAPACITY_EXCEEDED:
            return Decision(AllocationAction.EMIT_DEPLETED, emit=OrderStockDepletedEvent)

    if decision.action == AllocationAction.TRANSITION:
        if outcome == WriteOutcome.GUARD_FAILED:
            return Decision(AllocationAction.SKIP)

    raise UnrecognizedError.from_cause(
        message=f"unexpected write outcome {outcome.value} for {decision.action.value}"
    )
