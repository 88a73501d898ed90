from __future__ import annotations

import abc
import enum
from typing import TYPE_CHECKING, Optional, Protocol, Sequence, Union

if TYPE_CHECKING:
    from inventorymsa.controller import QueueMessage
    from inventorymsa.domain.commands import (
        AllocateOrderStockCommand,
        ListSkusCommand,
        RestockSkuCommand,
        TransitionOrderAllocationCommand,
    )
    from inventorymsa.domain.events import InventoryEvent
    from inventorymsa.domain.models import OrderAllocation, Sku


class Event:
    """이벤트 객체.

    이벤트는 과거에 일어난 사실을 나타내며 "재고가 할당됨" 처럼 과거형으로 이름을
    붙입니다. 이벤트를 발행하는 쪽은 누가 이벤트를 받는지, 받은 쪽이 성공했는지
    신경쓰지 않습니다.
    """


class Command:
    """Command 객체.

    시스템의 한 부분이 다른 부분에게 특정한 일이 일어나기를 기대하며 보내는
    명령입니다. "재고를 할당하라" 처럼 명령형으로 이름을 붙이며, 실패할 경우
    보낸 쪽이 에러 정보를 받아야 합니다.
    """


Message = Union[Command, Event]


class WriteOutcome(str, enum.Enum):
    """조건부 쓰기의 결과.

    인프라 장애는 결과값이 아니라 :class:`~inventorymsa.core.errors.UnrecognizedError`
    예외로 전달됩니다.
    """

    WRITTEN = "WRITTEN"
    GUARD_FAILED = "GUARD_FAILED"
    """존재 여부나 기대 상태 조건이 맞지 않음. 다른 전달이 이미 처리한 경우입니다."""
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    """SKU 재고가 요청 수량보다 적음."""


AllocationWriteCommand = Union[
    "AllocateOrderStockCommand", "TransitionOrderAllocationCommand"
]


class AbstractOrderAllocationStore(abc.ABC):
    """(sku, orderId) 로 키가 지정되는 할당 레코드 저장소의 추상 인터페이스."""

    @abc.abstractmethod
    def get(self, order_id: str, sku: str) -> Optional[OrderAllocation]:
        """할당 레코드를 조회합니다. 없으면 ``None`` 을 리턴합니다."""
        raise NotImplementedError

    @abc.abstractmethod
    def conditional_write(self, command: AllocationWriteCommand) -> WriteOutcome:
        """커맨드에 담긴 조건을 만족할 때만 레코드를 생성하거나 갱신합니다."""
        raise NotImplementedError


class AbstractSkuStore(abc.ABC):
    """SKU 별 가용 재고 카운터 저장소."""

    @abc.abstractmethod
    def restock(self, command: RestockSkuCommand) -> WriteOutcome:
        """입고 로트를 기록하고 SKU 재고를 늘립니다.

        같은 로트가 이미 기록되어 있으면 ``GUARD_FAILED`` 를 리턴합니다.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def list_skus(self, command: ListSkusCommand) -> list[Sku]:
        raise NotImplementedError


class AbstractEventStore(abc.ABC):
    """추가만 가능한 이벤트 저장소."""

    @abc.abstractmethod
    def append(self, event: InventoryEvent) -> None:
        """이벤트를 저장합니다.

        Raises:
            DuplicateEventRaisedError: 같은 키의 이벤트가 이미 있을 때.
            UnrecognizedError: 그 외의 모든 장애.
        """
        raise NotImplementedError


class AbstractQueueClient(Protocol):
    """최소 한 번(at-least-once) 전달 큐.

    받은 메세지는 처리중 목록으로 옮겨지고, 처리 결과에 맞는 메서드(:meth:`ack` 등)가
    호출되어야 처리중 목록에서 빠집니다. 워커가 그 전에 죽으면
    :meth:`recover` 로 처리중 메세지를 큐로 되돌립니다.
    """

    def send_message(self, queue: str, body: str) -> str:
        ...

    def receive_messages(
        self, queue: str, max_messages: int, timeout: int = 1
    ) -> list[QueueMessage]:
        ...

    def ack(self, queue: str, messages: Sequence[QueueMessage]) -> None:
        ...

    def requeue(self, queue: str, messages: Sequence[QueueMessage]) -> None:
        ...

    def dead_letter(self, queue: str, messages: Sequence[QueueMessage]) -> None:
        ...

    def recover(self, queue: str) -> int:
        ...
