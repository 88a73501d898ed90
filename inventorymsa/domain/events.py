"""재고 서비스가 주고받는 도메인 이벤트.

``Incoming*`` 이벤트는 다른 서비스가 발행한 것을 CDC 레코드에서 복원한 것이고,
나머지는 재고 서비스가 직접 발행해서 이벤트 스토어에 저장하는 이벤트입니다.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Type, TypeVar, Union

from inventorymsa.core.errors import InvalidArgumentsError
from inventorymsa.core.models import Event
from inventorymsa.schema import (
    EventEnvelopeSchema,
    OrderEventDataSchema,
    RestockEventDataSchema,
    RestockSkuRequestSchema,
    validate,
)
from inventorymsa.utils import utcnow_iso

E = TypeVar("E", bound="InventoryEvent")


class EventName(str, enum.Enum):
    ORDER_CREATED_EVENT = "ORDER_CREATED_EVENT"
    ORDER_PAYMENT_ACCEPTED_EVENT = "ORDER_PAYMENT_ACCEPTED_EVENT"
    ORDER_PAYMENT_REJECTED_EVENT = "ORDER_PAYMENT_REJECTED_EVENT"
    ORDER_STOCK_ALLOCATED_EVENT = "ORDER_STOCK_ALLOCATED_EVENT"
    ORDER_STOCK_DEPLETED_EVENT = "ORDER_STOCK_DEPLETED_EVENT"
    SKU_RESTOCKED_EVENT = "SKU_RESTOCKED_EVENT"


@dataclass(frozen=True)
class OrderEventData:
    order_id: str
    sku: str
    units: int
    price: float
    user_id: str

    @classmethod
    def from_schema(cls, schema: OrderEventDataSchema) -> OrderEventData:
        return cls(
            order_id=schema.order_id,
            sku=schema.sku,
            units=schema.units,
            price=schema.price,
            user_id=schema.user_id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "orderId": self.order_id,
            "sku": self.sku,
            "units": self.units,
            "price": self.price,
            "userId": self.user_id,
        }


@dataclass(frozen=True)
class RestockEventData:
    sku: str
    units: int
    lot_id: str

    @classmethod
    def from_schema(cls, schema: RestockEventDataSchema) -> RestockEventData:
        return cls(sku=schema.sku, units=schema.units, lot_id=schema.lot_id)

    def to_dict(self) -> dict[str, Any]:
        return {"sku": self.sku, "units": self.units, "lotId": self.lot_id}


EventData = Union[OrderEventData, RestockEventData]


@dataclass(frozen=True)
class InventoryEvent(Event):
    event_name: EventName
    event_data: EventData
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "eventName": self.event_name.value,
            "eventData": self.event_data.to_dict(),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


class IncomingEvent(InventoryEvent):
    """다른 서비스에서 들어온 이벤트의 공통 동작.

    하위 클래스는 ``expected_name`` 과 ``data_schema`` 만 지정하면 됩니다.
    """

    expected_name: ClassVar[EventName]
    data_schema: ClassVar[Type[Any]]
    data_class: ClassVar[Type[Any]]

    @classmethod
    def validate_and_build(cls: Type[E], record: Mapping[str, Any]) -> E:
        """CDC 레코드의 ``NewImage`` 에서 이벤트 객체를 만듭니다.

        Raises:
            InvalidArgumentsError: 필드가 없거나 형식이 맞지 않거나, 이벤트 이름이
                기대한 것과 다를 때.
        """
        envelope = validate(EventEnvelopeSchema, record)
        if envelope.event_name != cls.expected_name.value:  # type: ignore
            raise InvalidArgumentsError.from_cause(
                message=(
                    f"{cls.__name__}: expected eventName "
                    f"{cls.expected_name.value} but got {envelope.event_name}"  # type: ignore
                )
            )
        data = validate(cls.data_schema, envelope.event_data)  # type: ignore
        return cls(
            event_name=cls.expected_name,  # type: ignore
            event_data=cls.data_class.from_schema(data),  # type: ignore
            created_at=envelope.created_at,
            updated_at=envelope.updated_at,
        )


class IncomingOrderCreatedEvent(IncomingEvent):
    expected_name = EventName.ORDER_CREATED_EVENT
    data_schema = OrderEventDataSchema
    data_class = OrderEventData


class IncomingOrderPaymentAcceptedEvent(IncomingEvent):
    expected_name = EventName.ORDER_PAYMENT_ACCEPTED_EVENT
    data_schema = OrderEventDataSchema
    data_class = OrderEventData


class IncomingOrderPaymentRejectedEvent(IncomingEvent):
    expected_name = EventName.ORDER_PAYMENT_REJECTED_EVENT
    data_schema = OrderEventDataSchema
    data_class = OrderEventData


class IncomingSkuRestockedEvent(IncomingEvent):
    expected_name = EventName.SKU_RESTOCKED_EVENT
    data_schema = RestockEventDataSchema
    data_class = RestockEventData


class OutgoingOrderEvent(InventoryEvent):
    emitted_name: ClassVar[EventName]

    @classmethod
    def validate_and_build(cls: Type[E], event_data: OrderEventData) -> E:
        if not isinstance(event_data, OrderEventData):
            raise InvalidArgumentsError.from_cause(
                message=f"{cls.__name__}: expected OrderEventData but got {event_data!r}"
            )
        now = utcnow_iso()
        return cls(
            event_name=cls.emitted_name,  # type: ignore
            event_data=event_data,
            created_at=now,
            updated_at=now,
        )


class OrderStockAllocatedEvent(OutgoingOrderEvent):
    emitted_name = EventName.ORDER_STOCK_ALLOCATED_EVENT


class OrderStockDepletedEvent(OutgoingOrderEvent):
    emitted_name = EventName.ORDER_STOCK_DEPLETED_EVENT


class SkuRestockedEvent(InventoryEvent):
    """관리자 API 로 접수된 입고 요청. 이벤트 스토어를 거쳐 입고 워커로 전달됩니다."""

    @classmethod
    def validate_and_build(cls, request: Mapping[str, Any]) -> SkuRestockedEvent:
        data = validate(RestockSkuRequestSchema, request)
        now = utcnow_iso()
        return cls(
            event_name=EventName.SKU_RESTOCKED_EVENT,
            event_data=RestockEventData.from_schema(data),
            created_at=now,
            updated_at=now,
        )
