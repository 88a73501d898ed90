import pytest

from inventorymsa.core import DuplicateEventRaisedError
from inventorymsa.domain.events import (
    OrderEventData,
    OrderStockAllocatedEvent,
    OrderStockDepletedEvent,
    SkuRestockedEvent,
)
from inventorymsa.eventstore import SqlAlchemyEventStore, event_key
from tests import random_orderid, random_sku


def order_data(order_id=None):
    return OrderEventData(order_id or random_orderid(), random_sku(), 2, 5.0, "user-1234")


def test_event_key_layout():
    data = OrderEventData("order-1", "sku-1", 1, 1.0, "user-1")
    assert event_key(OrderStockAllocatedEvent.validate_and_build(data)) == (
        "EVENTS#ORDER_ID#order-1",
        "EVENT#ORDER_STOCK_ALLOCATED_EVENT",
    )
    restocked = SkuRestockedEvent.validate_and_build({"sku": "sku-1", "units": 3, "lotId": "lot-1"})
    assert event_key(restocked) == ("EVENTS#SKU#sku-1", "EVENT#SKU_RESTOCKED_EVENT#LOT_ID#lot-1")


def test_append_and_load(event_store: SqlAlchemyEventStore):
    data = order_data()
    event_store.append(OrderStockAllocatedEvent.validate_and_build(data))

    [stored] = event_store.load_events(f"EVENTS#ORDER_ID#{data.order_id}")
    assert stored["eventName"] == "ORDER_STOCK_ALLOCATED_EVENT"
    assert stored["eventData"]["orderId"] == data.order_id


def test_duplicate_append_raises(event_store: SqlAlchemyEventStore):
    data = order_data()
    event_store.append(OrderStockAllocatedEvent.validate_and_build(data))

    with pytest.raises(DuplicateEventRaisedError) as exc_info:
        event_store.append(OrderStockAllocatedEvent.validate_and_build(data))
    assert not exc_info.value.transient


def test_different_event_names_for_same_order(event_store: SqlAlchemyEventStore):
    data = order_data()
    event_store.append(OrderStockAllocatedEvent.validate_and_build(data))
    event_store.append(OrderStockDepletedEvent.validate_and_build(data))
    assert len(event_store.load_events(f"EVENTS#ORDER_ID#{data.order_id}")) == 2
