"""배치 디스패치 컨트롤러 테스트."""
import json

import pytest

from inventorymsa.cdc import build_record_body
from inventorymsa.controller import BatchDispatchController, QueueMessage, build_controller
from inventorymsa.core import (
    DuplicateEventRaisedError,
    InvalidArgumentsError,
    UnrecognizedError,
)
from inventorymsa.domain.events import IncomingOrderCreatedEvent
from tests import order_event, random_orderid, random_sku


def message(message_id: str, order_id: str, sku: str) -> QueueMessage:
    body = build_record_body(order_event("ORDER_CREATED_EVENT", order_id, sku))
    return QueueMessage(message_id=message_id, body=body)


class RecordingHandler:
    def __init__(self, errors=None):
        self.errors = errors or {}
        self.handled: list[str] = []

    def __call__(self, event: IncomingOrderCreatedEvent):
        order_id = event.event_data.order_id
        if order_id in self.errors:
            raise self.errors[order_id]
        self.handled.append(order_id)


def test_partial_failure_reports_transient_ids_in_order():
    order_ids = [random_orderid(str(i)) for i in range(5)]
    handler = RecordingHandler(
        {
            order_ids[1]: UnrecognizedError.from_cause(message="db timeout"),
            order_ids[4]: ConnectionResetError("socket closed"),
        }
    )
    controller = BatchDispatchController("test", IncomingOrderCreatedEvent, handler)
    messages = [message(f"m{i}", order_ids[i], random_sku()) for i in range(5)]

    response = controller.dispatch(messages)

    assert response.batch_item_failures == ["m1", "m4"]
    assert handler.handled == [order_ids[0], order_ids[2], order_ids[3]]
    assert response.to_dict() == {
        "batchItemFailures": [{"itemIdentifier": "m1"}, {"itemIdentifier": "m4"}]
    }


def test_non_transient_errors_are_swallowed():
    order_ids = [random_orderid(str(i)) for i in range(3)]
    handler = RecordingHandler(
        {
            order_ids[0]: InvalidArgumentsError.from_cause(),
            order_ids[1]: DuplicateEventRaisedError.from_cause(),
            order_ids[2]: InvalidArgumentsError.from_cause(),
        }
    )
    controller = BatchDispatchController("test", IncomingOrderCreatedEvent, handler)

    response = controller.dispatch([message(f"m{i}", order_ids[i], random_sku()) for i in range(3)])

    assert response.batch_item_failures == []


def test_malformed_messages_are_dropped():
    handler = RecordingHandler()
    controller = BatchDispatchController("test", IncomingOrderCreatedEvent, handler)
    wrong_name = build_record_body(
        order_event("ORDER_PAYMENT_ACCEPTED_EVENT", random_orderid(), random_sku())
    )
    messages = [
        QueueMessage("m0", "{not json"),
        QueueMessage("m1", json.dumps({"detail": {"dynamodb": {}}})),
        QueueMessage("m2", wrong_name),
    ]

    assert controller.dispatch(messages).batch_item_failures == []
    assert handler.handled == []


def test_missing_batch_is_empty_response():
    controller = BatchDispatchController("test", IncomingOrderCreatedEvent, RecordingHandler())
    assert controller.dispatch(None).batch_item_failures == []
    assert controller.dispatch([]).batch_item_failures == []


@pytest.mark.parametrize("worker", ["allocate", "complete", "deallocate", "restock"])
def test_build_controller_for_each_worker(fake_services, worker):
    controller = build_controller(worker, fake_services)
    assert controller.name.endswith("Worker")


def test_build_controller_rejects_unknown_worker(fake_services):
    with pytest.raises(ValueError):
        build_controller("ship", fake_services)


def test_allocate_controller_end_to_end(fake_services, inventory, fake_events):
    sku = random_sku()
    inventory.set_units(sku, 15)
    controller = build_controller("allocate", fake_services)
    messages = [message("m0", random_orderid(), sku), message("m1", random_orderid(), sku)]

    response = controller.dispatch(messages)

    # 두 번째 주문은 재고가 부족해서 ORDER_STOCK_DEPLETED_EVENT 가 됩니다.
    assert response.batch_item_failures == []
    assert inventory.units(sku) == 5
    names = [e.event_name.value for e in fake_events.raised]
    assert names == ["ORDER_STOCK_ALLOCATED_EVENT", "ORDER_STOCK_DEPLETED_EVENT"]


@pytest.mark.parametrize(
    "image",
    [
        {"eventName": {"L": 5}},
        {"eventName": {"NS": 5}},
        {"eventData": {"M": {"tags": {"SS": 3}}}},
    ],
)
def test_malformed_attribute_values_are_dropped(image):
    handler = RecordingHandler()
    controller = BatchDispatchController("test", IncomingOrderCreatedEvent, handler)
    body = json.dumps({"detail": {"dynamodb": {"NewImage": image}}})

    response = controller.dispatch([QueueMessage("m1", body)])

    assert response.batch_item_failures == []
    assert handler.handled == []
