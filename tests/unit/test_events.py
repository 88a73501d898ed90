"""이벤트/커맨드 검증 테스트."""
import pytest

from inventorymsa.core import InvalidArgumentsError
from inventorymsa.domain.commands import (
    AllocateOrderStockCommand,
    ListSkusCommand,
    RestockSkuCommand,
    TransitionOrderAllocationCommand,
)
from inventorymsa.domain.events import (
    EventName,
    IncomingOrderCreatedEvent,
    IncomingOrderPaymentAcceptedEvent,
    IncomingSkuRestockedEvent,
    OrderEventData,
    OrderStockAllocatedEvent,
    SkuRestockedEvent,
)
from inventorymsa.domain.models import AllocationStatus, OrderAllocation
from inventorymsa.policy import decide_on_payment_accepted, decide_on_payment_rejected
from tests import order_event, random_orderid, random_sku, restock_event


def test_builds_incoming_order_created_event():
    order_id, sku = random_orderid(), random_sku()
    event = IncomingOrderCreatedEvent.validate_and_build(
        order_event("ORDER_CREATED_EVENT", order_id, sku, units=3)
    )
    assert event.event_name == EventName.ORDER_CREATED_EVENT
    assert event.event_data == OrderEventData(order_id, sku, 3, 12.5, "user-1234")


def test_rejects_unexpected_event_name():
    record = order_event("ORDER_CREATED_EVENT", random_orderid(), random_sku())
    with pytest.raises(InvalidArgumentsError, match="expected eventName"):
        IncomingOrderPaymentAcceptedEvent.validate_and_build(record)


@pytest.mark.parametrize(
    "field, value",
    [
        ("orderId", "abc"),
        ("sku", ""),
        ("units", 0),
        ("units", -2),
        ("units", "3"),
        ("units", 1.5),
        ("price", -0.01),
        ("userId", None),
    ],
)
def test_rejects_invalid_event_data(field, value):
    record = order_event("ORDER_CREATED_EVENT", random_orderid(), random_sku())
    record["eventData"][field] = value
    with pytest.raises(InvalidArgumentsError):
        IncomingOrderCreatedEvent.validate_and_build(record)


def test_rejects_missing_fields_and_bad_timestamps():
    record = order_event("ORDER_CREATED_EVENT", random_orderid(), random_sku())
    del record["eventData"]["userId"]
    with pytest.raises(InvalidArgumentsError):
        IncomingOrderCreatedEvent.validate_and_build(record)

    record = order_event("ORDER_CREATED_EVENT", random_orderid(), random_sku())
    record["createdAt"] = "yesterday"
    with pytest.raises(InvalidArgumentsError):
        IncomingOrderCreatedEvent.validate_and_build(record)

    with pytest.raises(InvalidArgumentsError):
        IncomingOrderCreatedEvent.validate_and_build(["not", "a", "mapping"])  # type: ignore


def test_price_zero_is_valid():
    record = order_event("ORDER_CREATED_EVENT", random_orderid(), random_sku(), price=0)
    assert IncomingOrderCreatedEvent.validate_and_build(record).event_data.price == 0


def test_allocate_command_from_event():
    order_id, sku = random_orderid(), random_sku()
    event = IncomingOrderCreatedEvent.validate_and_build(
        order_event("ORDER_CREATED_EVENT", order_id, sku, units=4)
    )
    command = AllocateOrderStockCommand.validate_and_build(event)
    assert (command.order_id, command.sku, command.units) == (order_id, sku, 4)
    assert command.allocation_status == AllocationStatus.ALLOCATED
    assert command.created_at == command.updated_at


def test_allocate_command_requires_order_created_event():
    event = IncomingOrderPaymentAcceptedEvent.validate_and_build(
        order_event("ORDER_PAYMENT_ACCEPTED_EVENT", random_orderid(), random_sku())
    )
    with pytest.raises(InvalidArgumentsError):
        AllocateOrderStockCommand.validate_and_build(event)  # type: ignore


def make_allocation(status=AllocationStatus.ALLOCATED, updated_at="2021-09-01T12:00:00.000Z"):
    return OrderAllocation(
        order_id=random_orderid(),
        sku=random_sku(),
        units=5,
        price=10.0,
        user_id="user-1234",
        allocation_status=status,
        created_at="2021-09-01T12:00:00.000Z",
        updated_at=updated_at,
    )


def test_transition_command_uses_existing_units():
    existing = make_allocation()
    command = TransitionOrderAllocationCommand.validate_and_build(
        existing, decide_on_payment_rejected(existing)
    )
    assert command.units == existing.units
    assert command.restore_units == existing.units
    assert command.allocation_status == AllocationStatus.PAYMENT_REJECTED
    assert command.expected_allocation_status == AllocationStatus.ALLOCATED


def test_transition_command_keeps_updated_at_monotonic():
    existing = make_allocation(updated_at="2999-01-01T00:00:00.000Z")
    command = TransitionOrderAllocationCommand.validate_and_build(
        existing, decide_on_payment_accepted(existing)
    )
    assert command.updated_at == "2999-01-01T00:00:00.000Z"
    assert command.restore_units == 0


def test_transition_command_rejects_unexpected_status():
    allocated = make_allocation()
    decision = decide_on_payment_accepted(allocated)
    completed = make_allocation(status=AllocationStatus.COMPLETED_PAYMENT_ACCEPTED)
    with pytest.raises(InvalidArgumentsError):
        TransitionOrderAllocationCommand.validate_and_build(completed, decision)


def test_restock_command_and_event():
    sku = random_sku()
    event = IncomingSkuRestockedEvent.validate_and_build(restock_event(sku, 7, "lot-0001"))
    command = RestockSkuCommand.validate_and_build(event)
    assert (command.sku, command.units, command.lot_id) == (sku, 7, "lot-0001")

    raised = SkuRestockedEvent.validate_and_build({"sku": sku, "units": 7, "lotId": "lot-0001"})
    assert raised.to_dict()["eventData"] == {"sku": sku, "units": 7, "lotId": "lot-0001"}


def test_list_skus_command_defaults_and_validation():
    command = ListSkusCommand.validate_and_build({})
    assert command == ListSkusCommand(sku=None, sort_direction="ASC", limit=50)

    with pytest.raises(InvalidArgumentsError):
        ListSkusCommand.validate_and_build({"sortDirection": "UP"})
    with pytest.raises(InvalidArgumentsError):
        ListSkusCommand.validate_and_build({"limit": 0})


def test_outgoing_event_serializes_in_camel_case():
    data = OrderEventData("order-0001", "sku-0001", 2, 3.0, "user-0001")
    event = OrderStockAllocatedEvent.validate_and_build(data)
    assert event.to_dict() == {
        "eventName": "ORDER_STOCK_ALLOCATED_EVENT",
        "eventData": {
            "orderId": "order-0001",
            "sku": "sku-0001",
            "units": 2,
            "price": 3.0,
            "userId": "user-0001",
        },
        "createdAt": event.created_at,
        "updatedAt": event.updated_at,
    }
