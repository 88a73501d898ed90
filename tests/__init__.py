import uuid
from typing import Any


def random_suffix() -> str:
    """랜덤 ID뒤에 붙일 UUID 기반의 6자리 임의의 ID를 생성합니다."""
    return uuid.uuid4().hex[:6]


def random_sku(name: str = "") -> str:
    """임의의 SKU를 생성합니다."""
    return f"sku-{name}-{random_suffix()}"


def random_orderid(name: str = "") -> str:
    """임의의 order_id 를 생성합니다."""
    return f"order-{name}-{random_suffix()}"


def random_lotid(name: str = "") -> str:
    """임의의 입고 로트 ID 를 생성합니다."""
    return f"lot-{name}-{random_suffix()}"


def order_event(
    event_name: str,
    order_id: str,
    sku: str,
    units: int = 10,
    price: float = 12.5,
    user_id: str = "user-1234",
    created_at: str = "2021-09-01T12:00:00.000Z",
) -> dict[str, Any]:
    """CDC 레코드의 ``NewImage`` 를 풀어낸 형태의 주문 이벤트."""
    return {
        "eventName": event_name,
        "eventData": {
            "orderId": order_id,
            "sku": sku,
            "units": units,
            "price": price,
            "userId": user_id,
        },
        "createdAt": created_at,
        "updatedAt": created_at,
    }


def restock_event(sku: str, units: int, lot_id: str) -> dict[str, Any]:
    return {
        "eventName": "SKU_RESTOCKED_EVENT",
        "eventData": {"sku": sku, "units": units, "lotId": lot_id},
        "createdAt": "2021-09-01T12:00:00.000Z",
        "updatedAt": "2021-09-01T12:00:00.000Z",
    }
