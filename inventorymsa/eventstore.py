"""추가만 가능한 이벤트 스토어.

이벤트는 집계(aggregate) 키와 이벤트 이름으로 유일하게 식별됩니다. 같은 주문에 대해
같은 이름의 이벤트를 두 번 저장하려고 하면 :class:`DuplicateEventRaisedError` 가
발생하며, 이것이 중복 전달된 메세지를 걸러내는 마지막 장치입니다.
"""
from __future__ import annotations

from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from inventorymsa.config import InventoryConfig
from inventorymsa.core import (
    AbstractEventStore,
    DuplicateEventRaisedError,
    InvalidArgumentsError,
    UnrecognizedError,
    get_logger,
)
from inventorymsa.domain.events import InventoryEvent, OrderEventData, RestockEventData
from inventorymsa.orm import SessionMaker, start_mappers

logger = get_logger("inventorymsa.eventstore")


def event_key(event: InventoryEvent) -> tuple[str, str]:
    data = event.event_data
    if isinstance(data, OrderEventData):
        return f"EVENTS#ORDER_ID#{data.order_id}", f"EVENT#{event.event_name.value}"
    if isinstance(data, RestockEventData):
        return (
            f"EVENTS#SKU#{data.sku}",
            f"EVENT#{event.event_name.value}#LOT_ID#{data.lot_id}",
        )
    raise InvalidArgumentsError.from_cause(message=f"unsupported event data: {data!r}")


class SqlAlchemyEventStore(AbstractEventStore):
    def __init__(self, config: InventoryConfig, get_session: SessionMaker):
        self.config = config
        self.get_session = get_session
        self.events = start_mappers(config).tables[config.event_table]

    def append(self, event: InventoryEvent) -> None:
        pk, sk = event_key(event)
        try:
            with self.get_session() as session, session.begin():
                session.execute(
                    insert(self.events).values(
                        pk=pk,
                        sk=sk,
                        event_name=event.event_name.value,
                        event_data=event.event_data.to_dict(),
                        created_at=event.created_at,
                        updated_at=event.updated_at,
                    )
                )
        except IntegrityError as e:
            raise DuplicateEventRaisedError.from_cause(
                e, message=f"event {sk} already raised for {pk}"
            ) from e
        except SQLAlchemyError as e:
            raise UnrecognizedError.from_cause(e) from e

        logger.info("event raised: %s %s", pk, sk)

    def load_events(self, pk: str) -> list[dict[str, Any]]:
        """집계 키에 저장된 이벤트들을 저장된 형태(camelCase)로 리턴합니다."""
        c = self.events.c
        try:
            with self.get_session() as session:
                rows = (
                    session.execute(select(self.events).where(c.pk == pk).order_by(c.sk))
                    .mappings()
                    .all()
                )
        except SQLAlchemyError as e:
            raise UnrecognizedError.from_cause(e) from e

        return [
            {
                "eventName": row["event_name"],
                "eventData": row["event_data"],
                "createdAt": row["created_at"],
                "updatedAt": row["updated_at"],
            }
            for row in rows
        ]
