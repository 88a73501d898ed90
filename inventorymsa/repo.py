"""SQLAlchemy 로 구현한 할당/SKU 저장소."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.session import Session

from inventorymsa.config import InventoryConfig
from inventorymsa.core import (
    AbstractOrderAllocationStore,
    AbstractSkuStore,
    AllocationWriteCommand,
    DepletedStockAllocationError,
    DuplicateRestockOperationError,
    DuplicateStockAllocationError,
    InvalidArgumentsError,
    InvalidStockCompletionError,
    InvalidStockDeallocationError,
    UnrecognizedError,
    WriteOutcome,
    get_logger,
)
from inventorymsa.domain.commands import (
    AllocateOrderStockCommand,
    ListSkusCommand,
    RestockSkuCommand,
    TransitionOrderAllocationCommand,
)
from inventorymsa.domain.models import AllocationStatus, OrderAllocation, Sku
from inventorymsa.orm import SessionMaker, start_mappers

logger = get_logger("inventorymsa.repo")


def sku_key(sku: str) -> tuple[str, str]:
    return f"SKU#{sku}", f"SKU#{sku}"


def allocation_key(order_id: str, sku: str) -> tuple[str, str]:
    return f"SKU#{sku}", f"SKU#{sku}#ORDER_ID#{order_id}#ORDER_ALLOCATION"


def restock_lot_key(sku: str, lot_id: str) -> tuple[str, str]:
    return f"SKU#{sku}", f"LOT_ID#{lot_id}"


GUARD_ERRORS = {
    AllocationStatus.COMPLETED_PAYMENT_ACCEPTED: InvalidStockCompletionError,
    AllocationStatus.PAYMENT_REJECTED: InvalidStockDeallocationError,
    AllocationStatus.DEALLOCATED_ORDER_CANCELED: InvalidStockDeallocationError,
}


class SqlAlchemyOrderAllocationStore(AbstractOrderAllocationStore):
    """할당 레코드와 SKU 카운터를 한 트랜잭션으로 다루는 저장소.

    트랜잭션 안에서는 조건 실패를 도메인 예외로 던져서 롤백시키고, 트랜잭션 밖에서
    :class:`WriteOutcome` 으로 바꿔서 리턴합니다.
    """

    def __init__(self, config: InventoryConfig, get_session: SessionMaker):
        self.config = config
        self.get_session = get_session
        tables = start_mappers(config).tables
        self.allocations = tables[config.allocation_table]
        self.skus = tables[config.sku_table]

    def get(self, order_id: str, sku: str) -> Optional[OrderAllocation]:
        pk, sk = allocation_key(order_id, sku)
        try:
            with self.get_session() as session:
                row = (
                    session.execute(
                        select(self.allocations).where(
                            self.allocations.c.pk == pk, self.allocations.c.sk == sk
                        )
                    )
                    .mappings()
                    .first()
                )
        except SQLAlchemyError as e:
            raise UnrecognizedError.from_cause(e) from e

        if not row:
            return None

        return OrderAllocation(
            order_id=row["order_id"],
            sku=row["sku"],
            units=row["units"],
            price=row["price"],
            user_id=row["user_id"],
            allocation_status=AllocationStatus(row["allocation_status"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def conditional_write(self, command: AllocationWriteCommand) -> WriteOutcome:
        logger.info("conditional_write: %r", command)
        try:
            with self.get_session() as session, session.begin():
                if isinstance(command, AllocateOrderStockCommand):
                    self._allocate(session, command)
                elif isinstance(command, TransitionOrderAllocationCommand):
                    self._transition(session, command)
                else:
                    raise InvalidArgumentsError.from_cause(
                        message=f"unsupported allocation command: {command!r}"
                    )
        except DuplicateStockAllocationError as e:
            logger.info("allocation already exists: %r", e)
            return WriteOutcome.GUARD_FAILED
        except DepletedStockAllocationError as e:
            logger.info("stock depleted: %r", e)
            return WriteOutcome.CAPACITY_EXCEEDED
        except (InvalidStockCompletionError, InvalidStockDeallocationError) as e:
            logger.info("allocation transition guard failed: %r", e)
            return WriteOutcome.GUARD_FAILED
        except SQLAlchemyError as e:
            raise UnrecognizedError.from_cause(e) from e

        return WriteOutcome.WRITTEN

    def _allocate(self, session: Session, command: AllocateOrderStockCommand):
        pk, sk = allocation_key(command.order_id, command.sku)
        try:
            session.execute(
                insert(self.allocations).values(
                    pk=pk,
                    sk=sk,
                    order_id=command.order_id,
                    sku=command.sku,
                    units=command.units,
                    price=command.price,
                    user_id=command.user_id,
                    allocation_status=command.allocation_status.value,
                    created_at=command.created_at,
                    updated_at=command.updated_at,
                )
            )
        except IntegrityError as e:
            raise DuplicateStockAllocationError.from_cause(e) from e

        pk, sk = sku_key(command.sku)
        result = session.execute(
            update(self.skus)
            .where(
                self.skus.c.pk == pk,
                self.skus.c.sk == sk,
                self.skus.c.units >= command.units,
            )
            .values(
                units=self.skus.c.units - command.units,
                updated_at=command.updated_at,
            )
        )
        if result.rowcount != 1:
            raise DepletedStockAllocationError.from_cause(
                message=f"SKU {command.sku} has less than {command.units} units"
            )

    def _transition(self, session: Session, command: TransitionOrderAllocationCommand):
        error_class = GUARD_ERRORS[command.allocation_status]
        pk, sk = allocation_key(command.order_id, command.sku)
        c = self.allocations.c
        result = session.execute(
            update(self.allocations)
            .where(
                c.pk == pk,
                c.sk == sk,
                c.order_id == command.order_id,
                c.sku == command.sku,
                c.units == command.units,
                c.allocation_status == command.expected_allocation_status.value,
            )
            .values(
                allocation_status=command.allocation_status.value,
                updated_at=command.updated_at,
            )
        )
        if result.rowcount != 1:
            raise error_class.from_cause(
                message=(
                    f"allocation {command.order_id}/{command.sku} is not "
                    f"{command.expected_allocation_status.value}"
                )
            )

        if not command.restore_units:
            return

        pk, sk = sku_key(command.sku)
        result = session.execute(
            update(self.skus)
            .where(self.skus.c.pk == pk, self.skus.c.sk == sk)
            .values(
                units=self.skus.c.units + command.restore_units,
                updated_at=command.updated_at,
            )
        )
        if result.rowcount != 1:
            raise error_class.from_cause(message=f"SKU {command.sku} does not exist")


class SqlAlchemySkuStore(AbstractSkuStore):
    def __init__(self, config: InventoryConfig, get_session: SessionMaker):
        self.config = config
        self.get_session = get_session
        self.skus = start_mappers(config).tables[config.sku_table]

    def restock(self, command: RestockSkuCommand) -> WriteOutcome:
        logger.info("restock: %r", command)
        try:
            with self.get_session() as session, session.begin():
                self._put_lot(session, command)
                self._add_units(session, command)
        except DuplicateRestockOperationError as e:
            logger.info("restock lot already applied: %r", e)
            return WriteOutcome.GUARD_FAILED
        except SQLAlchemyError as e:
            raise UnrecognizedError.from_cause(e) from e

        return WriteOutcome.WRITTEN

    def _put_lot(self, session: Session, command: RestockSkuCommand):
        pk, sk = restock_lot_key(command.sku, command.lot_id)
        try:
            session.execute(
                insert(self.skus).values(
                    pk=pk,
                    sk=sk,
                    sku=command.sku,
                    units=command.units,
                    lot_id=command.lot_id,
                    created_at=command.created_at,
                    updated_at=command.updated_at,
                )
            )
        except IntegrityError as e:
            raise DuplicateRestockOperationError.from_cause(e) from e

    def _add_units(self, session: Session, command: RestockSkuCommand):
        pk, sk = sku_key(command.sku)
        result = session.execute(
            update(self.skus)
            .where(self.skus.c.pk == pk, self.skus.c.sk == sk)
            .values(
                units=self.skus.c.units + command.units,
                updated_at=command.updated_at,
            )
        )
        if result.rowcount == 1:
            return

        # 처음 입고되는 SKU. 동시에 만들어지면 IntegrityError 로 재전송됩니다.
        session.execute(
            insert(self.skus).values(
                pk=pk,
                sk=sk,
                sku=command.sku,
                units=command.units,
                created_at=command.created_at,
                updated_at=command.updated_at,
            )
        )

    def list_skus(self, command: ListSkusCommand) -> list[Sku]:
        c = self.skus.c
        query = select(self.skus).where(c.pk == c.sk)
        if command.sku:
            pk, _ = sku_key(command.sku)
            query = query.where(c.pk == pk)
        order = c.created_at.desc() if command.sort_direction == "DESC" else c.created_at.asc()
        query = query.order_by(order, c.sku).limit(command.limit)

        try:
            with self.get_session() as session:
                rows = session.execute(query).mappings().all()
        except SQLAlchemyError as e:
            raise UnrecognizedError.from_cause(e) from e

        return [
            Sku(
                sku=row["sku"],
                units=row["units"],
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
            for row in rows
        ]
