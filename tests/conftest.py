# pylint: disable=redefined-outer-name, protected-access
"""pytest 에서 사용될 전역 Fixture들을 정의합니다."""
from __future__ import annotations

import pytest

from inventorymsa.config import InventoryConfig, InventoryMSA
from inventorymsa.eventstore import SqlAlchemyEventStore
from inventorymsa.orm import SessionMaker, init_db
from inventorymsa.repo import SqlAlchemyOrderAllocationStore, SqlAlchemySkuStore
from inventorymsa.services import Services, build_services
from inventorymsa.test.unit import (
    FakeEventStore,
    FakeInventory,
    FakeOrderAllocationStore,
    FakeSkuStore,
)


@pytest.fixture
def config() -> InventoryConfig:
    return InventoryConfig(db_url="sqlite://")


@pytest.fixture
def get_session(config: InventoryConfig) -> SessionMaker:
    """:class:`.Session` 팩토리를 리턴하는 픽스쳐 입니다.

    픽스쳐마다 새로운 메모리 SQLite DB 를 만들기 때문에 테스트끼리 데이터가
    섞이지 않습니다.
    """
    return init_db(config)


@pytest.fixture
def allocation_store(config, get_session) -> SqlAlchemyOrderAllocationStore:
    return SqlAlchemyOrderAllocationStore(config, get_session)


@pytest.fixture
def sku_store(config, get_session) -> SqlAlchemySkuStore:
    return SqlAlchemySkuStore(config, get_session)


@pytest.fixture
def event_store(config, get_session) -> SqlAlchemyEventStore:
    return SqlAlchemyEventStore(config, get_session)


@pytest.fixture
def inventory() -> FakeInventory:
    return FakeInventory()


@pytest.fixture
def fake_allocations(inventory) -> FakeOrderAllocationStore:
    return FakeOrderAllocationStore(inventory)


@pytest.fixture
def fake_skus(inventory) -> FakeSkuStore:
    return FakeSkuStore(inventory)


@pytest.fixture
def fake_events() -> FakeEventStore:
    return FakeEventStore()


@pytest.fixture
def fake_services(fake_allocations, fake_skus, fake_events) -> Services:
    return build_services(fake_allocations, fake_skus, fake_events)


@pytest.fixture
def msa(config) -> InventoryMSA:
    msa = InventoryMSA(config)
    msa.init_db()
    return msa
