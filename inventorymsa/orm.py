"""ORM 어댑터 모듈.

모든 테이블은 ``(pk, sk)`` 복합 기본키를 가집니다. 기본키 유일성이 "이미 존재하면
실패" 조건을, ``UPDATE ... WHERE`` 의 영향받은 행 수가 기대 상태 조건을 대신합니다.
"""
from __future__ import annotations

from typing import Callable, cast

from sqlalchemy import (
    JSON,
    Column,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from inventorymsa.config import InventoryConfig

SessionMaker = Callable[[], Session]
"""Session 팩토리 타입."""


def start_mappers(config: InventoryConfig, metadata: MetaData = None) -> MetaData:
    """설정에 지정된 이름으로 테이블을 정의합니다."""
    metadata = metadata if metadata is not None else MetaData()

    Table(
        config.allocation_table,
        metadata,
        Column("pk", String(255), primary_key=True),
        Column("sk", String(255), primary_key=True),
        Column("order_id", String(255), nullable=False),
        Column("sku", String(255), nullable=False),
        Column("units", Integer, nullable=False),
        Column("price", Float, nullable=False),
        Column("user_id", String(255), nullable=False),
        Column("allocation_status", String(64), nullable=False),
        Column("created_at", String(32), nullable=False),
        Column("updated_at", String(32), nullable=False),
    )

    Table(
        config.sku_table,
        metadata,
        Column("pk", String(255), primary_key=True),
        Column("sk", String(255), primary_key=True),
        Column("sku", String(255), nullable=False),
        Column("units", Integer, nullable=False),
        Column("lot_id", String(255)),
        Column("created_at", String(32), nullable=False, index=True),
        Column("updated_at", String(32), nullable=False),
    )

    Table(
        config.event_table,
        metadata,
        Column("pk", String(255), primary_key=True),
        Column("sk", String(255), primary_key=True),
        Column("event_name", String(64), nullable=False),
        Column("event_data", JSON, nullable=False),
        Column("created_at", String(32), nullable=False),
        Column("updated_at", String(32), nullable=False),
    )

    return metadata


def init_engine(
    meta: MetaData, config: InventoryConfig, drop_all: bool = False, show_log: bool = False
) -> Engine:
    """ORM Engine을 초기화 하고 테이블을 생성합니다."""
    engine = create_engine(
        config.db_url,
        connect_args=config.get_db_connect_args(),
        poolclass=config.get_db_poolclass(),
        echo=show_log,
    )

    if drop_all:
        meta.drop_all(engine)

    meta.create_all(engine)
    return engine


def init_db(
    config: InventoryConfig, drop_all: bool = False, show_log: bool = False
) -> SessionMaker:
    """DB 엔진을 초기화 하고 Session 팩토리를 리턴합니다."""
    engine = init_engine(start_mappers(config), config, drop_all=drop_all, show_log=show_log)
    return cast(SessionMaker, sessionmaker(engine))

