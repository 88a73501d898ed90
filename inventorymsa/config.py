"""기본 환경 설정."""

from __future__ import annotations

import os
from configparser import ConfigParser
from dataclasses import dataclass, field, fields, replace
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Type

from sqlalchemy.pool import Pool, StaticPool

from inventorymsa.core import get_logger, set_log_level

if TYPE_CHECKING:
    from inventorymsa.controller import BatchDispatchController
    from inventorymsa.core.models import AbstractQueueClient
    from inventorymsa.orm import SessionMaker
    from inventorymsa.redis import RedisConnectInfo, RedisQueueWorker
    from inventorymsa.repo import SqlAlchemyOrderAllocationStore, SqlAlchemySkuStore
    from inventorymsa.eventstore import SqlAlchemyEventStore

logger = get_logger("inventorymsa.config")

ENV_PREFIX = "INVENTORY_"
SETUPCFG_SECTION = "inventorymsa"

WORKER_NAMES = ("allocate", "complete", "deallocate", "restock")


@dataclass(frozen=True)
class InventoryConfig:
    """재고 서비스 설정.

    저장소와 워커는 생성될 때 이 객체를 전달받으며, 전역 상태를 읽지 않습니다.
    """

    name: str = "inventorymsa"
    title: str = "Inventory Service"
    db_url: str = "sqlite://"
    allocation_table: str = "order_allocations"
    sku_table: str = "skus"
    event_table: str = "inventory_events"
    redis_host: str = "localhost"
    redis_port: int = 6379
    queue_prefix: str = "inventory"
    batch_size: int = 10
    receive_timeout: int = 1
    max_deliveries: int = 5
    api_host: str = "127.0.0.1"
    api_port: int = 5000
    log_level: str = "INFO"
    connect_args: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_env(environ: Optional[dict[str, str]] = None, **overrides) -> InventoryConfig:
        """``INVENTORY_`` 로 시작하는 환경변수로 설정을 만듭니다.

        예를 들어 ``INVENTORY_DB_URL`` 은 ``db_url`` 에 대응합니다.
        """
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for f in fields(InventoryConfig):
            key = ENV_PREFIX + f.name.upper()
            if key in environ and f.name != "connect_args":
                values[f.name] = _coerce(f.type, environ[key])
        values.update(overrides)
        return InventoryConfig(**values)

    def get_db_connect_args(self) -> dict[str, Any]:
        """SQLAlchemy 엔진을 만들 때 넘길 접속 인자."""
        if self.connect_args:
            return self.connect_args
        if self.db_url.startswith("sqlite"):
            return {"check_same_thread": False}
        return {}

    def get_db_poolclass(self) -> Optional[Type[Pool]]:
        """메모리 SQLite 는 모든 세션이 같은 커넥션을 써야 테이블이 보입니다."""
        if self.db_url in ("sqlite://", "sqlite:///:memory:"):
            return StaticPool
        return None

    def get_api_url(self) -> str:
        return f"http://{self.api_host}:{self.api_port}"

    def queue_name(self, worker: str) -> str:
        return f"{self.queue_prefix}:{worker}"

    @property
    def redis_conn_info(self) -> RedisConnectInfo:
        from inventorymsa.redis import RedisConnectInfo

        return RedisConnectInfo(host=self.redis_host, port=self.redis_port)


def _coerce(type_name: Any, value: str) -> Any:
    if type_name in (int, "int"):
        return int(value)
    return value


def load_setupcfg(path: Path) -> dict[str, str]:
    """``setup.cfg`` 의 ``[inventorymsa]`` 섹션을 읽습니다."""
    if (path / "setup.cfg").exists():
        # 현재 경로에 "setup.cfg" 파일이 있다면 [inventorymsa] 섹션을 읽습니다.
        config = ConfigParser()
        config.read(path / "setup.cfg")
        if SETUPCFG_SECTION in config:
            return dict(config[SETUPCFG_SECTION])
    return {}


def load_config(path: Path = Path("."), environ: Optional[dict[str, str]] = None) -> InventoryConfig:
    """``setup.cfg`` 를 먼저 적용하고 환경변수로 덮어쓴 설정을 리턴합니다."""
    config = InventoryConfig.from_env(environ)
    names = {f.name: f.type for f in fields(InventoryConfig)}
    environ = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    for key, value in load_setupcfg(path).items():
        if key not in names or key == "connect_args":
            logger.warning("unknown option in setup.cfg [%s]: %s", SETUPCFG_SECTION, key)
            continue
        if ENV_PREFIX + key.upper() in environ:
            continue
        overrides[key] = _coerce(names[key], value)
    return replace(config, **overrides)


class InventoryMSA:
    """설정으로부터 저장소, 서비스, 컨트롤러, 워커를 조립하는 앱 객체."""

    def __init__(self, config: Optional[InventoryConfig] = None):
        self.config = config or InventoryConfig()
        set_log_level(self.config.log_level)
        self._get_session: Optional[SessionMaker] = None

    def init_db(self, drop_all: bool = False) -> SessionMaker:
        """테이블을 만들고 세션 팩토리를 리턴합니다."""
        from inventorymsa.orm import init_db

        self._get_session = init_db(self.config, drop_all=drop_all)
        return self._get_session

    @property
    def get_session(self) -> SessionMaker:
        if self._get_session is None:
            return self.init_db()
        return self._get_session

    @cached_property
    def allocation_store(self) -> SqlAlchemyOrderAllocationStore:
        from inventorymsa.repo import SqlAlchemyOrderAllocationStore

        return SqlAlchemyOrderAllocationStore(self.config, self.get_session)

    @cached_property
    def sku_store(self) -> SqlAlchemySkuStore:
        from inventorymsa.repo import SqlAlchemySkuStore

        return SqlAlchemySkuStore(self.config, self.get_session)

    @cached_property
    def event_store(self) -> SqlAlchemyEventStore:
        from inventorymsa.eventstore import SqlAlchemyEventStore

        return SqlAlchemyEventStore(self.config, self.get_session)

    @cached_property
    def services(self):
        from inventorymsa.services import build_services

        return build_services(self.allocation_store, self.sku_store, self.event_store)

    def controller(self, worker: str) -> BatchDispatchController:
        from inventorymsa.controller import build_controller

        return build_controller(worker, self.services)

    @cached_property
    def queue_client(self) -> AbstractQueueClient:
        from inventorymsa.redis import RedisQueueClient

        return RedisQueueClient(self.config.redis_conn_info)

    def worker(self, worker: str) -> RedisQueueWorker:
        from inventorymsa.redis import RedisQueueWorker

        return RedisQueueWorker(
            self.queue_client,
            self.config.queue_name(worker),
            self.controller(worker),
            batch_size=self.config.batch_size,
            timeout=self.config.receive_timeout,
            max_deliveries=self.config.max_deliveries,
        )
