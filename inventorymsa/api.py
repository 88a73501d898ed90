"""FastAPI 로 구현한 관리자용 RESTful API."""
from typing import Any, Optional

import httpx
from fastapi import Body, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from inventorymsa.config import InventoryMSA
from inventorymsa.core import AppError, get_logger

logger = get_logger("inventorymsa.api")

# globals
app: FastAPI = FastAPI(title=__name__)


def init_app(msa: InventoryMSA) -> FastAPI:
    """FastAPI 앱에 :class:`InventoryMSA` 를 연결하고 DB를 초기화 합니다."""
    app.title = msa.config.title
    app.state.msa = msa
    msa.init_db()
    return app


def get_msa(request: Request) -> InventoryMSA:
    return request.app.state.msa


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError):
    status_code = 500 if exc.transient else 400
    if exc.transient:
        logger.error("request failed: %r", exc)
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "message": exc.message},
    )


@app.post("/skus/restock", status_code=202)
def restock_sku(request: Request, body: Any = Body(...)):
    """SKU 입고 요청을 접수합니다. 같은 로트를 다시 요청해도 성공으로 응답합니다."""
    event = get_msa(request).services.restock_api.restock_sku(body)
    return event.to_dict()


@app.get("/skus")
def list_skus(
    request: Request,
    sku: Optional[str] = None,
    sort_direction: str = Query("ASC", alias="sortDirection"),
    limit: int = 50,
):
    params: dict[str, Any] = {"sortDirection": sort_direction, "limit": limit}
    if sku is not None:
        params["sku"] = sku
    skus = get_msa(request).services.list_skus_api.list_skus(params)
    return {"skus": [s.to_dict() for s in skus]}


class APIClient:
    """API 서버용 HTTP 클라이언트. CLI 와 e2e 테스트에서 사용합니다."""

    def __init__(self, session: httpx.Client):
        self.session = session

    def restock_sku(self, sku: str, units: int, lot_id: str) -> httpx.Response:
        return self.session.post(
            "/skus/restock", json={"sku": sku, "units": units, "lotId": lot_id}
        )

    def list_skus(
        self, sku: Optional[str] = None, sort_direction: str = "ASC", limit: int = 50
    ) -> httpx.Response:
        params: dict[str, Any] = {"sortDirection": sort_direction, "limit": limit}
        if sku:
            params["sku"] = sku
        return self.session.get("/skus", params=params)
