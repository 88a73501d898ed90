"""입력 데이터의 스키마 검증을 담당하는 모듈입니다.

외부에서 들어오는 이벤트와 API 요청은 모두 여기 정의된 Pydantic 모델로 검증한 뒤
도메인 객체로 변환합니다. 검증 실패는 :class:`InvalidArgumentsError` 로 바뀝니다.
"""
from typing import Any, Literal, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from inventorymsa.core.errors import InvalidArgumentsError
from inventorymsa.utils import parse_iso

S = TypeVar("S", bound=BaseModel)

MIN_ID_LENGTH = 4


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class OrderEventDataSchema(CamelModel):
    order_id: str = Field(alias="orderId", min_length=MIN_ID_LENGTH)
    sku: str = Field(min_length=MIN_ID_LENGTH)
    units: int = Field(gt=0, strict=True)
    price: float = Field(ge=0)
    user_id: str = Field(alias="userId", min_length=MIN_ID_LENGTH)


class RestockEventDataSchema(CamelModel):
    sku: str = Field(min_length=MIN_ID_LENGTH)
    units: int = Field(gt=0, strict=True)
    lot_id: str = Field(alias="lotId", min_length=MIN_ID_LENGTH)


class EventEnvelopeSchema(CamelModel):
    """CDC 레코드에서 꺼낸 이벤트의 공통 형태."""

    event_name: str = Field(alias="eventName", min_length=1)
    event_data: dict[str, Any] = Field(alias="eventData")
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def check_timestamp(cls, value: str) -> str:
        try:
            parse_iso(value)
        except ValueError as e:
            raise ValueError(f"invalid ISO-8601 timestamp: {value!r}") from e
        return value


class RestockSkuRequestSchema(RestockEventDataSchema):
    pass


class ListSkusRequestSchema(CamelModel):
    sku: Optional[str] = Field(default=None, min_length=MIN_ID_LENGTH)
    sort_direction: Literal["ASC", "DESC"] = Field(default="ASC", alias="sortDirection")
    limit: int = Field(default=50, gt=0, le=1000)


def validate(schema: Type[S], data: Any) -> S:
    """``data`` 를 ``schema`` 로 검증합니다.

    Raises:
        InvalidArgumentsError: 검증에 실패한 경우.
    """
    if not isinstance(data, Mapping):
        raise InvalidArgumentsError.from_cause(
            message=f"{schema.__name__}: expected an object but got {type(data).__name__}"
        )
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise InvalidArgumentsError.from_cause(
            e, message=f"{schema.__name__}: {e.error_count()} validation error(s)"
        ) from e
