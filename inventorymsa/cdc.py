"""이벤트 스토어의 변경 데이터(CDC) 레코드를 해석합니다.

큐 메세지의 본문은 다음 형태의 JSON 입니다. ``NewImage`` 는 DynamoDB 의
속성값(attribute value) 형식으로 인코딩되어 있습니다. ::

    {"detail": {"dynamodb": {"NewImage": {"eventName": {"S": "ORDER_CREATED_EVENT"}, ...}}}}
"""
from __future__ import annotations

import json
from typing import Any, Mapping

from inventorymsa.core.errors import InvalidArgumentsError


def deserialize(value: Mapping[str, Any]) -> Any:
    """속성값 하나를 파이썬 값으로 바꿉니다."""
    if not isinstance(value, Mapping) or len(value) != 1:
        raise InvalidArgumentsError.from_cause(message=f"invalid attribute value: {value!r}")

    [(tag, raw)] = value.items()
    if tag == "S":
        return str(raw)
    if tag == "N":
        return _number(raw)
    if tag == "BOOL":
        return bool(raw)
    if tag == "NULL":
        return None
    if tag == "M":
        return unmarshall(raw)
    if tag in ("L", "SS", "NS"):
        return _deserialize_list(tag, raw)
    raise InvalidArgumentsError.from_cause(message=f"unsupported attribute type: {tag}")


def _deserialize_list(tag: str, raw: Any) -> Any:
    if isinstance(raw, (str, bytes, Mapping)):
        raise InvalidArgumentsError.from_cause(message=f"{tag} must be a list: {raw!r}")
    try:
        if tag == "L":
            return [deserialize(item) for item in raw]
        if tag == "SS":
            return {str(item) for item in raw}
        return {_number(item) for item in raw}
    except TypeError as e:
        raise InvalidArgumentsError.from_cause(e, message=f"{tag} must be a list: {raw!r}") from e


def _number(raw: str) -> Any:
    try:
        return int(raw)
    except (TypeError, ValueError):
        pass
    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentsError.from_cause(e, message=f"invalid number: {raw!r}") from e


def unmarshall(image: Mapping[str, Any]) -> dict[str, Any]:
    """속성값 맵 전체를 일반 dict 로 바꿉니다."""
    if not isinstance(image, Mapping):
        raise InvalidArgumentsError.from_cause(message=f"invalid image: {image!r}")
    return {key: deserialize(value) for key, value in image.items()}


def marshall(data: Mapping[str, Any]) -> dict[str, Any]:
    """:func:`unmarshall` 의 역변환. CDC 레코드를 만들어 큐에 넣을 때 사용합니다."""
    return {key: _serialize(value) for key, value in data.items()}


def _serialize(value: Any) -> dict[str, Any]:
    if value is None:
        return {"NULL": True}
    if isinstance(value, bool):
        return {"BOOL": value}
    if isinstance(value, (int, float)):
        return {"N": str(value)}
    if isinstance(value, str):
        return {"S": value}
    if isinstance(value, Mapping):
        return {"M": marshall(value)}
    if isinstance(value, (list, tuple)):
        return {"L": [_serialize(item) for item in value]}
    raise InvalidArgumentsError.from_cause(message=f"cannot serialize {value!r}")


def parse_new_image(body: str) -> dict[str, Any]:
    """큐 메세지 본문에서 ``detail.dynamodb.NewImage`` 를 꺼내 dict 로 리턴합니다.

    Raises:
        InvalidArgumentsError: JSON 이 아니거나 구조가 맞지 않을 때.
    """
    try:
        record = json.loads(body)
    except (TypeError, ValueError, RecursionError) as e:
        raise InvalidArgumentsError.from_cause(e, message="message body is not valid JSON") from e

    try:
        image = record["detail"]["dynamodb"]["NewImage"]
    except (KeyError, TypeError) as e:
        raise InvalidArgumentsError.from_cause(
            e, message="message body has no detail.dynamodb.NewImage"
        ) from e

    try:
        return unmarshall(image)
    except RecursionError as e:
        raise InvalidArgumentsError.from_cause(e, message="NewImage is nested too deeply") from e


def build_record_body(event_dict: Mapping[str, Any]) -> str:
    """이벤트(camelCase dict)를 CDC 메세지 본문으로 만듭니다."""
    return json.dumps({"detail": {"dynamodb": {"NewImage": marshall(event_dict)}}})
