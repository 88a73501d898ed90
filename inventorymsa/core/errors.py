"""재고 서비스에서 사용하는 에러 분류 체계.

모든 에러는 ``transient`` 속성을 가지며, 외부 재전송 메커니즘은 이 값을 보고
메세지를 다시 큐에 넣을지(``True``) 아니면 버릴지(``False``) 결정합니다.
"""
from __future__ import annotations

from typing import Any, Optional, Type, TypeVar

E = TypeVar("E", bound="AppError")


class AppError(Exception):
    """``inventorymsa`` 와 관련된 모든 에러의 기본 클래스."""

    default_message = "Unrecognized error."
    transient = True

    def __init__(
        self,
        message: str,
        transient: Optional[bool] = None,
        cause: Any = None,
    ):
        super().__init__(message)
        self.message = message
        if transient is not None:
            self.transient = transient
        self.cause = cause

    @classmethod
    def from_cause(cls: Type[E], cause: Any = None, message: Optional[str] = None) -> E:
        return cls(message or cls.default_message, cause=cause)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(message={self.message!r}, "
            f"transient={self.transient}, cause={self.cause!r})"
        )


class UnrecognizedError(AppError):
    """알 수 없는 에러 또는 인프라 장애. 재시도하면 성공할 수 있습니다."""

    default_message = "Unrecognized error."
    transient = True


class InvalidArgumentsError(AppError):
    """입력 형식이 잘못된 경우. 재전송해도 결과가 달라지지 않습니다."""

    default_message = "Invalid arguments error."
    transient = False


class DuplicateEventRaisedError(AppError):
    """이벤트 스토어의 유일성 조건에 걸린 경우. 이미 처리된 이벤트입니다."""

    default_message = "Duplicate event raise operation error."
    transient = False


class InvalidStockCompletionError(AppError):
    """결제 승인 완료 처리의 조건부 쓰기가 실패한 경우."""

    default_message = "Invalid stock completion error."
    transient = False


class InvalidStockDeallocationError(AppError):
    """결제 거절에 따른 할당 해제의 조건부 쓰기가 실패한 경우."""

    default_message = "Invalid stock deallocation error."
    transient = False


class DuplicateStockAllocationError(AppError):
    """같은 주문/SKU 에 대한 할당이 이미 존재하는 경우."""

    default_message = "Duplicate stock allocation operation error."
    transient = False


class DepletedStockAllocationError(AppError):
    """SKU 재고가 부족해서 할당할 수 없는 경우."""

    default_message = "Depleted stock allocation operation error."
    transient = False


class DuplicateRestockOperationError(AppError):
    """같은 입고 로트(lot)가 이미 반영된 경우."""

    default_message = "Duplicate restock operation error."
    transient = False


def is_transient_error(error: BaseException) -> bool:
    """재전송 대상 에러인지 판단합니다.

    :class:`AppError` 가 아닌 예외는 원인을 알 수 없으므로 재전송 대상으로 봅니다.
    """
    if isinstance(error, AppError):
        return error.transient
    return True
