"""``inventorymsa`` 로거.

모든 모듈 로거는 ``inventorymsa.`` 로 시작하는 이름을 쓰며, 레벨은
:func:`set_log_level` 로 한꺼번에 바꿀 수 있습니다. 앱 객체는 설정의
``log_level`` (환경변수 ``INVENTORY_LOG_LEVEL``)로 이 함수를 호출합니다.
"""
import logging
from typing import Optional, Union

from uvicorn.logging import DefaultFormatter

LOGGER_PREFIX = "inventorymsa"
LOG_FORMAT = "%(levelprefix)s %(message)s"

_default_level = logging.INFO


def to_log_level(level: Union[int, str]) -> int:
    """``"debug"``, ``"WARNING"``, ``"10"`` 같은 값을 logging 레벨 숫자로 바꿉니다."""
    if isinstance(level, int):
        return level
    if level.strip().isdigit():
        return int(level)
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"unknown log level: {level!r}")
    return value


def get_logger(name: str, log_level: Optional[Union[int, str]] = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(_default_level if log_level is None else to_log_level(log_level))
        ch = logging.StreamHandler()
        ch.setFormatter(DefaultFormatter(fmt=LOG_FORMAT))
        logger.addHandler(ch)

    return logger


def set_log_level(level: Union[int, str]) -> int:
    """이미 만들어진 ``inventorymsa.*`` 로거와 이후 만들 로거의 레벨을 바꿉니다."""
    global _default_level

    _default_level = to_log_level(level)
    for name, logger in list(logging.root.manager.loggerDict.items()):
        if not isinstance(logger, logging.Logger):
            continue
        if name == LOGGER_PREFIX or name.startswith(LOGGER_PREFIX + "."):
            logger.setLevel(_default_level)
    return _default_level
