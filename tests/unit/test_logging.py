import logging

import pytest

from inventorymsa.config import InventoryConfig, InventoryMSA
from inventorymsa.core import get_logger, set_log_level
from inventorymsa.core._logging import to_log_level


@pytest.fixture(autouse=True)
def restore_level():
    yield
    set_log_level(logging.INFO)


def test_default_level_is_info():
    assert InventoryConfig().log_level == "INFO"
    assert get_logger("inventorymsa.controller").level == logging.INFO


@pytest.mark.parametrize(
    "value, expected",
    [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("30", 30), (logging.ERROR, logging.ERROR)],
)
def test_to_log_level(value, expected):
    assert to_log_level(value) == expected


def test_unknown_level_is_rejected():
    with pytest.raises(ValueError):
        to_log_level("loud")


def test_set_log_level_updates_existing_and_new_loggers():
    existing = get_logger("inventorymsa.repo")
    other = logging.getLogger("somewhere.else")
    other_level = other.level

    set_log_level("DEBUG")

    assert existing.level == logging.DEBUG
    assert get_logger("inventorymsa.brand.new.module").level == logging.DEBUG
    assert other.level == other_level


def test_msa_applies_configured_level():
    config = InventoryConfig.from_env({"INVENTORY_LOG_LEVEL": "warning"})
    InventoryMSA(config)
    assert get_logger("inventorymsa.services").level == logging.WARNING
