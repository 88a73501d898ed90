import json

import pytest

from inventorymsa.command import InventoryMSACommand, InventoryMSACommandParser
from inventorymsa.config import InventoryMSA
from inventorymsa.test.e2e import FakeQueueClient


@pytest.fixture
def cmd(msa: InventoryMSA, tmp_path) -> InventoryMSACommand:
    msa.__dict__["queue_client"] = FakeQueueClient()
    return InventoryMSACommand(msa, path=tmp_path)


def test_info_prints_config(cmd, capsys):
    InventoryMSACommandParser(cmd).parse_args(["info"])
    out = capsys.readouterr().out
    assert "InventoryMSA Information" in out
    assert "sqlite://" in out


def test_send_event_pushes_cdc_record(cmd, msa):
    event = {"eventName": "ORDER_CREATED_EVENT", "eventData": {"orderId": "order-1"}}
    InventoryMSACommandParser(cmd).parse_args(["send-event", "allocate", json.dumps(event)])

    [queued] = msa.queue_client.queues["inventory:allocate"]
    record = json.loads(queued.body)
    assert record["detail"]["dynamodb"]["NewImage"]["eventName"] == {"S": "ORDER_CREATED_EVENT"}


def test_send_event_reports_bad_json(cmd, capsys):
    InventoryMSACommandParser(cmd).parse_args(["send-event", "allocate", "{oops"])
    assert "invalid event JSON" in capsys.readouterr().err


def test_unknown_worker_is_rejected_by_parser(cmd):
    with pytest.raises(SystemExit):
        InventoryMSACommandParser(cmd).parse_args(["worker", "ship"])


def test_api_dry_run_initializes_app(cmd):
    from inventorymsa.api import app

    InventoryMSACommandParser(cmd).parse_args(["api", "--dry-run"])
    assert app.state.msa is cmd.msa
