from __future__ import annotations

import json
import logging

from propdesk.core.logging_config import JsonFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("propdesk.services.payment_service", logging.INFO, __file__, 1, "payments.created", (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_lines_carry_service_and_extras():
    line = JsonFormatter(service="propdesk", env="test").format(
        _record(event="payments.created", payment_id="p-1", amount=1500.5)
    )
    payload = json.loads(line)

    assert payload["service"] == "propdesk"
    assert payload["env"] == "test"
    assert payload["event"] == "payments.created"
    assert payload["payment_id"] == "p-1"
    assert payload["amount"] == 1500.5
    assert payload["level"] == "INFO"


def test_event_defaults_to_message_and_keeps_accents():
    payload = json.loads(JsonFormatter(service="propdesk", env="test").format(_record(title="Plomería")))
    assert payload["event"] == "payments.created"
    assert payload["title"] == "Plomería"
