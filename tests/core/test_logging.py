"""
Unit tests for JsonFormatter: every extra= key the service emits reaches the JSON line.
"""
import json
import logging
import unittest

from app.core.logging import JsonFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("test", logging.INFO, __file__, 1, "event", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter(unittest.TestCase):
    def test_webhook_outcome_fields(self):
        line = json.loads(JsonFormatter().format(
            _record(event_id="evt_1", event_type="checkout.session.completed", artifact_id="a", applied=False)
        ))
        self.assertEqual(line["message"], "event")
        self.assertEqual(line["event_id"], "evt_1")
        self.assertIs(line["applied"], False)

    def test_collaborator_detail_is_logged(self):
        line = json.loads(JsonFormatter().format(
            _record(error="Processor temporarily unavailable", detail={"breaker": "open"}, payment_status="unpaid")
        ))
        self.assertEqual(line["detail"], {"breaker": "open"})
        self.assertEqual(line["payment_status"], "unpaid")

    def test_unknown_extras_are_dropped(self):
        line = json.loads(JsonFormatter().format(_record(secret="x", file_name="a.pdf")))
        self.assertNotIn("secret", line)
        self.assertEqual(line["file_name"], "a.pdf")
