import json
import logging

from mailing_list.logging_config import (
    MAX_LIST_ITEMS,
    MAX_TEXT_LENGTH,
    JsonFormatter,
    RequestIdFilter,
    request_id_ctx_var,
)


def make_record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("mailing_list.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestRequestIdFilter:
    def test_defaults_to_dash(self) -> None:
        record = make_record()
        RequestIdFilter().filter(record)
        assert record.request_id == "-"

    def test_uses_context_var(self) -> None:
        token = request_id_ctx_var.set("req-42")
        try:
            record = make_record()
            RequestIdFilter().filter(record)
        finally:
            request_id_ctx_var.reset(token)
        assert record.request_id == "req-42"


class TestJsonFormatter:
    def test_includes_base_fields_and_extras(self) -> None:
        record = make_record("Adding a new subscriber", request_id="req-1", subscriber_email="a@b.co")

        payload = json.loads(JsonFormatter().format(record))

        assert payload["message"] == "Adding a new subscriber"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "mailing_list.test"
        assert payload["request_id"] == "req-1"
        assert payload["subscriber_email"] == "a@b.co"

    def test_truncates_oversized_values(self) -> None:
        record = make_record(
            "x" * 20_000,
            subscriber_email="a" * 20_000,
            error_codes=list(range(1_000)),
        )

        payload = json.loads(JsonFormatter().format(record))

        assert len(payload["message"]) == MAX_TEXT_LENGTH
        assert len(payload["subscriber_email"]) == MAX_TEXT_LENGTH
        assert len(payload["error_codes"]) == MAX_LIST_ITEMS + 1
        assert payload["error_codes"][-1] == "...truncated"
