"""
Tests for log formatters.
"""

import json
import logging
import sys

import pytest

from http_request.core.logging.formatters import (
    JSONFormatter,
    TextFormatter,
    extra_fields,
    get_formatter,
)


def make_record(message="Request completed", **extra):
    record = logging.LogRecord(
        name="http_request.api.example.com",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestExtraFields:

    def test_only_extra_attributes(self):
        record = make_record(status_code=200, request_id="abc")
        assert extra_fields(record) == {"status_code": 200, "request_id": "abc"}

    def test_private_attributes_skipped(self):
        record = make_record(_internal=True)
        assert extra_fields(record) == {}


class TestJSONFormatter:

    def test_basic_fields(self):
        output = json.loads(JSONFormatter().format(make_record()))
        assert output["level"] == "INFO"
        assert output["logger"] == "http_request.api.example.com"
        assert output["message"] == "Request completed"
        assert "timestamp" in output

    def test_extra_fields_included(self):
        record = make_record(status_code=404, duration_ms=12.5)
        output = json.loads(JSONFormatter().format(record))
        assert output["status_code"] == 404
        assert output["duration_ms"] == 12.5

    def test_non_serializable_values(self):
        record = make_record(state=object())
        output = json.loads(JSONFormatter().format(record))
        assert output["state"].startswith("<object")

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = make_record(message="Request failed")
            record.exc_info = sys.exc_info()

        output = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: boom" in output["exception"]


class TestTextFormatter:

    def test_format(self):
        output = TextFormatter().format(make_record("Request submitted", method="GET"))
        assert "[INFO]" in output
        assert "[http_request.api.example.com]" in output
        assert output.endswith("Request submitted method=GET")

    def test_without_extra_fields(self):
        output = TextFormatter().format(make_record("Request aborted"))
        assert output.endswith("Request aborted")


class TestGetFormatter:

    def test_known(self):
        assert isinstance(get_formatter("json"), JSONFormatter)
        assert isinstance(get_formatter("TEXT"), TextFormatter)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown format type"):
            get_formatter("xml")
