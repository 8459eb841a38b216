import json
import logging

import pytest

from fruitstand.utils import (
    JsonLogFormatter,
    configure_logging,
    generate_request_id,
    parse_int,
)


@pytest.mark.parametrize(
    "raw, expected",
    [("1", 1), ("42", 42), ("-3", -3), ("+7", 7), ("007", 7)],
)
def test_parse_int_accepts_decimal_integers(raw, expected):
    assert parse_int(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [None, "", "abc", "1.5", " 1", "1 ", "1_000", "0x10", "١٢", "+", "1e3"],
)
def test_parse_int_rejects_everything_else(raw):
    assert parse_int(raw) is None


def test_request_ids_are_unique():
    assert generate_request_id() != generate_request_id()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("9223372036854775807", 2 ** 63 - 1),
        ("-9223372036854775808", -(2 ** 63)),
        ("0" * 5000 + "12", 12),
    ],
)
def test_parse_int_accepts_int64_bounds(raw, expected):
    assert parse_int(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "9223372036854775808",
        "-9223372036854775809",
        "99999999999999999999",
        "1" * 5000,
        "-" + "9" * 5000,
    ],
)
def test_parse_int_rejects_out_of_range(raw):
    assert parse_int(raw) is None


def test_json_formatter_emits_one_object():
    record = logging.LogRecord(
        name="fruitstand.api.routes",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="call to sleep for %d seconds",
        args=(3,),
        exc_info=None,
    )
    record.request_id = "req-1"

    entry = json.loads(JsonLogFormatter().format(record))
    assert entry["message"] == "call to sleep for 3 seconds"
    assert entry["level"] == "INFO"
    assert entry["logger"] == "fruitstand.api.routes"
    assert entry["request_id"] == "req-1"


def test_configure_logging_installs_single_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging("DEBUG", "json")
        configure_logging("WARNING", "text")
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
