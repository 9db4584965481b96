"""Tests for structured logging."""

import json
import logging
import sys

from imagemeta.core.logging import CloudLoggingFormatter, gcs_uri_context


def _record(msg="Image metadata saved", exc_info=None, **extra):
    record = logging.LogRecord(
        name="imagemeta.test",
        level=logging.ERROR,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_single_line_json():
    output = CloudLoggingFormatter().format(_record(http_status=500))

    assert "\n" not in output
    entry = json.loads(output)
    assert entry["severity"] == "ERROR"
    assert entry["message"] == "Image metadata saved"
    assert entry["logger"] == "imagemeta.test"
    assert entry["http_status"] == 500
    assert "msg" not in entry


def test_formatter_includes_gcs_uri_from_context():
    token = gcs_uri_context.set("gs://b1/photo.png")
    try:
        entry = json.loads(CloudLoggingFormatter().format(_record()))
    finally:
        gcs_uri_context.reset(token)

    assert entry["gcs_uri"] == "gs://b1/photo.png"


def test_formatter_includes_exception():
    try:
        raise ValueError("bad bytes")
    except ValueError:
        record = _record(exc_info=sys.exc_info())

    entry = json.loads(CloudLoggingFormatter().format(record))

    assert entry["exception_type"] == "ValueError"
    assert entry["exception_message"] == "bad bytes"
    assert "Traceback" in entry["exception"]
