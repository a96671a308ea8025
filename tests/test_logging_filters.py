"""Tests for sensitive data filtering and submission correlation in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO
from pathlib import Path

import pytest

from crpt_client.core.config import LogSettings
from crpt_client.core.logging import (
    JsonFormatter,
    SensitiveDataFilter,
    SubmissionIdFilter,
    clear_submission_id,
    configure_logging,
    set_submission_id,
)


def _json_logger(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(SubmissionIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_signature_and_payload():
    """Signatures and document bodies never reach the log output."""

    logger, stream = _json_logger("test_redaction")

    logger.info(
        "submission.debug",
        extra={
            "signature": "MIIB-secret-signature",
            "body": '{"ownerInn": "7700000000"}',
            "status_code": 200,
        },
    )

    output = stream.getvalue()

    assert "MIIB-secret-signature" not in output
    assert "7700000000" not in output
    assert "[REDACTED]" in output
    assert "status_code" in output


def test_sensitive_filter_allows_safe_fields():
    logger, stream = _json_logger("test_safe_fields")

    logger.info(
        "admission.refill",
        extra={"restored": 3, "waiting": 1, "request_limit": 5},
    )

    payload = json.loads(stream.getvalue())

    assert payload["message"] == "admission.refill"
    assert payload["restored"] == 3
    assert payload["request_limit"] == 5
    assert "[REDACTED]" not in stream.getvalue()


def test_sensitive_filter_redacts_nested_dicts():
    logger, stream = _json_logger("test_nested")

    logger.info(
        "registry.request",
        extra={
            "headers": {
                "Signature": "nested-secret",
                "Content-Type": "application/json",
            },
        },
    )

    output = stream.getvalue()

    assert "nested-secret" not in output
    assert "application/json" in output


def test_submission_id_is_attached_from_context():
    logger, stream = _json_logger("test_correlation")

    set_submission_id("sub-123")
    try:
        logger.info("submission.accepted")
    finally:
        clear_submission_id()
    logger.info("after.clear")

    first, second = (json.loads(line) for line in stream.getvalue().splitlines())
    assert first["submission_id"] == "sub-123"
    assert "submission_id" not in second


def test_configure_logging_writes_json_to_file(tmp_path: Path):
    log_file = tmp_path / "logs" / "client.log"
    root = logging.getLogger()
    previous_handlers, previous_level = list(root.handlers), root.level

    try:
        configure_logging(
            LogSettings(level="DEBUG", format="json", output="file", file_path=str(log_file))
        )
        logging.getLogger("crpt_client.test").info("file.event", extra={"signature": "s"})
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)

    payload = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert payload["message"] == "file.event"
    assert payload["level"] == "info"
    assert payload["signature"] == "[REDACTED]"


@pytest.mark.parametrize("fmt", ["plain", "json"])
def test_configure_logging_replaces_root_handlers(fmt: str):
    root = logging.getLogger()
    previous_handlers, previous_level = list(root.handlers), root.level

    try:
        configure_logging(LogSettings(level="WARNING", format=fmt))
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter) is (fmt == "json")
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)
