import logging

import pytest

from app.logging_config import HealthCheckFilter, configure_logging, mask_email, redact_emails


@pytest.mark.parametrize("text,expected", [
    ("Inquiry created for jane.doe@example.com", "Inquiry created for j***@example.com"),
    ("to=a@x.co cc=bob@mail.example.org", "to=a***@x.co cc=b***@mail.example.org"),
    ("no address here", "no address here"),
])
def test_mask_email(text, expected):
    assert mask_email(text) == expected


def test_redact_emails_masks_every_string_field():
    event = {
        "event": "Notification failed for jane@x.com",
        "exception": "Traceback ... jane@x.com rejected",
        "client_id": "browser-1",
        "attempt": 2,
    }
    redacted = redact_emails(None, "info", event)
    assert redacted["event"] == "Notification failed for j***@x.com"
    assert "jane@x.com" not in redacted["exception"]
    assert redacted["client_id"] == "browser-1"
    assert redacted["attempt"] == 2


def _access_record(path: str) -> logging.LogRecord:
    return logging.LogRecord(
        "uvicorn.access", logging.INFO, __file__, 0,
        '%s - "%s %s HTTP/%s" %d', ("127.0.0.1:5000", "GET", path, "1.1", 200), None,
    )


def test_health_check_filter_drops_only_health_lines():
    health_filter = HealthCheckFilter()
    assert health_filter.filter(_access_record("/health")) is False
    assert health_filter.filter(_access_record("/api/inquiries")) is True


def test_configure_logging_quiets_http_client_loggers():
    configure_logging()
    assert logging.getLogger("httpx").level >= logging.WARNING
    assert any(isinstance(f, HealthCheckFilter) for f in logging.getLogger("uvicorn.access").filters)
