"""Unit tests for the logging-backed notifier and audit sink."""

import json
import logging

import pytest

from clockwork_auth.domain.services.audit_sink import AuditAction, RequestContext
from clockwork_auth.infrastructure.audit.logging_audit_sink import LoggingAuditSink
from clockwork_auth.infrastructure.notifications.logging_notifier import (
    LoggingNotificationDispatcher,
)

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_audit_sink_writes_json_line(caplog):
    # Arrange
    sink = LoggingAuditSink()

    # Act
    with caplog.at_level(logging.INFO, logger="clockwork_auth.audit"):
        await sink.record(
            7,
            AuditAction.FAILED_LOGIN,
            "session",
            "Invalid password",
            RequestContext(ip_address="10.0.0.1", user_agent="pytest"),
        )

    # Assert
    entry = json.loads(caplog.records[-1].getMessage())
    assert entry["user_id"] == 7
    assert entry["action"] == "failed_login"
    assert entry["resource"] == "session"
    assert entry["ip_address"] == "10.0.0.1"
    assert entry["user_agent"] == "pytest"
    assert entry["timestamp"]


@pytest.mark.asyncio
async def test_notifier_never_logs_full_reset_token(caplog):
    notifier = LoggingNotificationDispatcher()
    token = "header.payload.signature-abcdef"

    with caplog.at_level(logging.INFO):
        await notifier.send_password_reset("alex@example.com", "Alex", token)

    assert token not in caplog.text
    assert "alex@example.com" not in caplog.text
    assert "a***@example.com" in caplog.text
