from __future__ import annotations

import json
import logging

from moderation_service.domain.services import KeyValueViolationAuditLog
from moderation_service.domain.validator import ContentValidator
from shared.logging.config import configure_logging


def _events(caplog) -> list[dict]:
    return [
        json.loads(record.getMessage())
        for record in caplog.records
        if record.name.startswith("moderation_service")
    ]


async def test_rejection_is_logged_after_logging_is_configured(caplog):
    configure_logging("moderation_service", "INFO")
    caplog.set_level(logging.INFO, logger="moderation_service")

    result = await ContentValidator().validate_content("Call me at 9876543210", "comment")

    assert result.is_valid is False
    events = _events(caplog)
    assert [e["event"] for e in events] == ["validator.content.rejected"]
    assert events[0]["level"] == "info"
    assert events[0]["logger"] == "moderation_service.domain.validator"
    assert events[0]["service"] == "moderation_service"
    assert events[0]["violation_types"] == ["phone_number", "social_media"]


async def test_audit_write_is_logged(caplog, memory_store):
    configure_logging("moderation_service", "INFO")
    caplog.set_level(logging.DEBUG, logger="moderation_service")
    validator = ContentValidator(audit_log=KeyValueViolationAuditLog(memory_store))

    await validator.validate_content("you bastard", "comment", user_id="u1")

    saved = [e for e in _events(caplog) if e["event"] == "audit.record.saved"]
    assert len(saved) == 1
    assert saved[0]["user_id"] == "u1"
    assert saved[0]["level"] == "debug"


async def test_audit_failure_is_logged_not_raised(caplog, failing_store):
    configure_logging("moderation_service", "INFO")
    caplog.set_level(logging.INFO, logger="moderation_service")
    validator = ContentValidator(audit_log=KeyValueViolationAuditLog(failing_store))

    result = await validator.validate_content("you bastard", "comment", user_id="u1")

    assert result.is_valid is True
    assert "validator.audit.failed" in [e["event"] for e in _events(caplog)]
