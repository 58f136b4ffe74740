from __future__ import annotations

from fastapi import Request

from moderation_service.domain.interfaces import ViolationAuditPort
from moderation_service.domain.validator import ContentValidator


def get_validator(request: Request) -> ContentValidator:
    return request.app.state.validator


def get_audit_log(request: Request) -> ViolationAuditPort:
    return request.app.state.audit_log
