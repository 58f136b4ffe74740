from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request, Response, status

from moderation_service.api.dependencies import get_audit_log, get_validator
from moderation_service.domain.interfaces import ViolationAuditPort
from moderation_service.domain.models import (
    ContentValidationRequest,
    ContentValidationResponse,
    FieldValidationRequest,
    SkillsValidationRequest,
    SkillsValidationResponse,
    ValidationResult,
    ViolationHistoryResponse,
)
from moderation_service.domain.validator import ContentValidator
from shared.logging.config import bind_request_context
from shared.schemas.base import ErrorResponse

logger = structlog.get_logger(__name__)
router = APIRouter()


def _bind(request: Request, user_id: str | None) -> None:
    bind_request_context(
        correlation_id=request.state.correlation_id,
        user_id=user_id,
    )


def _respond(response: Response, result: ValidationResult) -> ContentValidationResponse:
    if not result.is_valid:
        response.status_code = status.HTTP_400_BAD_REQUEST
    return ContentValidationResponse.from_result(result)


@router.post(
    "/validate/content",
    response_model=ContentValidationResponse,
    responses={400: {"model": ContentValidationResponse}},
    tags=["moderation"],
)
async def validate_content(
    request: Request,
    response: Response,
    body: ContentValidationRequest,
    validator: ContentValidator = Depends(get_validator),
) -> ContentValidationResponse:
    _bind(request, body.user_id)

    result = await validator.validate_content(body.content, body.context, body.user_id)

    logger.info(
        "moderation.content.validated",
        context=body.context,
        content_length=len(body.content),
        is_valid=result.is_valid,
        score=result.score,
    )
    return _respond(response, result)


@router.post(
    "/validate/username",
    response_model=ContentValidationResponse,
    responses={400: {"model": ContentValidationResponse}},
    tags=["moderation"],
)
async def validate_username(
    request: Request,
    response: Response,
    body: FieldValidationRequest,
    validator: ContentValidator = Depends(get_validator),
) -> ContentValidationResponse:
    _bind(request, body.user_id)
    result = await validator.validate_username(body.value, body.user_id)
    return _respond(response, result)


@router.post(
    "/validate/bio",
    response_model=ContentValidationResponse,
    responses={400: {"model": ContentValidationResponse}},
    tags=["moderation"],
)
async def validate_bio(
    request: Request,
    response: Response,
    body: FieldValidationRequest,
    validator: ContentValidator = Depends(get_validator),
) -> ContentValidationResponse:
    _bind(request, body.user_id)
    result = await validator.validate_bio(body.value, body.user_id)
    return _respond(response, result)


@router.post(
    "/validate/skills",
    response_model=SkillsValidationResponse,
    responses={400: {"model": SkillsValidationResponse}},
    tags=["moderation"],
)
async def validate_skills(
    request: Request,
    response: Response,
    body: SkillsValidationRequest,
    validator: ContentValidator = Depends(get_validator),
) -> SkillsValidationResponse:
    _bind(request, body.user_id)

    failures = await validator.validate_skills(body.skills, body.user_id)
    if failures:
        logger.info(
            "moderation.skills.rejected",
            skill_count=len(body.skills),
            rejected_count=len(failures),
        )
        response.status_code = status.HTTP_400_BAD_REQUEST
    return SkillsValidationResponse(is_valid=not failures, failures=failures)


@router.get(
    "/moderation/users/{user_id}/violations",
    response_model=ViolationHistoryResponse,
    responses={503: {"model": ErrorResponse}},
    tags=["moderation"],
)
async def violation_history(
    request: Request,
    user_id: str,
    audit_log: ViolationAuditPort = Depends(get_audit_log),
) -> ViolationHistoryResponse:
    _bind(request, user_id)
    records = await audit_log.history(user_id)
    return ViolationHistoryResponse(user_id=user_id, records=records)
