from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

# The repetition scan is quadratic in line length, so request bodies are capped.
MAX_CONTENT_LENGTH = 5000
MAX_SKILL_LENGTH = 100


class ContentContext(StrEnum):
    JOB_DESCRIPTION = "job_description"
    JOB_APPLICATION = "job_application"
    COMMENT = "comment"
    REVIEW = "review"
    PROFILE = "profile"
    PRIVATE_MESSAGE = "private_message"


class ViolationType(StrEnum):
    PHONE_NUMBER = "phone_number"
    EMAIL_ADDRESS = "email_address"
    SOCIAL_MEDIA = "social_media"
    LOCATION_SHARING = "location_sharing"
    EXTERNAL_LINK = "external_link"
    PROFANITY = "profanity"
    ABUSE = "abuse"
    SPAM = "spam"
    PROMOTIONAL = "promotional"
    REPETITIVE = "repetitive"


class Severity(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


class Violation(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ViolationType
    severity: Severity
    message: str
    match: str
    position: int = Field(ge=0)
    suggestion: str | None = None


class ValidationResult(BaseModel):
    """Verdict for one piece of user text.

    Results are shared between callers through the validator cache, so the
    model is frozen and its collections are tuples.
    """

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    violations: tuple[Violation, ...] = ()
    score: int = 0
    cleaned_content: str
    suggestions: tuple[str, ...] = ()

    @classmethod
    def passthrough(cls, content: str) -> "ValidationResult":
        return cls(is_valid=True, cleaned_content=content)

    @property
    def violation_types(self) -> set[ViolationType]:
        return {v.type for v in self.violations}


class SkillValidationFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    skill: str
    result: ValidationResult


class ViolationSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ViolationType
    severity: Severity
    message: str


class ViolationAuditRecord(BaseModel):
    """Truncated copy of rejected content kept for moderation review."""

    model_config = ConfigDict(frozen=True)

    content: str
    violations: list[ViolationSummary]
    timestamp: int = Field(description="Milliseconds since the Unix epoch")


class ContentValidationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str = Field(min_length=1, max_length=MAX_CONTENT_LENGTH)
    context: str = Field(default=ContentContext.COMMENT.value, max_length=64)
    user_id: str | None = Field(default=None, max_length=255)


class FieldValidationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str = Field(min_length=1, max_length=MAX_CONTENT_LENGTH)
    user_id: str | None = Field(default=None, max_length=255)


class SkillsValidationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    skills: list[Annotated[str, Field(max_length=MAX_SKILL_LENGTH)]] = Field(
        min_length=1, max_length=100
    )
    user_id: str | None = Field(default=None, max_length=255)


class ContentValidationResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    score: int
    violations: list[Violation] = []
    suggestions: list[str] = []
    cleaned_content: str
    message: str

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ContentValidationResponse":
        return cls(
            is_valid=result.is_valid,
            score=result.score,
            violations=list(result.violations),
            suggestions=list(result.suggestions),
            cleaned_content=result.cleaned_content,
            message=(
                "Content is appropriate"
                if result.is_valid
                else "Content contains inappropriate elements"
            ),
        )


class SkillsValidationResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    failures: list[SkillValidationFailure] = []


class ViolationHistoryResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    records: list[ViolationAuditRecord] = []
