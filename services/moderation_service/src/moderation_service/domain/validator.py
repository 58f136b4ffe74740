from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import structlog

from moderation_service.domain.cache import ResultCache, fingerprint
from moderation_service.domain.interfaces import ViolationAuditPort
from moderation_service.domain.models import (
    ContentContext,
    Severity,
    SkillValidationFailure,
    ValidationResult,
    Violation,
    ViolationType,
)
from moderation_service.domain.patterns import (
    PROFANITY_SUGGESTION,
    PatternRule,
    RuleGroup,
    ValidatorConfig,
)

logger = structlog.get_logger(__name__)

# Hard limit: content scoring 10 or more is rejected.
BLOCK_THRESHOLD = 10
REDACTION_MARKER = "[REMOVED]"

CONTACT_SHARING_ADVICE = (
    "Contact details are automatically shared in private messages after job assignment"
)
RESPECTFUL_LANGUAGE_ADVICE = "Please maintain professional and respectful communication"

_CompiledRules = list[tuple[PatternRule, re.Pattern[str]]]

# \b, \d and \w are ASCII-only, while \s keeps matching Unicode space separators.
_SPACE_CHARS = r"\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"


def _expand_whitespace(pattern: str) -> str:
    parts: list[str] = []
    in_class = False
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\" and i + 1 < len(pattern):
            escape = pattern[i : i + 2]
            if escape == r"\s":
                parts.append(_SPACE_CHARS if in_class else f"[{_SPACE_CHARS}]")
            else:
                parts.append(escape)
            i += 2
            continue
        if char == "[":
            in_class = True
        elif char == "]":
            in_class = False
        parts.append(char)
        i += 1
    return "".join(parts)


def _compile(pattern: str, flags: int = 0) -> re.Pattern[str] | None:
    try:
        return re.compile(_expand_whitespace(pattern), flags | re.ASCII)
    except re.error as exc:
        logger.error("validator.pattern.invalid", pattern=pattern, error=str(exc))
        return None


def _compile_group(group: RuleGroup) -> _CompiledRules:
    compiled: _CompiledRules = []
    for rule in group.rules:
        regex = _compile(rule.pattern, rule.flags)
        if regex is not None:
            compiled.append((rule, regex))
    return compiled


class ContentValidator:
    """Rule-based moderation of user-submitted marketplace text.

    Every call runs four passes in a fixed order: sensitive information,
    profanity, spam/promotional language and context-specific rules. The
    severities of all violations are summed and content scoring below
    ``BLOCK_THRESHOLD`` is valid. Matches of HIGH or CRITICAL severity are
    redacted from ``cleaned_content``.

    Results are cached per (context, content); the user id only drives the
    audit trail and never the verdict.
    """

    def __init__(
        self,
        config: ValidatorConfig | None = None,
        cache: ResultCache | None = None,
        audit_log: ViolationAuditPort | None = None,
    ) -> None:
        self._config = config or ValidatorConfig()
        self._cache = cache if cache is not None else ResultCache()
        self._audit_log = audit_log

        self._sensitive_info = [
            (group, _compile_group(group)) for group in self._config.sensitive_info
        ]
        self._promotional = _compile_group(self._config.promotional)
        self._contact_intent = _compile_group(self._config.contact_intent)
        self._repetition = _compile(self._config.repetition_pattern)

        self._profanity: list[re.Pattern[str]] = []
        for word in self._config.profanity_words:
            regex = _compile(rf"\b{re.escape(word)}\b", re.IGNORECASE)
            if regex is not None:
                self._profanity.append(regex)

    @property
    def cache(self) -> ResultCache:
        return self._cache

    async def validate_content(
        self,
        content: str,
        context: str = ContentContext.COMMENT,
        user_id: str | None = None,
    ) -> ValidationResult:
        result = self.analyze(content, context)
        if user_id and result.violations:
            await self._record_violations(user_id, content, result.violations)
        return result

    async def validate_username(
        self, username: str, user_id: str | None = None
    ) -> ValidationResult:
        return await self.validate_content(username, ContentContext.PROFILE, user_id)

    async def validate_bio(self, bio: str, user_id: str | None = None) -> ValidationResult:
        return await self.validate_content(bio, ContentContext.PROFILE, user_id)

    async def validate_skills(
        self,
        skills: Iterable[str | Mapping[str, Any]],
        user_id: str | None = None,
    ) -> list[SkillValidationFailure]:
        """Validate each skill name; only the failing skills are returned."""
        failures: list[SkillValidationFailure] = []
        for skill in skills:
            name = str(skill["name"]) if isinstance(skill, Mapping) else skill
            result = await self.validate_content(name, ContentContext.PROFILE, user_id)
            if not result.is_valid:
                failures.append(SkillValidationFailure(skill=name, result=result))
        return failures

    def analyze(self, content: str, context: str) -> ValidationResult:
        """Scan content without touching the audit trail."""
        context = str(context)
        if context == ContentContext.PRIVATE_MESSAGE:
            return ValidationResult.passthrough(content)

        key = fingerprint(content, context)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        violations = [
            *self._scan_sensitive_info(content),
            *self._scan_profanity(content),
            *self._scan_spam(content),
            *self._scan_context(content, context),
        ]
        score = sum(int(v.severity) for v in violations)

        result = ValidationResult(
            is_valid=score < BLOCK_THRESHOLD,
            violations=tuple(violations),
            score=score,
            cleaned_content=self._redact(content, violations),
            suggestions=self._suggest(violations),
        )
        self._cache.put(key, result)

        if not result.is_valid:
            logger.info(
                "validator.content.rejected",
                context=context,
                score=score,
                content_length=len(content),
                violation_types=sorted(result.violation_types),
            )
        return result

    # -- scan passes ----------------------------------------------------------

    @staticmethod
    def _match_rules(
        content: str,
        compiled: _CompiledRules,
        violation_type: ViolationType,
        suggestion: str | None,
    ) -> list[Violation]:
        violations: list[Violation] = []
        for rule, regex in compiled:
            for match in regex.finditer(content):
                violations.append(
                    Violation(
                        type=violation_type,
                        severity=rule.severity,
                        message=rule.message,
                        match=match.group(0),
                        position=match.start(),
                        suggestion=suggestion,
                    )
                )
        return violations

    def _scan_sensitive_info(self, content: str) -> list[Violation]:
        violations: list[Violation] = []
        for group, compiled in self._sensitive_info:
            violations.extend(
                self._match_rules(content, compiled, group.violation_type, group.suggestion)
            )
        return violations

    def _scan_profanity(self, content: str) -> list[Violation]:
        violations: list[Violation] = []
        for regex in self._profanity:
            for match in regex.finditer(content):
                violations.append(
                    Violation(
                        type=ViolationType.ABUSE,
                        severity=Severity.CRITICAL,
                        message="Inappropriate language detected",
                        match=match.group(0),
                        position=match.start(),
                        suggestion=PROFANITY_SUGGESTION,
                    )
                )
        return violations

    def _scan_spam(self, content: str) -> list[Violation]:
        config = self._config
        violations = self._match_rules(
            content,
            self._promotional,
            config.promotional.violation_type,
            config.promotional.suggestion,
        )

        if self._repetition is not None:
            for match in self._repetition.finditer(content):
                violations.append(
                    Violation(
                        type=ViolationType.REPETITIVE,
                        severity=Severity.MEDIUM,
                        message="Repetitive content detected",
                        match=match.group(0),
                        position=match.start(),
                        suggestion="Avoid repeating the same text multiple times",
                    )
                )

        if len(content) > config.caps_min_length:
            capitals = sum(1 for ch in content if "A" <= ch <= "Z")
            if capitals / len(content) > config.caps_ratio_threshold:
                violations.append(
                    Violation(
                        type=ViolationType.SPAM,
                        severity=Severity.MEDIUM,
                        message="Excessive use of capital letters",
                        match=content,
                        position=0,
                        suggestion="Please avoid writing in all capitals",
                    )
                )
        return violations

    def _scan_context(self, content: str, context: str) -> list[Violation]:
        config = self._config
        violations: list[Violation] = []
        if context in config.contact_intent_contexts:
            violations.extend(
                self._match_rules(
                    content,
                    self._contact_intent,
                    config.contact_intent.violation_type,
                    config.contact_intent.suggestion,
                )
            )

        if context == ContentContext.COMMENT and len(content) > config.comment_max_length:
            violations.append(
                Violation(
                    type=ViolationType.SPAM,
                    severity=Severity.LOW,
                    message="Comment too long",
                    match=content,
                    position=0,
                    suggestion="Please keep comments concise and focused",
                )
            )
        return violations

    # -- verdict assembly -----------------------------------------------------

    @staticmethod
    def _redact(content: str, violations: Sequence[Violation]) -> str:
        cleaned = content
        for violation in violations:
            if violation.severity >= Severity.HIGH and violation.match:
                cleaned = cleaned.replace(violation.match, REDACTION_MARKER)
        return cleaned.strip()

    @staticmethod
    def _suggest(violations: Sequence[Violation]) -> tuple[str, ...]:
        suggestions: dict[str, None] = {}
        for violation in violations:
            if violation.suggestion:
                suggestions[violation.suggestion] = None

        types = {v.type for v in violations}
        if types & {ViolationType.PHONE_NUMBER, ViolationType.EMAIL_ADDRESS}:
            suggestions[CONTACT_SHARING_ADVICE] = None
        if types & {ViolationType.PROFANITY, ViolationType.ABUSE}:
            suggestions[RESPECTFUL_LANGUAGE_ADVICE] = None
        return tuple(suggestions)

    async def _record_violations(
        self, user_id: str, content: str, violations: Sequence[Violation]
    ) -> None:
        if self._audit_log is None:
            return
        try:
            await self._audit_log.record(user_id, content, violations)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "validator.audit.failed",
                user_id=user_id,
                violation_count=len(violations),
                error=str(exc),
            )
