from __future__ import annotations

import re
from dataclasses import dataclass, field

from moderation_service.domain.models import ContentContext, Severity, ViolationType


@dataclass(frozen=True)
class PatternRule:
    pattern: str
    severity: Severity
    message: str
    flags: int = 0


@dataclass(frozen=True)
class RuleGroup:
    """Rules that report the same violation type and remediation hint."""

    violation_type: ViolationType
    rules: tuple[PatternRule, ...]
    suggestion: str | None = None


PHONE_NUMBER_RULES = RuleGroup(
    violation_type=ViolationType.PHONE_NUMBER,
    suggestion="Use our messaging system to share contact details after job assignment",
    rules=(
        PatternRule(
            r"\b[6-9]\d{9}\b",
            Severity.CRITICAL,
            "Phone numbers are not allowed in public content",
        ),
        PatternRule(
            r"\+91[-.\s]?[6-9]\d{9}\b",
            Severity.CRITICAL,
            "Phone numbers are not allowed",
        ),
        PatternRule(
            r"\b\d{3}[-.\s]\d{3}[-.\s]\d{4}\b",
            Severity.CRITICAL,
            "Formatted phone numbers are not allowed",
        ),
        PatternRule(
            r"\b(call|phone|mobile|contact)\s*(me|us)?\s*(at|on|:)?\s*\d",
            Severity.HIGH,
            "Contact instructions with numbers not allowed",
            re.IGNORECASE,
        ),
    ),
)

EMAIL_ADDRESS_RULES = RuleGroup(
    violation_type=ViolationType.EMAIL_ADDRESS,
    suggestion="Email sharing is only allowed in private messages",
    rules=(
        PatternRule(
            r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b",
            Severity.CRITICAL,
            "Email addresses are not allowed in public content",
        ),
        # "name at domain dot com"
        PatternRule(
            r"\b[A-Za-z0-9._%+-]+\s*(at|@)\s*[A-Za-z0-9.-]+\s*(dot|\.)\s*[A-Za-z]{2,}\b",
            Severity.HIGH,
            "Disguised email addresses are not allowed",
            re.IGNORECASE,
        ),
    ),
)

SOCIAL_MEDIA_RULES = RuleGroup(
    violation_type=ViolationType.SOCIAL_MEDIA,
    suggestion="Contact sharing is only allowed in private chat after job assignment",
    rules=(
        PatternRule(
            r"\b(whatsapp|whats\s*app|wa)\b",
            Severity.CRITICAL,
            "WhatsApp references not allowed in public content",
            re.IGNORECASE,
        ),
        PatternRule(
            r"\b(telegram|tg)\b",
            Severity.CRITICAL,
            "Telegram references not allowed",
            re.IGNORECASE,
        ),
        PatternRule(
            r"\b(instagram|insta|ig)\b",
            Severity.HIGH,
            "Instagram references not allowed",
            re.IGNORECASE,
        ),
        PatternRule(
            r"\b(facebook|fb)\b",
            Severity.HIGH,
            "Facebook references not allowed",
            re.IGNORECASE,
        ),
        PatternRule(r"@\w+", Severity.MEDIUM, "Social media handles not allowed"),
    ),
)

EXTERNAL_LINK_RULES = RuleGroup(
    violation_type=ViolationType.EXTERNAL_LINK,
    suggestion="External links are not allowed in public content",
    rules=(
        PatternRule(
            r"https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b([-a-zA-Z0-9()@:%_+.~#?&/=]*)",
            Severity.HIGH,
            "External links not allowed in public content",
            re.IGNORECASE,
        ),
        PatternRule(
            r"\b(bit\.ly|tinyurl|short\.link|goo\.gl)\b",
            Severity.HIGH,
            "Shortened links not allowed",
            re.IGNORECASE,
        ),
    ),
)

PROMOTIONAL_RULES = RuleGroup(
    violation_type=ViolationType.PROMOTIONAL,
    rules=(
        PatternRule(
            r"\b(free|offer|discount|deal|sale|limited\s*time|act\s*now|hurry)\b",
            Severity.MEDIUM,
            "Promotional language detected",
            re.IGNORECASE,
        ),
        PatternRule(
            r"\b(earn\s*money|work\s*from\s*home|investment\s*opportunity|get\s*rich|mlm)\b",
            Severity.HIGH,
            "Suspicious promotional content",
            re.IGNORECASE,
        ),
    ),
)

CONTACT_INTENT_RULES = RuleGroup(
    violation_type=ViolationType.SOCIAL_MEDIA,
    suggestion="Contact details can be shared in private messages after job assignment",
    rules=tuple(
        PatternRule(
            pattern,
            Severity.HIGH,
            "Contact instructions not allowed in public content",
            re.IGNORECASE,
        )
        for pattern in (
            r"\b(contact|reach|call|message|text)\s*(me|us)\b",
            r"\b(send|give)\s*(your|me|us)\s*(number|phone|email|whatsapp)\b",
            r"\b(my\s*)?(number|phone|email|whatsapp)\s*(is|:)\b",
        )
    ),
)

PROFANITY_WORDS: dict[str, tuple[str, ...]] = {
    "english": (
        "fuck", "fucking", "shit", "damn", "bitch", "bastard", "asshole", "ass",
        "hell", "crap", "piss", "cock", "dick", "pussy", "slut", "whore",
        "motherfucker", "son of a bitch", "goddamn",
    ),
    "tamil": (
        "punda", "sunni", "koodhi", "ommala", "poda", "podi", "maire", "mairu",
        "naaye", "paithiyam", "loose", "aalu", "kena", "thevdiya", "thevidiya",
        "poolu", "kunna", "myre", "thendi", "para",
    ),
    "hindi": (
        "madarchod", "behenchod", "chutiya", "bhosdike", "randi", "saala",
        "kamina", "harami", "kutte", "gandu", "lavde", "chodu", "bhen ka loda",
        "ma ki chut", "behen ki chut", "gaandu", "lund", "bhosda",
    ),
    "malayalam": (
        "thendi", "potta", "myre", "kunna", "pooru", "thayoli",
        "maire", "para", "poda", "podi",
    ),
    # character-substituted and vowel-dropped spellings
    "variations": (
        "f*ck", "f**k", "sh*t", "s**t", "b*tch", "a**hole",
        "p0rn", "s3x", "fuk", "fck", "sht", "btch",
    ),
}

PROFANITY_SUGGESTION = "Please use respectful and professional language"

REPETITION_PATTERN = r"(.{3,})\1{2,}"

PUBLIC_CONTEXTS: frozenset[str] = frozenset({
    ContentContext.COMMENT.value,
    ContentContext.JOB_DESCRIPTION.value,
    ContentContext.REVIEW.value,
})


def merge_word_lists(word_lists: dict[str, tuple[str, ...]]) -> tuple[str, ...]:
    """Flatten per-language lists in order.

    Words listed under two languages stay duplicated and are reported once per
    list on every occurrence.
    """
    return tuple(word for words in word_lists.values() for word in words)


@dataclass(frozen=True)
class ValidatorConfig:
    """Pattern tables and thresholds for a ContentValidator.

    Built once at startup and injected; tests replace individual tables with
    ``dataclasses.replace``.
    """

    sensitive_info: tuple[RuleGroup, ...] = (
        PHONE_NUMBER_RULES,
        EMAIL_ADDRESS_RULES,
        SOCIAL_MEDIA_RULES,
        EXTERNAL_LINK_RULES,
    )
    promotional: RuleGroup = PROMOTIONAL_RULES
    contact_intent: RuleGroup = CONTACT_INTENT_RULES
    profanity_words: tuple[str, ...] = field(
        default_factory=lambda: merge_word_lists(PROFANITY_WORDS)
    )
    repetition_pattern: str = REPETITION_PATTERN
    caps_ratio_threshold: float = 0.7
    caps_min_length: int = 20
    comment_max_length: int = 1000
    contact_intent_contexts: frozenset[str] = PUBLIC_CONTEXTS
