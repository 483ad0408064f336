from __future__ import annotations

import logging
import re
from typing import Any, Mapping

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 2000

_SCRIPT_TAG = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_JAVASCRIPT_SCHEME = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"\bon\w+\s*=", re.IGNORECASE)

# Legacy client spellings mapped onto canonical field names.
FIELD_ALIASES = {
    "contentType": "content_type",
    "rawIdea": "raw_idea",
    "draftHeadline": "draft_headline",
    "currentDraft": "draft_headline",
    "current_draft": "draft_headline",
    "optimizationGoal": "optimization_goal",
    "contentPiece": "content_piece",
    "contentFormat": "content_format",
    "checkboxes": "styles",
}


def _strip_patterns(value: str) -> str:
    # Removing one match can splice together a new one, e.g. "javajavascript:script:".
    while True:
        cleaned = _SCRIPT_TAG.sub("", value)
        cleaned = _JAVASCRIPT_SCHEME.sub("", cleaned)
        cleaned = _EVENT_HANDLER.sub("", cleaned)
        if cleaned == value:
            return cleaned
        value = cleaned


def sanitize_text(value: str, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Best-effort XSS and length guard for a single free-text value.

    The value is cut to ``max_chars`` before any pattern matching so the regex
    work stays bounded. Idempotent: ``sanitize_text(sanitize_text(x)) == sanitize_text(x)``.
    """
    if len(value) > max_chars:
        logger.debug("Truncating field from %s to %s chars", len(value), max_chars)
        value = value[:max_chars]
    return _strip_patterns(value).strip()


def normalize_field_name(name: str) -> str:
    if name in FIELD_ALIASES:
        return FIELD_ALIASES[name]
    normalized = name.strip().replace("-", "_")
    return FIELD_ALIASES.get(normalized, normalized)


def sanitize_fields(
    fields: Mapping[str, Any],
    max_chars: int = DEFAULT_MAX_CHARS,
) -> dict[str, str | list[str]]:
    sanitized: dict[str, str | list[str]] = {}
    for key, value in fields.items():
        name = normalize_field_name(str(key))
        if isinstance(value, str):
            sanitized[name] = sanitize_text(value, max_chars)
        elif isinstance(value, (list, tuple)):
            items = [sanitize_text(item, max_chars) for item in value if isinstance(item, str)]
            sanitized[name] = [item for item in items if item]
        else:
            logger.debug("Dropping non-text field %s", name)
    return sanitized
