from __future__ import annotations

import logging
import re
from typing import Callable, Iterable

from services.fallback_hooks import DEFAULT_HOOKS

logger = logging.getLogger(__name__)

MAX_HOOKS = 20
PRIMARY_TIER_TARGET = 5
DEFAULT_META_PHRASES = ("here are", "hook")

_NUMBERED_LINE = re.compile(r"^\d+[.:\-)]\s")
_ENUMERATOR = re.compile(r"^\d+[.:\-)]\s*")
_BULLET = re.compile(r"^[•\-*]\s*")
_QUOTE_PAIRS = {'"': '"', "'": "'", "“": "”", "‘": "’"}


def _unquote(text: str) -> str:
    if len(text) >= 2 and _QUOTE_PAIRS.get(text[0]) == text[-1]:
        return text[1:-1].strip()
    return text


def _is_header(line: str) -> bool:
    # Caseless lines (digits, punctuation) count too.
    return line == line.upper()


def numbered_hooks(lines: Iterable[str], max_count: int, min_length: int) -> list[str]:
    hooks: list[str] = []
    for line in lines:
        if not _NUMBERED_LINE.match(line) or len(line) <= min_length:
            continue
        hook = _unquote(_ENUMERATOR.sub("", line).strip())
        if hook:
            hooks.append(hook)
        if len(hooks) >= max_count:
            break
    return hooks


def loose_hooks(
    lines: Iterable[str],
    max_count: int,
    min_length: int,
    meta_phrases: Iterable[str],
) -> list[str]:
    phrases = tuple(phrase.lower() for phrase in meta_phrases)
    hooks: list[str] = []
    for line in lines:
        if len(line) <= min_length or _is_header(line):
            continue
        lowered = line.lower()
        if any(phrase in lowered for phrase in phrases):
            continue
        hook = _unquote(_BULLET.sub("", _ENUMERATOR.sub("", line)).strip())
        if hook:
            hooks.append(hook)
        if len(hooks) >= max_count:
            break
    return hooks


def parse_hooks(
    raw: str,
    max_count: int = 10,
    *,
    min_numbered_length: int = 10,
    min_line_length: int = 20,
    meta_phrases: Iterable[str] = DEFAULT_META_PHRASES,
    fallback: Callable[[], list[str]] | None = None,
) -> list[str]:
    """Extract up to ``max_count`` hooks from free-form model output.

    Numbered lines are preferred. When fewer than five survive, any long,
    non-meta, non-header line is considered and the larger list wins. If
    nothing qualifies the ``fallback`` list is returned, so the result is
    never empty. This function never raises.
    """
    limit = min(max(int(max_count), 1), MAX_HOOKS)
    try:
        lines = [line.strip() for line in (raw or "").splitlines() if line.strip()]
        hooks = numbered_hooks(lines, limit, min_numbered_length)
        if len(hooks) < PRIMARY_TIER_TARGET:
            loose = loose_hooks(lines, limit, min_line_length, meta_phrases)
            if len(loose) > len(hooks):
                logger.debug("Using loose line parsing (%s numbered, %s loose)", len(hooks), len(loose))
                hooks = loose
        if hooks:
            return hooks
        logger.warning("No hooks found in model output; using fallback hooks")
    except Exception:  # noqa: BLE001 - parsing must always recover with a fallback list
        logger.exception("Hook parsing failed; using fallback hooks")

    try:
        fallback_hooks = fallback() if fallback is not None else list(DEFAULT_HOOKS)
    except Exception:  # noqa: BLE001 - same recovery guarantee for the fallback source
        logger.exception("Fallback hook source failed; using default hooks")
        fallback_hooks = []
    return [hook for hook in fallback_hooks if hook][:limit] or list(DEFAULT_HOOKS[:limit])
