from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping, Protocol

from services.fallback_hooks import FallbackHookGenerator
from services.hook_parser import DEFAULT_META_PHRASES, parse_hooks
from services.llm_client import (
    ConfigurationError,
    MalformedUpstreamResponse,
    ModelParams,
    UpstreamUnavailable,
)
from services.prompt_builder import (
    HOOK_COUNTS,
    GenerationMethod,
    Prompt,
    PromptVariant,
    build_prompt,
    parse_method,
)
from services.sanitizer import DEFAULT_MAX_CHARS, sanitize_fields

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    async def complete(self, prompt: Prompt, params: ModelParams) -> str: ...


@dataclass(frozen=True)
class GenerationProfile:
    variant: PromptVariant
    params: ModelParams
    hook_count: int
    min_numbered_length: int = 10
    min_line_length: int = 20
    meta_phrases: tuple[str, ...] = DEFAULT_META_PHRASES


PROFILES: dict[PromptVariant, GenerationProfile] = {
    PromptVariant.concise: GenerationProfile(
        variant=PromptVariant.concise,
        params=ModelParams(
            model="gpt-4-turbo-preview",
            max_tokens=800,
            top_p=0.9,
            frequency_penalty=0.3,
            presence_penalty=0.3,
        ),
        hook_count=HOOK_COUNTS[PromptVariant.concise],
    ),
    PromptVariant.standard: GenerationProfile(
        variant=PromptVariant.standard,
        params=ModelParams(model="gpt-3.5-turbo", max_tokens=1000),
        hook_count=HOOK_COUNTS[PromptVariant.standard],
    ),
    PromptVariant.advanced: GenerationProfile(
        variant=PromptVariant.advanced,
        params=ModelParams(model="gpt-4", max_tokens=1200, top_p=0.9),
        hook_count=HOOK_COUNTS[PromptVariant.advanced],
        min_numbered_length=15,
        min_line_length=25,
        meta_phrases=(*DEFAULT_META_PHRASES, "framework"),
    ),
}


def get_profile(variant: PromptVariant, model: str | None = None) -> GenerationProfile:
    profile = PROFILES[variant]
    if model:
        return replace(profile, params=replace(profile.params, model=model))
    return profile


@dataclass(frozen=True)
class GenerationOutcome:
    method: GenerationMethod
    hooks: list[str]
    degraded: bool


class HookGeneratorService:
    """Turn a generation request into hooks, degrading to stock hooks on model failure."""

    def __init__(
        self,
        llm_client: CompletionClient,
        fallback: FallbackHookGenerator | None = None,
        profile: GenerationProfile = PROFILES[PromptVariant.standard],
        strict_configuration: bool = False,
        max_input_chars: int = DEFAULT_MAX_CHARS,
    ) -> None:
        self._llm_client = llm_client
        self._fallback = fallback or FallbackHookGenerator()
        self._profile = profile
        self._strict_configuration = strict_configuration
        self._max_input_chars = max_input_chars

    async def generate(
        self,
        method: GenerationMethod | str,
        raw_fields: Mapping[str, Any],
    ) -> GenerationOutcome:
        resolved = parse_method(method)
        fields = sanitize_fields(raw_fields, self._max_input_chars)
        prompt = build_prompt(resolved, fields, self._profile.variant)

        try:
            content = await self._llm_client.complete(prompt, self._profile.params)
        except ConfigurationError:
            if self._strict_configuration:
                raise
            logger.warning("OpenAI API key not found, using fallback hooks")
            return self._fallback_outcome(resolved, fields)
        except (UpstreamUnavailable, MalformedUpstreamResponse) as exc:
            logger.warning("Hook generation for %s degraded to fallback: %s", resolved.value, exc)
            return self._fallback_outcome(resolved, fields)
        except Exception:  # noqa: BLE001 - any completion failure still yields fallback hooks
            logger.exception("Unexpected completion failure for %s; using fallback hooks", resolved.value)
            return self._fallback_outcome(resolved, fields)

        used_fallback = False

        def fallback() -> list[str]:
            nonlocal used_fallback
            used_fallback = True
            return self._fallback.generate(resolved, fields)

        hooks = parse_hooks(
            content,
            self._profile.hook_count,
            min_numbered_length=self._profile.min_numbered_length,
            min_line_length=self._profile.min_line_length,
            meta_phrases=self._profile.meta_phrases,
            fallback=fallback,
        )
        return GenerationOutcome(method=resolved, hooks=hooks, degraded=used_fallback)

    def _fallback_outcome(
        self,
        method: GenerationMethod,
        fields: Mapping[str, Any],
    ) -> GenerationOutcome:
        hooks = self._fallback.generate(method, fields)[: self._profile.hook_count]
        return GenerationOutcome(method=method, hooks=hooks, degraded=True)
