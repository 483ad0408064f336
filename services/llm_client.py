from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import openai
from openai import AsyncOpenAI
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from services.prompt_builder import Prompt

logger = logging.getLogger(__name__)

# Transport failures and non-success statuses; other API errors are not retried.
RETRYABLE_ERRORS = (openai.APIStatusError, openai.APIConnectionError)


class LLMClientError(RuntimeError):
    """Base class for completion failures."""


class ConfigurationError(LLMClientError):
    """Raised when the API credential is missing; no request is attempted."""


class UpstreamUnavailable(LLMClientError):
    """Raised when every attempt failed with a transport error or non-success status."""


class MalformedUpstreamResponse(LLMClientError):
    """Raised when a successful reply lacks the expected completion payload."""


@dataclass(frozen=True)
class ModelParams:
    model: str
    temperature: float = 0.8
    max_tokens: int = 1000
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None

    def request_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        for name in ("top_p", "frequency_penalty", "presence_penalty"):
            value = getattr(self, name)
            if value is not None:
                kwargs[name] = value
        return kwargs


class OpenAIChatClient:
    """Issue chat completions with a fixed-delay retry policy."""

    def __init__(
        self,
        api_key: str | None,
        timeout: float = 30.0,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        client: Any | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._max_attempts = max(1, max_attempts)
        self._retry_delay = retry_delay
        self._client = client
        self._sleep = sleep

    def _get_client(self) -> Any:
        if not self._api_key or not self._api_key.strip():
            raise ConfigurationError("OpenAI API key is not configured.")
        if self._client is None:
            # Retries are handled here, not by the SDK.
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self._timeout, max_retries=0)
        return self._client

    async def complete(self, prompt: Prompt, params: ModelParams) -> str:
        client = self._get_client()
        messages = [
            {"role": "system", "content": prompt.system},
            {"role": "user", "content": prompt.user},
        ]
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_fixed(self._retry_delay),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    response = await client.chat.completions.create(
                        messages=messages,
                        **params.request_kwargs(),
                    )
        except RetryError as exc:
            raise UpstreamUnavailable(
                f"OpenAI request failed after {self._max_attempts} attempts."
            ) from exc.last_attempt.exception()
        except openai.APIError as exc:
            raise MalformedUpstreamResponse(f"OpenAI returned an unusable response: {exc}") from exc
        return self._extract_text(response)

    @staticmethod
    def _extract_text(response: Any) -> str:
        choices = getattr(response, "choices", None)
        if not choices:
            raise MalformedUpstreamResponse("OpenAI returned no choices.")
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise MalformedUpstreamResponse("OpenAI returned empty response.")
        return content
