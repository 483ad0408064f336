from __future__ import annotations

import random
from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from services.fallback_hooks import FallbackHookGenerator
from services.hook_generator import HookGeneratorService
from services.llm_client import ModelParams
from services.prompt_builder import Prompt

WEBHOOK_SECRET = "whsec_test_secret"  # mirrored in test_billing

BRIEF_FIELDS = {
    "content_type": "blog_post",
    "platform": "LinkedIn",
    "goal": "drive signups",
    "topic": "remote onboarding",
}

NUMBERED_REPLY = "1. Hook one\n2. Hook two\n3. Hook three"


class StubCompletionClient:
    """Stands in for the OpenAI client; returns a fixed reply or raises."""

    def __init__(self, content: str = NUMBERED_REPLY, error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.calls: list[tuple[Prompt, ModelParams]] = []

    async def complete(self, prompt: Prompt, params: ModelParams) -> str:
        self.calls.append((prompt, params))
        if self.error is not None:
            raise self.error
        return self.content


@pytest.fixture
def stub_client_cls() -> type[StubCompletionClient]:
    return StubCompletionClient


@pytest.fixture
def brief_fields() -> dict[str, str]:
    return dict(BRIEF_FIELDS)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        openai_api_key=None,
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret=WEBHOOK_SECRET,
        fallback_seed=7,
        llm_retry_delay_seconds=0,
        rate_limit="1000/minute",
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_generator():
    def _make(llm_client, **kwargs) -> HookGeneratorService:
        kwargs.setdefault("fallback", FallbackHookGenerator(random.Random(3)))
        return HookGeneratorService(llm_client, **kwargs)

    return _make
