from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from services.prompt_builder import PromptVariant

Environment = Literal["development", "production", "staging", "test"]


def _resolve_env_files() -> tuple[str, ...]:
    env = os.getenv("HOOKGEN_ENVIRONMENT", "development").lower()
    if env in {"prod", "production"}:
        return (".env", ".env.prod")
    if env in {"dev", "development"}:
        return (".env", ".env.dev")
    if env in {"test", "testing"}:
        return (".env", ".env.test")
    return (".env",)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HOOKGEN_",
        env_file=_resolve_env_files(),
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    environment: Environment = "development"
    project_name: str = "Hook & Headlines Generator"
    api_prefix: str = "/api"
    log_level: str = "INFO"
    log_json: bool = False
    rate_limit: str = "60/minute"
    allowed_hosts: list[str] = ["*"]
    cors_origins: list[str] = []
    enable_docs: bool = True

    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("HOOKGEN_OPENAI_API_KEY", "OPENAI_API_KEY", "openai_api_key"),
    )
    openai_model: str | None = None
    openai_timeout_seconds: float = 30.0
    prompt_variant: PromptVariant = PromptVariant.standard
    llm_max_attempts: int = Field(default=3, ge=1, le=10)
    llm_retry_delay_seconds: float = Field(default=1.0, ge=0.0)
    require_llm_credential: bool = False
    max_input_chars: int = Field(default=2000, ge=100, le=5000)
    fallback_seed: int | None = None

    stripe_secret_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("HOOKGEN_STRIPE_SECRET_KEY", "STRIPE_SECRET_KEY", "stripe_secret_key"),
    )
    stripe_webhook_secret: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "HOOKGEN_STRIPE_WEBHOOK_SECRET", "STRIPE_WEBHOOK_SECRET", "stripe_webhook_secret"
        ),
    )
    public_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("HOOKGEN_PUBLIC_BASE_URL", "VERCEL_URL", "public_base_url"),
    )
    subscription_price_cents: int = 100
    subscription_currency: str = "usd"
    subscription_trial_days: int = 7
    subscription_product_name: str = "Hook & Headlines Generator Pro"

    free_generations_limit: int = Field(default=5, ge=0)


@lru_cache
def get_settings() -> Settings:
    return Settings()
