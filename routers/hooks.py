from __future__ import annotations

import random
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response

from app.core.config import Settings, get_settings
from schemas.hooks import ErrorResponse, GenerateHooksRequest, GenerateHooksResponse
from services.fallback_hooks import FallbackHookGenerator
from services.hook_generator import HookGeneratorService, get_profile
from services.llm_client import ConfigurationError, OpenAIChatClient
from services.prompt_builder import PromptBuildError

router = APIRouter(tags=["hooks"])


def get_hook_generator(settings: Settings = Depends(get_settings)) -> HookGeneratorService:
    llm_client = OpenAIChatClient(
        api_key=settings.openai_api_key,
        timeout=settings.openai_timeout_seconds,
        max_attempts=settings.llm_max_attempts,
        retry_delay=settings.llm_retry_delay_seconds,
    )
    rng = random.Random(settings.fallback_seed) if settings.fallback_seed is not None else None
    return HookGeneratorService(
        llm_client,
        fallback=FallbackHookGenerator(rng),
        profile=get_profile(settings.prompt_variant, settings.openai_model),
        strict_configuration=settings.require_llm_credential,
        max_input_chars=settings.max_input_chars,
    )


@router.options("/generate-hooks", include_in_schema=False)
async def generate_hooks_preflight() -> Response:
    return Response(status_code=200)


@router.post(
    "/generate-hooks",
    response_model=GenerateHooksResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_hooks(
    payload: GenerateHooksRequest,
    service: HookGeneratorService = Depends(get_hook_generator),
) -> GenerateHooksResponse:
    try:
        outcome = await service.generate(payload.method, payload.data)
    except PromptBuildError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=500,
            detail="API configuration error. Please add your OpenAI API key.",
        ) from exc

    return GenerateHooksResponse(
        hooks=outcome.hooks,
        method=outcome.method,
        timestamp=datetime.now(timezone.utc),
        degraded=outcome.degraded,
    )
