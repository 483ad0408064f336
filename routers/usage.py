from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path

from app.core.config import Settings, get_settings
from app.db.store import get_usage_store
from schemas.hooks import ErrorResponse
from schemas.usage import UsageStatusResponse
from services.usage_tracker import (
    KeyValueStore,
    UsageDecision,
    UsageState,
    check_generation,
    load_state,
    record_generation,
    save_state,
)

router = APIRouter(tags=["usage"])

UserId = Annotated[str, Path(min_length=1, max_length=128)]


def _status(state: UsageState, decision: UsageDecision) -> UsageStatusResponse:
    return UsageStatusResponse(
        user_id=state.user_id,
        allowed=decision.allowed,
        reason=decision.reason,
        remaining=decision.remaining,
        is_subscribed=state.is_subscribed,
        generations_today=state.generations_today,
        generations_total=state.generations_total,
        free_generations_limit=state.free_generations_limit,
        last_used=state.last_used,
    )


@router.get("/usage/{user_id}", response_model=UsageStatusResponse)
async def get_usage(
    user_id: UserId,
    store: KeyValueStore = Depends(get_usage_store),
    settings: Settings = Depends(get_settings),
) -> UsageStatusResponse:
    state = load_state(store, user_id, date.today(), settings.free_generations_limit)
    save_state(store, state)
    return _status(state, check_generation(state))


@router.post(
    "/usage/{user_id}/generations",
    response_model=UsageStatusResponse,
    responses={403: {"model": ErrorResponse}},
)
async def record_usage(
    user_id: UserId,
    store: KeyValueStore = Depends(get_usage_store),
    settings: Settings = Depends(get_settings),
) -> UsageStatusResponse:
    today = date.today()
    state = load_state(store, user_id, today, settings.free_generations_limit)
    if not check_generation(state).allowed:
        raise HTTPException(
            status_code=403,
            detail=f"Daily limit reached ({state.free_generations_limit} free generations).",
        )

    state = record_generation(state, today)
    save_state(store, state)
    return _status(state, check_generation(state))
