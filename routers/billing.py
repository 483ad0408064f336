from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from app.core.config import Settings, get_settings
from app.db.store import get_usage_store
from schemas.billing import CheckoutRequest, CheckoutResponse, WebhookResponse
from schemas.hooks import ErrorResponse
from services.billing import (
    BillingConfigurationError,
    BillingService,
    CheckoutError,
    SignatureVerificationFailed,
    SubscriptionPlan,
)
from services.usage_tracker import KeyValueStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["billing"])


def get_billing_service(settings: Settings = Depends(get_settings)) -> BillingService:
    return BillingService(
        secret_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
        plan=SubscriptionPlan(
            product_name=settings.subscription_product_name,
            unit_amount=settings.subscription_price_cents,
            currency=settings.subscription_currency,
            trial_period_days=settings.subscription_trial_days,
        ),
    )


def _redirect_base(request: Request, settings: Settings) -> str:
    origin = request.headers.get("origin") or settings.public_base_url
    if not origin:
        return str(request.base_url).rstrip("/")
    if not origin.startswith(("http://", "https://")):
        origin = f"https://{origin}"
    return origin.rstrip("/")


@router.post(
    "/create-checkout",
    response_model=CheckoutResponse,
    responses={500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def create_checkout(
    payload: CheckoutRequest,
    request: Request,
    service: BillingService = Depends(get_billing_service),
    settings: Settings = Depends(get_settings),
) -> CheckoutResponse:
    try:
        session = await run_in_threadpool(
            service.create_checkout_session,
            payload.user_id,
            payload.email,
            _redirect_base(request, settings),
        )
    except BillingConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except CheckoutError as exc:
        logger.warning("Stripe checkout failed for %s: %s", payload.user_id, exc.__cause__)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return CheckoutResponse(session_id=session.session_id, url=session.url)


@router.post(
    "/webhook",
    response_model=WebhookResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def stripe_webhook(
    request: Request,
    service: BillingService = Depends(get_billing_service),
    store: KeyValueStore = Depends(get_usage_store),
    settings: Settings = Depends(get_settings),
) -> WebhookResponse:
    payload = await request.body()
    try:
        event = service.construct_event(payload, request.headers.get("stripe-signature"))
    except SignatureVerificationFailed as exc:
        logger.warning("Rejected webhook: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except BillingConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    handled = service.handle_event(event, store, date.today(), settings.free_generations_limit)
    return WebhookResponse(handled=handled)
