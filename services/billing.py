from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any

import stripe

from services.usage_tracker import (
    DEFAULT_FREE_LIMIT,
    KeyValueStore,
    load_state,
    mark_subscribed,
    mark_unsubscribed,
    save_state,
)

logger = logging.getLogger(__name__)


class BillingError(RuntimeError):
    """Base class for billing failures."""


class BillingConfigurationError(BillingError):
    """Raised when a required Stripe secret is not configured."""


class CheckoutError(BillingError):
    """Raised when Stripe rejects a customer or checkout session request."""


class SignatureVerificationFailed(BillingError):
    """Raised when a webhook payload does not match its signature header."""


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    url: str | None


@dataclass(frozen=True)
class SubscriptionPlan:
    product_name: str = "Hook & Headlines Generator Pro"
    description: str = "Unlimited hook generations + premium features"
    unit_amount: int = 100
    currency: str = "usd"
    interval: str = "month"
    trial_period_days: int = 7


class BillingService:
    """Create subscription checkouts and apply Stripe webhook events."""

    def __init__(
        self,
        secret_key: str | None,
        webhook_secret: str | None = None,
        plan: SubscriptionPlan | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._plan = plan or SubscriptionPlan()

    def _api_key(self) -> str:
        if not self._secret_key:
            raise BillingConfigurationError("Stripe secret key is not configured.")
        return self._secret_key

    def _find_or_create_customer(self, api_key: str, user_id: str, email: str) -> Any:
        existing = stripe.Customer.list(email=email, limit=1, api_key=api_key)
        if existing.data:
            return existing.data[0]
        return stripe.Customer.create(email=email, metadata={"userId": user_id}, api_key=api_key)

    def create_checkout_session(
        self,
        user_id: str,
        email: str | None,
        base_url: str,
    ) -> CheckoutSession:
        api_key = self._api_key()
        plan = self._plan
        try:
            customer = self._find_or_create_customer(api_key, user_id, email) if email else None
            params: dict[str, Any] = {
                "payment_method_types": ["card"],
                "line_items": [
                    {
                        "price_data": {
                            "currency": plan.currency,
                            "product_data": {
                                "name": plan.product_name,
                                "description": plan.description,
                            },
                            "unit_amount": plan.unit_amount,
                            "recurring": {"interval": plan.interval},
                        },
                        "quantity": 1,
                    }
                ],
                "mode": "subscription",
                "success_url": f"{base_url}?success=true&session_id={{CHECKOUT_SESSION_ID}}",
                "cancel_url": f"{base_url}?canceled=true",
                "metadata": {"userId": user_id},
                "allow_promotion_codes": True,
                "billing_address_collection": "auto",
                "subscription_data": {"metadata": {"userId": user_id}},
            }
            if plan.trial_period_days > 0:
                params["subscription_data"]["trial_period_days"] = plan.trial_period_days
            if customer is not None:
                params["customer"] = customer.id
            session = stripe.checkout.Session.create(api_key=api_key, **params)
        except stripe.StripeError as exc:
            raise CheckoutError("Failed to create checkout session.") from exc

        logger.info("Created checkout session %s for user %s", session.id, user_id)
        return CheckoutSession(session_id=session.id, url=session.url)

    def construct_event(self, payload: bytes, signature: str | None) -> Any:
        if not self._webhook_secret:
            raise BillingConfigurationError("Stripe webhook secret is not configured.")
        if not signature:
            raise SignatureVerificationFailed("Missing Stripe-Signature header.")
        try:
            return stripe.Webhook.construct_event(payload, signature, self._webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as exc:
            raise SignatureVerificationFailed("Webhook signature verification failed.") from exc

    def handle_event(
        self,
        event: Any,
        store: KeyValueStore,
        today: date,
        free_limit: int = DEFAULT_FREE_LIMIT,
    ) -> bool:
        """Apply a verified event to stored usage state; returns False for unhandled types."""
        event_type = event["type"]
        obj = event["data"]["object"]

        if event_type == "checkout.session.completed":
            user_id = _metadata_user_id(obj)
            if not user_id:
                logger.warning("Checkout session %s has no userId metadata", obj.get("id"))
                return True
            state = load_state(store, user_id, today, free_limit)
            save_state(
                store,
                mark_subscribed(
                    state,
                    customer_id=obj.get("customer"),
                    subscription_id=obj.get("subscription"),
                    email=obj.get("customer_email"),
                ),
            )
            logger.info("User %s subscribed (subscription %s)", user_id, obj.get("subscription"))
        elif event_type == "invoice.payment_succeeded":
            logger.info("Payment succeeded for subscription %s", obj.get("subscription"))
        elif event_type == "invoice.payment_failed":
            logger.warning("Payment failed for subscription %s", obj.get("subscription"))
        elif event_type == "customer.subscription.deleted":
            user_id = _metadata_user_id(obj)
            if not user_id:
                logger.warning("Canceled subscription %s has no userId metadata", obj.get("id"))
                return True
            save_state(store, mark_unsubscribed(load_state(store, user_id, today, free_limit)))
            logger.info("Subscription canceled for user %s", user_id)
        else:
            logger.info("Unhandled event type %s", event_type)
            return False
        return True


def _metadata_user_id(obj: Any) -> str | None:
    metadata = obj.get("metadata") or {}
    user_id = metadata.get("userId")
    return str(user_id) if user_id else None
