from __future__ import annotations

import hashlib
import hmac
import json
import time
from datetime import date
from types import SimpleNamespace

import pytest
import stripe
from fastapi.testclient import TestClient

from app.main import create_app
from services.billing import BillingService
from services.usage_tracker import InMemoryKeyValueStore, UsageState, load_state, save_state

WEBHOOK_SECRET = "whsec_test_secret"
CHECKOUT = "/api/create-checkout"
WEBHOOK = "/api/webhook"


def _signed(payload: dict, secret: str = WEBHOOK_SECRET) -> tuple[bytes, str]:
    body = json.dumps(payload).encode()
    timestamp = int(time.time())
    signed_payload = f"{timestamp}.{body.decode()}".encode()
    signature = hmac.new(secret.encode(), signed_payload, hashlib.sha256).hexdigest()
    return body, f"t={timestamp},v1={signature}"


def _event(event_type: str, obj: dict) -> dict:
    return {
        "id": "evt_test",
        "object": "event",
        "type": event_type,
        "data": {"object": obj},
    }


@pytest.fixture
def stripe_calls(monkeypatch):
    calls: dict[str, list] = {"customer_list": [], "customer_create": [], "session": []}

    def fake_list(**kwargs):
        calls["customer_list"].append(kwargs)
        return SimpleNamespace(data=[])

    def fake_create(**kwargs):
        calls["customer_create"].append(kwargs)
        return SimpleNamespace(id="cus_new")

    def fake_session(**kwargs):
        calls["session"].append(kwargs)
        return SimpleNamespace(id="cs_test_1", url="https://checkout.stripe.com/c/cs_test_1")

    monkeypatch.setattr(stripe.Customer, "list", fake_list)
    monkeypatch.setattr(stripe.Customer, "create", fake_create)
    monkeypatch.setattr(stripe.checkout.Session, "create", fake_session)
    return calls


def test_checkout_creates_customer_and_subscription_session(client, stripe_calls):
    response = client.post(
        CHECKOUT,
        json={"userId": "user-1", "email": "ada@example.com"},
        headers={"Origin": "https://hooks.example.com"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "sessionId": "cs_test_1",
        "url": "https://checkout.stripe.com/c/cs_test_1",
    }
    assert stripe_calls["customer_create"][0]["metadata"] == {"userId": "user-1"}

    params = stripe_calls["session"][0]
    assert params["mode"] == "subscription"
    assert params["customer"] == "cus_new"
    assert params["metadata"] == {"userId": "user-1"}
    assert params["subscription_data"]["trial_period_days"] == 7
    price = params["line_items"][0]["price_data"]
    assert price["unit_amount"] == 100
    assert price["recurring"] == {"interval": "month"}
    assert params["success_url"].startswith("https://hooks.example.com?success=true")
    assert params["cancel_url"] == "https://hooks.example.com?canceled=true"
    assert params["api_key"] == "sk_test_123"


def test_checkout_reuses_existing_customer(client, stripe_calls, monkeypatch):
    monkeypatch.setattr(
        stripe.Customer,
        "list",
        lambda **kwargs: SimpleNamespace(data=[SimpleNamespace(id="cus_existing")]),
    )

    response = client.post(CHECKOUT, json={"userId": "user-1", "email": "ada@example.com"})

    assert response.status_code == 200
    assert stripe_calls["customer_create"] == []
    assert stripe_calls["session"][0]["customer"] == "cus_existing"


def test_checkout_without_email_skips_customer_lookup(client, stripe_calls):
    response = client.post(CHECKOUT, json={"userId": "user-2"})

    assert response.status_code == 200
    assert stripe_calls["customer_list"] == []
    assert "customer" not in stripe_calls["session"][0]


def test_checkout_stripe_failure_is_502(client, monkeypatch):
    def failing(**kwargs):
        raise stripe.StripeError("card network down")

    monkeypatch.setattr(stripe.checkout.Session, "create", failing)

    response = client.post(CHECKOUT, json={"userId": "user-1"})

    assert response.status_code == 502
    assert response.json()["success"] is False


def test_checkout_without_secret_is_500(settings, stripe_calls):
    unconfigured = settings.model_copy(update={"stripe_secret_key": None})

    with TestClient(create_app(unconfigured)) as test_client:
        response = test_client.post(CHECKOUT, json={"userId": "user-1"})

    assert response.status_code == 500
    assert stripe_calls["session"] == []


def test_checkout_requires_user_id(client, stripe_calls):
    response = client.post(CHECKOUT, json={"email": "ada@example.com"})

    assert response.status_code == 400
    assert "userId" in response.json()["error"]


def test_completed_checkout_marks_user_subscribed(app, client):
    body, signature = _signed(
        _event(
            "checkout.session.completed",
            {
                "id": "cs_test_1",
                "customer": "cus_1",
                "subscription": "sub_1",
                "customer_email": "ada@example.com",
                "metadata": {"userId": "user-1"},
            },
        )
    )

    response = client.post(WEBHOOK, content=body, headers={"stripe-signature": signature})

    assert response.status_code == 200
    assert response.json() == {"received": True, "handled": True}
    state = load_state(app.state.usage_store, "user-1", date.today())
    assert state.is_subscribed is True
    assert state.stripe_subscription_id == "sub_1"
    assert state.email == "ada@example.com"


def test_deleted_subscription_marks_user_unsubscribed(app, client):
    store = app.state.usage_store
    save_state(
        store,
        UsageState(
            user_id="user-1",
            last_used=date.today(),
            is_subscribed=True,
            stripe_subscription_id="sub_1",
        ),
    )
    body, signature = _signed(
        _event(
            "customer.subscription.deleted",
            {"id": "sub_1", "object": "subscription", "metadata": {"userId": "user-1"}},
        )
    )

    response = client.post(WEBHOOK, content=body, headers={"stripe-signature": signature})

    assert response.status_code == 200
    state = load_state(store, "user-1", date.today())
    assert state.is_subscribed is False
    assert state.stripe_subscription_id is None


def test_unhandled_event_is_acknowledged(client):
    body, signature = _signed(_event("customer.created", {"id": "cus_1"}))

    response = client.post(WEBHOOK, content=body, headers={"stripe-signature": signature})

    assert response.status_code == 200
    assert response.json() == {"received": True, "handled": False}


@pytest.mark.parametrize("header", [None, "t=1,v1=deadbeef", "garbage"])
def test_bad_signature_is_rejected_before_handling(client, monkeypatch, header):
    handled = []
    monkeypatch.setattr(BillingService, "handle_event", lambda self, *args: handled.append(args))
    body, _ = _signed(_event("checkout.session.completed", {"metadata": {"userId": "user-1"}}))
    headers = {"stripe-signature": header} if header else {}

    response = client.post(WEBHOOK, content=body, headers=headers)

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert handled == []


def test_signature_from_other_secret_is_rejected(client):
    body, signature = _signed(_event("customer.created", {}), secret="whsec_other")

    response = client.post(WEBHOOK, content=body, headers={"stripe-signature": signature})

    assert response.status_code == 400


def test_webhook_without_secret_is_500(settings):
    unconfigured = settings.model_copy(update={"stripe_webhook_secret": None})
    body, signature = _signed(_event("customer.created", {}))

    with TestClient(create_app(unconfigured)) as test_client:
        response = test_client.post(WEBHOOK, content=body, headers={"stripe-signature": signature})

    assert response.status_code == 500


def test_handle_event_without_user_metadata_leaves_store_untouched():
    store = InMemoryKeyValueStore()
    service = BillingService("sk_test_123", WEBHOOK_SECRET)

    handled = service.handle_event(
        _event("checkout.session.completed", {"id": "cs_1", "metadata": {}}),
        store,
        date(2026, 1, 5),
    )

    assert handled is True
    assert store.get("hookUserData:") is None
