from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, replace
from datetime import date
from typing import Protocol

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "hookUserData:"
DEFAULT_FREE_LIMIT = 5


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store; contents are lost on restart."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


@dataclass(frozen=True)
class UsageState:
    user_id: str
    last_used: date
    email: str = ""
    is_subscribed: bool = False
    generations_today: int = 0
    generations_total: int = 0
    free_generations_limit: int = DEFAULT_FREE_LIMIT
    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None

    def to_json(self) -> str:
        payload = asdict(self)
        payload["last_used"] = self.last_used.isoformat()
        return json.dumps(payload)

    @classmethod
    def from_json(cls, raw: str) -> UsageState:
        payload = json.loads(raw)
        payload["last_used"] = date.fromisoformat(payload["last_used"])
        return cls(**payload)


@dataclass(frozen=True)
class UsageDecision:
    allowed: bool
    reason: str
    remaining: int | None = None


def _key(user_id: str) -> str:
    return f"{STORAGE_PREFIX}{user_id}"


def load_state(
    store: KeyValueStore,
    user_id: str,
    today: date,
    free_limit: int = DEFAULT_FREE_LIMIT,
) -> UsageState:
    """Return the stored state, starting a free trial for unknown users.

    The daily counter is reset when the state was last used on another day.
    """
    raw = store.get(_key(user_id))
    if raw is None:
        return UsageState(user_id=user_id, last_used=today, free_generations_limit=free_limit)

    try:
        state = UsageState.from_json(raw)
    except (ValueError, TypeError, KeyError):
        logger.warning("Discarding unreadable usage state for %s", user_id)
        return UsageState(user_id=user_id, last_used=today, free_generations_limit=free_limit)

    if state.last_used != today:
        state = replace(state, generations_today=0, last_used=today)
    return state


def save_state(store: KeyValueStore, state: UsageState) -> None:
    store.set(_key(state.user_id), state.to_json())


def check_generation(state: UsageState) -> UsageDecision:
    if state.is_subscribed:
        return UsageDecision(allowed=True, reason="subscribed")
    remaining = state.free_generations_limit - state.generations_today
    if remaining > 0:
        return UsageDecision(allowed=True, reason="free_trial", remaining=remaining)
    return UsageDecision(allowed=False, reason="limit_reached", remaining=0)


def record_generation(state: UsageState, today: date) -> UsageState:
    generations_today = state.generations_today if state.last_used == today else 0
    return replace(
        state,
        generations_today=generations_today + 1,
        generations_total=state.generations_total + 1,
        last_used=today,
    )


def mark_subscribed(
    state: UsageState,
    customer_id: str | None = None,
    subscription_id: str | None = None,
    email: str | None = None,
) -> UsageState:
    return replace(
        state,
        is_subscribed=True,
        stripe_customer_id=customer_id or state.stripe_customer_id,
        stripe_subscription_id=subscription_id or state.stripe_subscription_id,
        email=email or state.email,
    )


def mark_unsubscribed(state: UsageState) -> UsageState:
    return replace(state, is_subscribed=False, stripe_subscription_id=None)
