from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class UsageStatusResponse(BaseModel):
    user_id: str
    allowed: bool
    reason: str
    remaining: int | None = None
    is_subscribed: bool
    generations_today: int
    generations_total: int
    free_generations_limit: int
    last_used: date
