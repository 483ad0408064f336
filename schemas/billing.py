from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1, max_length=128)
    email: str | None = Field(default=None, max_length=254)


class CheckoutResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    url: str | None = None


class WebhookResponse(BaseModel):
    received: bool = True
    handled: bool = True
