from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from services.prompt_builder import GenerationMethod


class GenerateHooksRequest(BaseModel):
    method: str = Field(min_length=1, max_length=64)
    data: dict[str, Any] = Field(default_factory=dict)


class GenerateHooksResponse(BaseModel):
    success: bool = True
    hooks: list[str] = Field(min_length=1, max_length=20)
    method: GenerationMethod
    timestamp: datetime
    degraded: bool = False


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
