"""
Request and response schemas for the HTTP API.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Uniform error body."""

    error: str = Field(..., description="Stable error code")
    detail: str = Field(..., description="Human-readable message")
    timestamp: datetime


class DeckView(BaseModel):
    current_index: int = Field(..., ge=0)
    total: int = Field(..., ge=1)
    is_playing: bool
    is_fullscreen: bool


class AppSnapshot(BaseModel):
    state: str
    error: Optional[str] = None
    caption: Optional[str] = None
    deck: Optional[DeckView] = None


class FullscreenReport(BaseModel):
    active: bool = Field(..., description="Whether the platform entered fullscreen")


class KeyResult(BaseModel):
    handled: bool
    deck: DeckView


class ChatRequest(BaseModel):
    text: str = Field(..., max_length=4000)


class ChatMessageOut(BaseModel):
    role: str
    text: str


class ChatHistory(BaseModel):
    messages: List[ChatMessageOut]
    is_loading: bool = False


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    api_key_configured: bool
