"""
Content contract: slides, chat messages and the top-level app state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class LayoutType(str, Enum):
    COVER = "cover"
    CONTENT_LEFT = "content-left"
    CONTENT_RIGHT = "content-right"
    QUOTE = "quote"
    CLOSING = "closing"
    VIDEO = "video"

    @classmethod
    def parse(cls, value: Any, default: "LayoutType") -> "LayoutType":
        """Return the matching member, or ``default`` for anything unrecognized."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return default
        return default


# Layouts the generation backend may choose; ``video`` is authored in-system.
GENERATED_LAYOUTS = (
    LayoutType.COVER,
    LayoutType.CONTENT_LEFT,
    LayoutType.CONTENT_RIGHT,
    LayoutType.QUOTE,
    LayoutType.CLOSING,
)


class SlideRecord(BaseModel):
    """One slide's sanitized content and layout selector."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    title: str
    subtitle: str = ""
    bullet_points: Tuple[str, ...] = Field(default=(), alias="bulletPoints")
    visual_prompt: str = Field("", alias="visualPrompt")
    layout_type: LayoutType = Field(LayoutType.CONTENT_LEFT, alias="layoutType")
    video_url: Optional[str] = Field(None, alias="videoUrl")

    @field_validator("layout_type", mode="before")
    @classmethod
    def _normalize_layout(cls, value: Any) -> LayoutType:
        return LayoutType.parse(value, LayoutType.CONTENT_LEFT)

    @model_validator(mode="after")
    def _video_requires_url(self) -> "SlideRecord":
        if self.layout_type is LayoutType.VIDEO and not self.video_url:
            raise ValueError("video slides require a video_url")
        return self


Deck = Tuple[SlideRecord, ...]


class AppState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    READY = "ready"
    ERROR = "error"


class ChatRole(str, Enum):
    USER = "user"
    MODEL = "model"


@dataclass
class ChatMessage:
    role: ChatRole
    text: str

    def append(self, chunk: str) -> None:
        self.text += chunk

    def to_dict(self) -> dict:
        return {"role": self.role.value, "text": self.text}
