"""
Coercion of untrusted generation output into the slide content contract.

The backend answers with text shaped like JSON; nothing in it is trusted.
Every field of every record is coerced here, so the renderer only ever sees
strings, integers and tuples of strings.
"""

import math
from typing import Any, Iterable, List, Mapping, Sequence

from pitchdeck.domain.profile import PresentationProfile
from pitchdeck.domain.slide import (
    GENERATED_LAYOUTS,
    Deck,
    LayoutType,
    SlideRecord,
)


def coerce_id(value: Any, fallback: int) -> int:
    """Numeric coercion; non-numeric, non-finite or zero ids use ``fallback``."""
    if isinstance(value, bool) or value is None:
        return fallback
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return fallback
    if not math.isfinite(number) or int(number) == 0:
        return fallback
    return int(number)


def coerce_text(value: Any, default: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _leaf_text(value: Any) -> Iterable[str]:
    if value is None:
        return
    if isinstance(value, str):
        yield value
    elif isinstance(value, (bool, int, float)):
        yield str(value)
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from _leaf_text(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _leaf_text(item)


def coerce_bullets(value: Any, default: Sequence[str]) -> tuple:
    if not isinstance(value, list):
        return tuple(default)
    bullets: List[str] = []
    for item in value:
        text = " ".join(part.strip() for part in _leaf_text(item) if part.strip())
        if text:
            bullets.append(text)
    return tuple(bullets)


def coerce_layout(value: Any) -> LayoutType:
    layout = LayoutType.parse(value, LayoutType.CONTENT_LEFT)
    return layout if layout in GENERATED_LAYOUTS else LayoutType.CONTENT_LEFT


class SlideSanitizer:
    """Builds slide records from raw backend records using profile defaults."""

    def __init__(self, profile: PresentationProfile):
        self.profile = profile

    def sanitize_record(self, raw: Any, index: int) -> SlideRecord:
        item = raw if isinstance(raw, Mapping) else {}
        p = self.profile
        return SlideRecord(
            id=coerce_id(item.get("id"), index + 1),
            title=coerce_text(item.get("title"), p.default_title),
            subtitle=coerce_text(item.get("subtitle"), p.default_subtitle),
            bullet_points=coerce_bullets(
                item.get("bulletPoints"), p.default_bullet_points
            ),
            visual_prompt=coerce_text(
                item.get("visualPrompt"), p.default_visual_prompt
            ),
            layout_type=coerce_layout(item.get("layoutType")),
        )

    def closing_video_slide(self) -> SlideRecord:
        video = self.profile.closing_video
        return SlideRecord(
            id=video.id,
            title=video.title,
            subtitle=video.subtitle,
            bullet_points=video.bullet_points,
            visual_prompt=video.visual_prompt,
            layout_type=LayoutType.VIDEO,
            video_url=video.video_url,
        )

    def build_deck(self, records: Sequence[Any]) -> Deck:
        """Sanitize every record and append the closing video slide."""
        slides = [self.sanitize_record(raw, i) for i, raw in enumerate(records)]
        slides.append(self.closing_video_slide())
        return tuple(slides)
