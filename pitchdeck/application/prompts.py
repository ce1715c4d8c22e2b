"""
Prompt construction and structured-output schema for deck generation.
"""

from typing import Any, Dict

from pitchdeck.domain.profile import PresentationProfile
from pitchdeck.domain.slide import GENERATED_LAYOUTS


def slide_array_schema() -> Dict[str, Any]:
    """JSON schema for the generation response.

    OpenAI structured output needs an object root, so the slide array is
    wrapped in ``{"slides": [...]}``.
    """
    slide = {
        "type": "object",
        "properties": {
            "id": {"type": "integer"},
            "title": {"type": "string"},
            "subtitle": {"type": "string"},
            "bulletPoints": {"type": "array", "items": {"type": "string"}},
            "visualPrompt": {
                "type": "string",
                "description": "English stock-photography keywords",
            },
            "layoutType": {
                "type": "string",
                "enum": [layout.value for layout in GENERATED_LAYOUTS],
            },
        },
        "required": [
            "id",
            "title",
            "subtitle",
            "bulletPoints",
            "visualPrompt",
            "layoutType",
        ],
        "additionalProperties": False,
    }
    return {
        "type": "object",
        "properties": {"slides": {"type": "array", "items": slide}},
        "required": ["slides"],
        "additionalProperties": False,
    }


def response_format() -> Dict[str, Any]:
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "presentation",
            "strict": True,
            "schema": slide_array_schema(),
        },
    }


def deck_prompt(profile: PresentationProfile) -> str:
    return profile.user_prompt.format(slide_count=profile.slide_count)
