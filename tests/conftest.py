"""Global test configuration and fixtures."""

import json
import os

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["LOG_FORMAT"] = "console"
os.environ["LOG_LEVEL"] = "WARNING"

from pitchdeck.domain.profile import PRESTIGE_FOODS
from pitchdeck.domain.sanitization import SlideSanitizer
from pitchdeck.infra.config.settings import Settings

from tests._helpers.fakes import FakeLLM


def make_settings(**overrides) -> Settings:
    values = {
        "OPENAI_API_KEY": "sk-test-key",
        "AUTOPLAY_INTERVAL": 5.0,
        "LOADING_CAPTION_INTERVAL": 2.5,
        "LOG_FORMAT": "console",
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def settings_without_key():
    return make_settings(OPENAI_API_KEY=None)


@pytest.fixture
def sample_records():
    """Three well-formed backend records."""
    return [
        {
            "id": 1,
            "title": "Prestige Foods",
            "subtitle": "El sabor de Colombia",
            "bulletPoints": [],
            "visualPrompt": "moody tropical fruit dark background",
            "layoutType": "cover",
        },
        {
            "id": 2,
            "title": "Origen",
            "subtitle": "Altura y sol",
            "bulletPoints": ["Lulo", "Gulupa", "Guanábana"],
            "visualPrompt": "colombian highlands farm",
            "layoutType": "content-left",
        },
        {
            "id": 3,
            "title": "La pureza no se negocia",
            "subtitle": "Director de Calidad",
            "bulletPoints": [],
            "visualPrompt": "luxury glass bottle",
            "layoutType": "quote",
        },
    ]


@pytest.fixture
def sample_response(sample_records):
    return json.dumps({"slides": sample_records})


@pytest.fixture
def sample_deck(sample_records):
    return SlideSanitizer(PRESTIGE_FOODS).build_deck(sample_records)


@pytest.fixture
def fake_llm(sample_response):
    return FakeLLM(text=sample_response, chunks=["Hola", " amigo"])
