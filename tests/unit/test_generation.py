"""
Unit tests for the generation client.
"""

import json

import pytest

from pitchdeck.application.generation import GenerationClient, parse_slide_records
from pitchdeck.domain.exceptions import ConfigurationError, GenerationError
from pitchdeck.domain.slide import LayoutType
from pitchdeck.infra.llm.langchain_client import build_llm_client

from tests._helpers.fakes import FakeLLM, llm_factory


class TestParseSlideRecords:
    def test_object_wrapper(self):
        assert parse_slide_records('{"slides": [{"id": 1}]}') == [{"id": 1}]

    def test_bare_array(self):
        assert parse_slide_records('[{"id": 1}, {"id": 2}]') == [{"id": 1}, {"id": 2}]

    def test_code_fence_is_tolerated(self):
        text = '```json\n[{"id": 1}]\n```'
        assert parse_slide_records(text) == [{"id": 1}]

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_response_raises(self, text):
        with pytest.raises(GenerationError):
            parse_slide_records(text)

    def test_invalid_json_raises(self):
        with pytest.raises(GenerationError, match="not valid JSON"):
            parse_slide_records("{slides: nope")

    @pytest.mark.parametrize("text", ['{"title": "x"}', '"slides"', "42"])
    def test_non_array_raises(self, text):
        with pytest.raises(GenerationError):
            parse_slide_records(text)


@pytest.mark.asyncio
class TestGenerationClient:
    async def test_returns_sanitized_deck(self, settings, fake_llm):
        client = GenerationClient(settings, llm_factory=llm_factory(fake_llm))

        deck = await client.generate_presentation()

        assert [s.layout_type for s in deck] == [
            LayoutType.COVER,
            LayoutType.CONTENT_LEFT,
            LayoutType.QUOTE,
            LayoutType.VIDEO,
        ]
        assert deck[1].bullet_points == ("Lulo", "Gulupa", "Guanábana")

    async def test_requests_structured_output(self, settings, fake_llm):
        client = GenerationClient(settings, llm_factory=llm_factory(fake_llm))

        await client.generate_presentation()

        call = fake_llm.invocations[0]
        fmt = call["response_format"]
        assert fmt["type"] == "json_schema"
        assert fmt["json_schema"]["strict"] is True
        items = fmt["json_schema"]["schema"]["properties"]["slides"]["items"]
        assert "video" not in items["properties"]["layoutType"]["enum"]
        system, user = call["messages"][0], call["messages"][-1]
        assert "Prestige Foods" in system[1]
        assert "10 diapositivas" in user[1]

    async def test_empty_backend_list_gives_video_only_deck(self, settings):
        llm = FakeLLM(text=json.dumps({"slides": []}))
        client = GenerationClient(settings, llm_factory=llm_factory(llm))

        deck = await client.generate_presentation()

        assert len(deck) == 1
        assert deck[0].layout_type is LayoutType.VIDEO

    async def test_network_failure_is_generation_error(self, settings):
        llm = FakeLLM(error=ConnectionError("connection reset"))
        client = GenerationClient(settings, llm_factory=llm_factory(llm))

        with pytest.raises(GenerationError) as exc_info:
            await client.generate_presentation()
        assert not isinstance(exc_info.value, ConfigurationError)
        assert "connection reset" in exc_info.value.message

    async def test_malformed_response_is_generation_error(self, settings):
        llm = FakeLLM(text="Lo siento, no puedo ayudar con eso.")
        client = GenerationClient(settings, llm_factory=llm_factory(llm))

        with pytest.raises(GenerationError):
            await client.generate_presentation()

    async def test_missing_credential_is_configuration_error(self, settings_without_key):
        client = GenerationClient(settings_without_key, llm_factory=build_llm_client)

        with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
            await client.generate_presentation()
