"""
Generation client: one LLM call turned into a sanitized deck.
"""

import json
import re
import time
from typing import Any, Callable, List

from pitchdeck.application.prompts import deck_prompt, response_format
from pitchdeck.domain.exceptions import ConfigurationError, GenerationError
from pitchdeck.domain.profile import PRESTIGE_FOODS, PresentationProfile
from pitchdeck.domain.sanitization import SlideSanitizer
from pitchdeck.domain.slide import Deck
from pitchdeck.infra.config.logging_config import get_logger
from pitchdeck.infra.config.settings import Settings
from pitchdeck.infra.llm.langchain_client import LangChainClient, build_llm_client
from pitchdeck.infra.metrics import observe_generation

logger = get_logger(__name__)

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def parse_slide_records(text: str) -> List[Any]:
    """Parse the raw response into a list of untrusted records."""
    if not text or not text.strip():
        raise GenerationError("The AI service returned an empty response")

    body = text.strip()
    fenced = _FENCE.match(body)
    if fenced:
        body = fenced.group(1)

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise GenerationError(f"The AI response is not valid JSON: {e.msg}") from e

    if isinstance(data, dict) and isinstance(data.get("slides"), list):
        return data["slides"]
    if isinstance(data, list):
        return data
    raise GenerationError("The AI response is not an array of slides")


class GenerationClient:
    """Calls the generation backend and sanitizes its answer into a Deck."""

    def __init__(
        self,
        settings: Settings,
        profile: PresentationProfile = PRESTIGE_FOODS,
        llm_factory: Callable[[Settings], LangChainClient] = build_llm_client,
    ):
        self.settings = settings
        self.profile = profile
        self.sanitizer = SlideSanitizer(profile)
        self._llm_factory = llm_factory

    async def generate_presentation(self) -> Deck:
        """Request the fixed presentation and return the sanitized deck.

        Raises:
            ConfigurationError: the backend credential is not configured
            GenerationError: network failure, empty or malformed response
        """
        llm = self._llm_factory(self.settings)
        messages = llm.create_messages(
            user_prompt=deck_prompt(self.profile),
            system_prompt=self.profile.system_instruction,
        )

        started = time.perf_counter()
        try:
            text = await llm.invoke_text(messages, response_format=response_format())
        except (ConfigurationError, GenerationError):
            raise
        except Exception as e:
            logger.error("generation.request_failed", error=str(e))
            raise GenerationError(f"The AI request failed: {e}") from e

        records = parse_slide_records(text)
        deck = self.sanitizer.build_deck(records)
        observe_generation(time.perf_counter() - started)

        logger.info(
            "generation.completed",
            received=len(records),
            slides=len(deck),
        )
        return deck
