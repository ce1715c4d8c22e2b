"""
App controller: the top-level Idle/Generating/Ready/Error state machine.

    idle --generate--> generating --success--> ready --reset--> idle
                                  --failure--> error --retry--> idle

Only one state is observable at a time. ``generate`` is accepted only from
``idle`` and the transition into ``generating`` happens before the first
suspension point, so a second request in flight is rejected.
"""

import asyncio
from typing import Any, Dict, Optional

from pitchdeck.application.deck_controller import DeckController
from pitchdeck.application.generation import GenerationClient
from pitchdeck.application.scheduling import RepeatingTask
from pitchdeck.domain.exceptions import (
    ConfigurationError,
    DeckNotReadyError,
    GenerationError,
    InvalidTransitionError,
)
from pitchdeck.domain.profile import PRESTIGE_FOODS, PresentationProfile
from pitchdeck.domain.slide import AppState, Deck
from pitchdeck.infra import metrics
from pitchdeck.infra.config.logging_config import get_logger
from pitchdeck.infra.eventbus import EventBus

logger = get_logger(__name__)

CAPTION_TASK_NAME = "loading-captions"
GENERATION_TASK_NAME = "deck-generation"


class AppController:
    def __init__(
        self,
        generation_client: GenerationClient,
        profile: PresentationProfile = PRESTIGE_FOODS,
        autoplay_interval: float = 5.0,
        caption_interval: float = 2.5,
        event_bus: Optional[EventBus] = None,
    ):
        self.generation_client = generation_client
        self.profile = profile
        self.autoplay_interval = autoplay_interval
        self.event_bus = event_bus

        self.state = AppState.IDLE
        self.error: Optional[str] = None
        self.deck_controller: Optional[DeckController] = None
        self.caption_index = 0

        self._captions = RepeatingTask(
            caption_interval, self._advance_caption, name=CAPTION_TASK_NAME
        )
        self._generation_task: Optional[asyncio.Task] = None

    @property
    def caption(self) -> Optional[str]:
        if self.state is not AppState.GENERATING:
            return None
        return self.profile.loading_captions[self.caption_index]

    @property
    def captions_running(self) -> bool:
        return self._captions.running

    @property
    def deck(self) -> Optional[Deck]:
        return self.deck_controller.slides if self.deck_controller else None

    # Transitions

    async def generate(self) -> AppState:
        """Run a full generation in the caller's task."""
        self._enter_generating()
        await self._run_generation()
        return self.state

    def start_generation(self) -> asyncio.Task:
        """Enter ``generating`` now and finish the call in a background task."""
        self._enter_generating()
        task = asyncio.get_running_loop().create_task(
            self._run_generation(), name=GENERATION_TASK_NAME
        )
        self._generation_task = task
        return task

    def retry(self) -> AppState:
        self._require(AppState.ERROR, "retry")
        self.error = None
        self._set_state(AppState.IDLE)
        return self.state

    def reset(self) -> AppState:
        self._require(AppState.READY, "reset")
        self._discard_deck()
        self._set_state(AppState.IDLE)
        return self.state

    def require_deck(self) -> DeckController:
        if self.state is not AppState.READY or self.deck_controller is None:
            raise DeckNotReadyError()
        return self.deck_controller

    async def shutdown(self) -> None:
        task, self._generation_task = self._generation_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._captions.stop()
        self._discard_deck()

    def snapshot(self) -> Dict[str, Any]:
        deck = (
            self.deck_controller.view(include_slides=False)
            if self.state is AppState.READY and self.deck_controller
            else None
        )
        return {
            "state": self.state.value,
            "error": self.error,
            "caption": self.caption,
            "deck": deck,
        }

    # Internals

    def _require(self, expected: AppState, operation: str) -> None:
        if self.state is not expected:
            raise InvalidTransitionError(operation, self.state.value)

    def _enter_generating(self) -> None:
        self._require(AppState.IDLE, "generate")
        self.error = None
        self.caption_index = 0
        self._set_state(AppState.GENERATING, publish=False)
        self._captions.restart()
        metrics.GENERATIONS_STARTED.inc()
        logger.info("generation.start")
        self._publish_app()

    async def _run_generation(self) -> None:
        try:
            deck = await self.generation_client.generate_presentation()
        except ConfigurationError as e:
            logger.warning("generation.misconfigured", error=e.message)
            self._fail(e.message, "configuration")
        except GenerationError as e:
            logger.error("generation.failed", error=e.message)
            self._fail(self.profile.generation_failed_message, "generation")
        except asyncio.CancelledError:
            logger.info("generation.cancelled")
            if self.state is AppState.GENERATING:
                self._set_state(AppState.IDLE, publish=False)
            raise
        except Exception as e:
            logger.exception("generation.unexpected_error", error=str(e))
            self._fail(self.profile.generation_failed_message, "unexpected")
        else:
            self._succeed(deck)
        finally:
            self._captions.stop()
            if self._generation_task is asyncio.current_task():
                self._generation_task = None

    def _succeed(self, deck: Deck) -> None:
        self._captions.stop()
        self.deck_controller = DeckController(
            deck,
            autoplay_interval=self.autoplay_interval,
            on_change=self._publish_deck,
        )
        metrics.GENERATIONS_COMPLETED.inc()
        logger.info("generation.ready", slides=len(deck))
        self._set_state(AppState.READY)

    def _fail(self, message: str, reason: str) -> None:
        self._captions.stop()
        self._discard_deck()
        self.error = message
        metrics.GENERATIONS_FAILED.labels(reason=reason).inc()
        self._set_state(AppState.ERROR)

    def _discard_deck(self) -> None:
        if self.deck_controller is not None:
            self.deck_controller.close()
            self.deck_controller = None

    def _set_state(self, state: AppState, publish: bool = True) -> None:
        logger.debug("app.state", previous=self.state.value, current=state.value)
        self.state = state
        if publish:
            self._publish_app()

    def _advance_caption(self) -> None:
        self.caption_index = (self.caption_index + 1) % len(self.profile.loading_captions)
        self._publish_app()

    def _publish_app(self) -> None:
        if self.event_bus is not None:
            self.event_bus.publish("app", self.snapshot())

    def _publish_deck(self, deck: DeckController) -> None:
        if self.event_bus is not None:
            self.event_bus.publish("deck", deck.view(include_slides=False))
