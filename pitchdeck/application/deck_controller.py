"""
Deck controller: the view state of one loaded presentation.

Navigation is synchronous and total. Autoplay is the only timer: a single
``RepeatingTask`` that is re-armed on every index change and stopped when
playback stops or the controller is closed.
"""

from typing import Any, Callable, Dict, Optional

from pitchdeck.application.scheduling import RepeatingTask
from pitchdeck.domain.exceptions import SlideIndexError
from pitchdeck.domain.slide import Deck
from pitchdeck.infra.config.logging_config import get_logger

logger = get_logger(__name__)

AUTOPLAY_TASK_NAME = "deck-autoplay"


class DeckController:
    def __init__(
        self,
        slides: Deck,
        autoplay_interval: float = 5.0,
        on_change: Optional[Callable[["DeckController"], None]] = None,
    ):
        if not slides:
            raise ValueError("A deck needs at least one slide")
        self.slides: Deck = tuple(slides)
        self.current_index = 0
        self.is_playing = False
        self.is_fullscreen = False
        self._on_change = on_change
        self._closed = False
        self._autoplay = RepeatingTask(
            autoplay_interval, self._autoplay_tick, name=AUTOPLAY_TASK_NAME
        )

    def __len__(self) -> int:
        return len(self.slides)

    @property
    def autoplay_armed(self) -> bool:
        return self._autoplay.running

    # Navigation

    def next(self) -> int:
        self._set_index((self.current_index + 1) % len(self.slides))
        return self.current_index

    def previous(self) -> int:
        self._set_index((self.current_index - 1 + len(self.slides)) % len(self.slides))
        return self.current_index

    def jump_to(self, index: int) -> int:
        if not 0 <= index < len(self.slides):
            raise SlideIndexError(index, len(self.slides))
        self._set_index(index)
        return self.current_index

    # Playback

    def toggle_play(self) -> bool:
        self.is_playing = not self.is_playing
        if self.is_playing and not self._closed:
            self._autoplay.restart()
            logger.info("deck.autoplay.started", interval=self._autoplay.interval)
        else:
            self._autoplay.stop()
            logger.info("deck.autoplay.stopped")
        self._notify()
        return self.is_playing

    # Fullscreen is best-effort: the client performs the platform request.

    def toggle_fullscreen(self) -> bool:
        self.is_fullscreen = not self.is_fullscreen
        self._notify()
        return self.is_fullscreen

    def exit_fullscreen(self) -> bool:
        if self.is_fullscreen:
            self.is_fullscreen = False
            self._notify()
        return self.is_fullscreen

    def report_fullscreen(self, active: bool) -> bool:
        """Record what the platform actually did with a fullscreen request."""
        if self.is_fullscreen != active:
            self.is_fullscreen = active
            self._notify()
        return self.is_fullscreen

    def handle_key(self, key: str) -> bool:
        if key == "ArrowRight":
            self.next()
        elif key == "ArrowLeft":
            self.previous()
        elif key in ("f", "F"):
            self.toggle_fullscreen()
        elif key == "Escape" and self.is_fullscreen:
            self.exit_fullscreen()
        else:
            return False
        return True

    def close(self) -> None:
        """Stop every timer; the controller is discarded afterwards."""
        self._closed = True
        self.is_playing = False
        self._autoplay.stop()

    def view(self, include_slides: bool = True) -> Dict[str, Any]:
        view: Dict[str, Any] = {
            "current_index": self.current_index,
            "total": len(self.slides),
            "is_playing": self.is_playing,
            "is_fullscreen": self.is_fullscreen,
        }
        if include_slides:
            view["slides"] = [
                s.model_dump(by_alias=True, mode="json") for s in self.slides
            ]
        return view

    def _set_index(self, index: int) -> None:
        self.current_index = index
        if self.is_playing and not self._closed:
            self._autoplay.restart()
        self._notify()

    def _autoplay_tick(self) -> None:
        self.next()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self)
