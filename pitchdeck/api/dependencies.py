"""
FastAPI dependency functions.

The controllers are process singletons created in the application lifespan
and kept on ``app.state``.
"""

from fastapi import Request, WebSocket

from pitchdeck.application.app_controller import AppController
from pitchdeck.application.chat import ChatSession
from pitchdeck.application.deck_controller import DeckController
from pitchdeck.application.voice import VoiceAssistant
from pitchdeck.infra.config.settings import Settings
from pitchdeck.infra.eventbus import EventBus
from pitchdeck.rendering.slide_renderer import SlideRenderer


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_app_controller(request: Request) -> AppController:
    return request.app.state.app_controller


def get_deck_controller(request: Request) -> DeckController:
    """The loaded deck; raises DeckNotReadyError outside ``ready``."""
    return request.app.state.app_controller.require_deck()


def get_renderer(request: Request) -> SlideRenderer:
    return request.app.state.renderer


def get_chat_session(request: Request) -> ChatSession:
    return request.app.state.chat_session


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus


def get_voice_assistant(websocket: WebSocket) -> VoiceAssistant:
    return websocket.app.state.voice_assistant
