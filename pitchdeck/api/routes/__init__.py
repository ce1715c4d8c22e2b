"""API v1 routers"""

from fastapi import APIRouter

from .chat import router as chat_router
from .deck import router as deck_router
from .events import router as events_router
from .pages import router as pages_router
from .presentation import router as presentation_router
from .voice import router as voice_router

v1_router = APIRouter(prefix="/v1")

v1_router.include_router(presentation_router)
v1_router.include_router(deck_router)
v1_router.include_router(events_router)
v1_router.include_router(chat_router)

__all__ = ["v1_router", "pages_router", "voice_router"]
