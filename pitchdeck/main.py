"""
FastAPI application entry point for the Prestige Foods pitch deck.
"""

from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from pitchdeck.api.errors import setup_error_handlers
from pitchdeck.api.routes import pages_router, v1_router, voice_router
from pitchdeck.api.schemas import HealthResponse
from pitchdeck.application.app_controller import AppController
from pitchdeck.application.chat import ChatSession
from pitchdeck.application.generation import GenerationClient
from pitchdeck.application.voice import RealtimeConnector, VoiceAssistant
from pitchdeck.domain.profile import PRESTIGE_FOODS
from pitchdeck.infra.config.logging_config import get_logger, setup_logging
from pitchdeck.infra.config.settings import Settings, get_settings
from pitchdeck.infra.eventbus import EventBus
from pitchdeck.infra.llm.langchain_client import LangChainClient, build_llm_client
from pitchdeck.infra.llm.realtime_client import OpenAIRealtimeConnector
from pitchdeck.infra.metrics import metrics_router
from pitchdeck.infra.middleware.request_context import RequestContextMiddleware
from pitchdeck.rendering.slide_renderer import SlideRenderer, TEMPLATE_DIR

VERSION = "0.1.0"
STATIC_DIR = TEMPLATE_DIR.parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings)
    logger = get_logger("app")
    logger.info(
        "app.startup",
        app_name=settings.app_name,
        environment=settings.environment,
    )
    if not settings.has_api_key():
        logger.warning("app.api_key_missing")

    llm_factory = app.state.llm_factory
    bus = EventBus()
    app.state.event_bus = bus
    app.state.renderer = SlideRenderer(settings.image_base_url)
    app.state.app_controller = AppController(
        GenerationClient(settings, PRESTIGE_FOODS, llm_factory=llm_factory),
        profile=PRESTIGE_FOODS,
        autoplay_interval=settings.autoplay_interval,
        caption_interval=settings.loading_caption_interval,
        event_bus=bus,
    )
    app.state.chat_session = ChatSession(settings, PRESTIGE_FOODS, llm_factory=llm_factory)
    app.state.voice_assistant = VoiceAssistant(
        app.state.realtime_connector or OpenAIRealtimeConnector(settings),
        PRESTIGE_FOODS.voice_instruction,
    )

    yield

    await app.state.voice_assistant.stop()
    await app.state.app_controller.shutdown()
    logger.info("app.shutdown", app_name=settings.app_name)


def create_app(
    settings: Optional[Settings] = None,
    llm_factory: Callable[[Settings], LangChainClient] = build_llm_client,
    realtime_connector: Optional[RealtimeConnector] = None,
) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="AI-generated executive pitch deck with an export consultant",
        version=VERSION,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.llm_factory = llm_factory
    app.state.realtime_connector = realtime_connector

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)
    setup_error_handlers(app)

    app.include_router(pages_router)
    app.include_router(v1_router, prefix="/api")
    app.include_router(voice_router)
    if settings.prometheus_metrics_enabled:
        app.include_router(metrics_router)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service=settings.app_name,
            version=VERSION,
            api_key_configured=settings.has_api_key(),
        )

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "pitchdeck.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    run()
