from fastapi import APIRouter, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Metrics definitions
GENERATIONS_STARTED = Counter(
    "pitchdeck_generations_started_total", "Deck generations started"
)
GENERATIONS_COMPLETED = Counter(
    "pitchdeck_generations_completed_total", "Deck generations completed"
)
GENERATIONS_FAILED = Counter(
    "pitchdeck_generations_failed_total", "Deck generations failed", ["reason"]
)
GENERATION_LATENCY_SECONDS = Histogram(
    "pitchdeck_generation_latency_seconds", "Deck generation latency seconds"
)

CHAT_MESSAGES = Counter("pitchdeck_chat_messages_total", "Chat messages sent")
CHAT_FAILURES = Counter("pitchdeck_chat_failures_total", "Chat streams that failed")
VOICE_SESSIONS_ACTIVE = Gauge(
    "pitchdeck_voice_sessions_active", "Voice sessions currently open"
)


metrics_router = APIRouter()


@metrics_router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def observe_generation(seconds: float) -> None:
    """Record the wall time of a successful generation call."""
    GENERATION_LATENCY_SECONDS.observe(max(0.0, float(seconds)))
