from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from pitchdeck.api.dependencies import get_app_controller, get_app_settings, get_renderer
from pitchdeck.application.app_controller import AppController
from pitchdeck.infra.config.settings import Settings
from pitchdeck.rendering.slide_renderer import SlideRenderer

router = APIRouter(tags=["pages"])


@router.get("/", response_class=HTMLResponse)
async def index(
    controller: AppController = Depends(get_app_controller),
    renderer: SlideRenderer = Depends(get_renderer),
    settings: Settings = Depends(get_app_settings),
) -> HTMLResponse:
    """Landing panel while idle, generating or failed; the viewer once ready."""
    snapshot = controller.snapshot()
    deck = snapshot["deck"]
    slides_html = ""
    if deck is not None:
        slides_html = renderer.render_deck(
            controller.deck_controller.slides, deck["current_index"]
        )

    html = renderer.env.get_template("index.html").render(
        app_name=settings.app_name,
        state=snapshot,
        deck=deck,
        slides_html=slides_html,
        slide_count=controller.profile.slide_count,
        api_key_configured=settings.has_api_key(),
        capture_sample_rate=settings.capture_sample_rate,
        playback_sample_rate=settings.playback_sample_rate,
    )
    return HTMLResponse(html)
