from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, Response

from pitchdeck.api.dependencies import get_app_settings, get_deck_controller, get_renderer
from pitchdeck.api.schemas import DeckView, FullscreenReport, KeyResult
from pitchdeck.application.deck_controller import DeckController
from pitchdeck.domain.exceptions import SlideIndexError
from pitchdeck.infra.config.settings import Settings
from pitchdeck.rendering.export import PPTX_MEDIA_TYPE, export_pptx, export_print_html
from pitchdeck.rendering.slide_renderer import SlideRenderer

router = APIRouter(prefix="/deck", tags=["deck"])


def _view(deck: DeckController) -> DeckView:
    return DeckView(**deck.view(include_slides=False))


@router.get("", response_model=DeckView)
async def get_deck(deck: DeckController = Depends(get_deck_controller)) -> DeckView:
    return _view(deck)


@router.post("/next", response_model=DeckView)
async def next_slide(deck: DeckController = Depends(get_deck_controller)) -> DeckView:
    deck.next()
    return _view(deck)


@router.post("/previous", response_model=DeckView)
async def previous_slide(deck: DeckController = Depends(get_deck_controller)) -> DeckView:
    deck.previous()
    return _view(deck)


@router.post("/jump/{index}", response_model=DeckView)
async def jump(index: int, deck: DeckController = Depends(get_deck_controller)) -> DeckView:
    deck.jump_to(index)
    return _view(deck)


@router.post("/play", response_model=DeckView)
async def toggle_play(deck: DeckController = Depends(get_deck_controller)) -> DeckView:
    deck.toggle_play()
    return _view(deck)


@router.post("/fullscreen", response_model=DeckView)
async def toggle_fullscreen(deck: DeckController = Depends(get_deck_controller)) -> DeckView:
    deck.toggle_fullscreen()
    return _view(deck)


@router.post("/fullscreen/report", response_model=DeckView)
async def report_fullscreen(
    report: FullscreenReport,
    deck: DeckController = Depends(get_deck_controller),
) -> DeckView:
    deck.report_fullscreen(report.active)
    return _view(deck)


@router.post("/keys/{key}", response_model=KeyResult)
async def key_press(key: str, deck: DeckController = Depends(get_deck_controller)) -> KeyResult:
    handled = deck.handle_key(key)
    return KeyResult(handled=handled, deck=_view(deck))


@router.get("/slides/{index}", response_class=HTMLResponse)
async def slide_html(
    index: int,
    deck: DeckController = Depends(get_deck_controller),
    renderer: SlideRenderer = Depends(get_renderer),
) -> HTMLResponse:
    if not 0 <= index < len(deck):
        raise SlideIndexError(index, len(deck))
    slide = deck.slides[index]
    return HTMLResponse(renderer.render_slide(slide, index == deck.current_index))


@router.get("/export")
async def export(
    format: str = Query("html", pattern="^(html|pptx)$"),
    deck: DeckController = Depends(get_deck_controller),
    renderer: SlideRenderer = Depends(get_renderer),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    if format == "pptx":
        return Response(
            export_pptx(deck.slides, title=settings.app_name),
            media_type=PPTX_MEDIA_TYPE,
            headers={"Content-Disposition": 'attachment; filename="prestige-foods.pptx"'},
        )
    return HTMLResponse(export_print_html(deck.slides, renderer, title=settings.app_name))
