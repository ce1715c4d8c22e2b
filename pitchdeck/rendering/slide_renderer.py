"""
Slide renderer: SlideRecord -> HTML fragment.

Layouts dispatch through ``LAYOUT_TEMPLATES``; content-left and content-right
share one template and differ only by the ``side`` parameter. Every slide is
rendered whether active or not, inactive ones carry ``slide--inactive``.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from pitchdeck.domain.exceptions import RenderContractError
from pitchdeck.domain.slide import LayoutType, SlideRecord

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "web" / "templates"

LAYOUT_TEMPLATES: Dict[LayoutType, Tuple[str, Dict[str, Any]]] = {
    LayoutType.COVER: ("slides/cover.html", {}),
    LayoutType.CONTENT_LEFT: ("slides/content.html", {"side": "left"}),
    LayoutType.CONTENT_RIGHT: ("slides/content.html", {"side": "right"}),
    LayoutType.QUOTE: ("slides/quote.html", {}),
    LayoutType.VIDEO: ("slides/video.html", {}),
    LayoutType.CLOSING: ("slides/closing.html", {}),
}

_environment: Optional[Environment] = None


def get_environment() -> Environment:
    """Shared Jinja2 environment for slides and pages."""
    global _environment
    if _environment is None:
        _environment = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
    return _environment


def image_url(slide: SlideRecord, base_url: str = "https://picsum.photos") -> str:
    """Deterministic 1600x900 background image for a slide."""
    seed = quote(f"{slide.id}-{slide.visual_prompt}", safe="")
    return f"{base_url.rstrip('/')}/seed/{seed}/1600/900"


class SlideRenderer:
    def __init__(
        self,
        image_base_url: str = "https://picsum.photos",
        environment: Optional[Environment] = None,
    ):
        self.image_base_url = image_base_url
        self.env = environment or get_environment()

    def render_slide(self, slide: SlideRecord, is_active: bool) -> Markup:
        if slide.layout_type is LayoutType.VIDEO and not slide.video_url:
            raise RenderContractError(f"video slide {slide.id} has no video_url")

        template_name, params = LAYOUT_TEMPLATES[slide.layout_type]
        template = self.env.get_template(template_name)
        html = template.render(
            slide=slide,
            is_active=is_active,
            image_url=image_url(slide, self.image_base_url),
            number=f"{slide.id:02d}",
            **params,
        )
        return Markup(html)

    def render_deck(self, slides: Sequence[SlideRecord], current_index: int = 0) -> Markup:
        return Markup("\n").join(
            self.render_slide(slide, i == current_index) for i, slide in enumerate(slides)
        )
