"""
Deck export: a print-ready HTML document and a PowerPoint file.
"""

from io import BytesIO
from typing import Optional, Sequence

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import PP_ALIGN
from pptx.util import Inches, Pt

from pitchdeck.domain.slide import LayoutType, SlideRecord
from pitchdeck.infra.config.logging_config import get_logger
from pitchdeck.rendering.slide_renderer import SlideRenderer

logger = get_logger(__name__)

PPTX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.presentationml.presentation"
)

CREAM = RGBColor(0xF5, 0xEF, 0xE6)
COPPER = RGBColor(0xC0, 0x8A, 0x5B)
DARK = RGBColor(0x0C, 0x14, 0x10)

BLANK_LAYOUT = 6


def export_print_html(
    slides: Sequence[SlideRecord],
    renderer: SlideRenderer,
    title: str = "Prestige Foods",
) -> str:
    """One page per slide, every slide rendered active."""
    template = renderer.env.get_template("print.html")
    pages = [renderer.render_slide(s, True) for s in slides]
    return template.render(title=title, pages=pages)


def _add_text(slide, left, top, width, height, text: str, size: int, color, bold=False, italic=False, align=None):
    box = slide.shapes.add_textbox(left, top, width, height)
    tf = box.text_frame
    tf.word_wrap = True
    p = tf.paragraphs[0]
    p.text = text
    if align is not None:
        p.alignment = align
    font = p.runs[0].font if p.runs else p.font
    font.size = Pt(size)
    font.bold = bold
    font.italic = italic
    font.color.rgb = color
    return box


def _add_bullets(slide, left, top, width, height, bullets: Sequence[str]):
    if not bullets:
        return None
    box = slide.shapes.add_textbox(left, top, width, height)
    tf = box.text_frame
    tf.word_wrap = True
    for i, point in enumerate(bullets):
        p = tf.paragraphs[0] if i == 0 else tf.add_paragraph()
        p.text = f"• {point}"
        p.level = 0
        p.space_after = Pt(10)
        for run in p.runs:
            run.font.size = Pt(18)
            run.font.color.rgb = CREAM
    return box


def _fill_background(slide):
    fill = slide.background.fill
    fill.solid()
    fill.fore_color.rgb = DARK


def export_pptx(slides: Sequence[SlideRecord], title: Optional[str] = None) -> bytes:
    prs = Presentation()
    prs.slide_width = Inches(13.333)
    prs.slide_height = Inches(7.5)
    if title:
        prs.core_properties.title = title
    layout = prs.slide_layouts[BLANK_LAYOUT]

    for record in slides:
        slide = prs.slides.add_slide(layout)
        _fill_background(slide)
        lt = record.layout_type

        if lt in (LayoutType.COVER, LayoutType.QUOTE):
            heading = f"“{record.title}”" if lt is LayoutType.QUOTE else record.title
            _add_text(slide, Inches(1), Inches(2.3), Inches(11.3), Inches(2),
                      heading, 54 if lt is LayoutType.COVER else 36, CREAM,
                      bold=lt is LayoutType.COVER, italic=lt is LayoutType.QUOTE,
                      align=PP_ALIGN.CENTER)
            _add_text(slide, Inches(1), Inches(4.5), Inches(11.3), Inches(1),
                      record.subtitle, 24, COPPER, italic=True, align=PP_ALIGN.CENTER)
        else:
            left = Inches(7.2) if lt is LayoutType.CONTENT_RIGHT else Inches(0.8)
            _add_text(slide, left, Inches(0.8), Inches(5.6), Inches(1.5),
                      record.title, 36, CREAM, bold=True)
            _add_text(slide, left, Inches(2.3), Inches(5.6), Inches(0.8),
                      record.subtitle, 20, COPPER, italic=True)
            _add_bullets(slide, left, Inches(3.2), Inches(5.6), Inches(3.6),
                         record.bullet_points)
            if lt is LayoutType.VIDEO and record.video_url:
                link = _add_text(slide, Inches(7.2), Inches(3.2), Inches(5.6), Inches(1),
                                 "Ver video", 20, COPPER, bold=True)
                link.text_frame.paragraphs[0].runs[0].hyperlink.address = record.video_url

        # speaker notes carry the image brief
        slide.notes_slide.notes_text_frame.text = record.visual_prompt

    bio = BytesIO()
    prs.save(bio)
    data = bio.getvalue()
    logger.info("export.pptx", slides=len(slides), size=len(data))
    return data
