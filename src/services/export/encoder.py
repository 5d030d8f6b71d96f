"""
PowerPoint encoder built on python-pptx.

The export pipeline decides what goes where; this module only knows how
to put a text box on a slide and serialize the result.
"""
import io
import logging
from dataclasses import dataclass
from typing import Any

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.oxml.ns import qn
from pptx.util import Inches, Pt

logger = logging.getLogger(__name__)

BLANK_LAYOUT_INDEX = 6
BULLET_CHAR = "•"
BULLET_INDENT = Inches(0.3)


@dataclass(frozen=True)
class TextBox:
    """Position and size in inches."""
    x: float
    y: float
    w: float
    h: float


@dataclass(frozen=True)
class TextStyle:
    font_size: int
    color: str
    bold: bool = False
    italic: bool = False
    bullet: bool = False


class PresentationEncoder:
    """Interface every presentation encoder implements."""

    def set_metadata(self, author: str, title: str) -> None:
        raise NotImplementedError

    def add_slide(self) -> Any:
        raise NotImplementedError

    def add_text(self, slide: Any, text: str, box: TextBox, style: TextStyle) -> None:
        raise NotImplementedError

    def to_bytes(self) -> bytes:
        raise NotImplementedError


class PptxEncoder(PresentationEncoder):
    """Writes a .pptx file in memory."""

    def __init__(self):
        self._presentation = Presentation()

    def set_metadata(self, author: str, title: str) -> None:
        props = self._presentation.core_properties
        props.author = author
        props.title = title

    def add_slide(self):
        layout = self._presentation.slide_layouts[BLANK_LAYOUT_INDEX]
        return self._presentation.slides.add_slide(layout)

    def add_text(self, slide, text: str, box: TextBox, style: TextStyle) -> None:
        shape = slide.shapes.add_textbox(Inches(box.x), Inches(box.y), Inches(box.w), Inches(box.h))
        frame = shape.text_frame
        frame.word_wrap = True

        paragraph = frame.paragraphs[0]
        if style.bullet:
            _apply_bullet(paragraph)

        run = paragraph.add_run()
        run.text = text
        font = run.font
        font.size = Pt(style.font_size)
        font.bold = style.bold
        font.italic = style.italic
        font.color.rgb = RGBColor.from_string(style.color)

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self._presentation.save(buffer)
        return buffer.getvalue()


def _apply_bullet(paragraph) -> None:
    """Give a paragraph a hanging bullet character."""
    p_pr = paragraph._p.get_or_add_pPr()
    p_pr.set("marL", str(int(BULLET_INDENT)))
    p_pr.set("indent", str(-int(BULLET_INDENT)))
    bullet = p_pr.makeelement(qn("a:buChar"), {"char": BULLET_CHAR})
    p_pr.append(bullet)
