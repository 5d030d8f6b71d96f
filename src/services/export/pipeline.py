"""
Export pipeline: canonical deck to .pptx bytes.

The pipeline handles sequencing, layout coordinates and progress
bookkeeping. Drawing is delegated to a PresentationEncoder. Each call
builds a fresh encoder, so the pipeline keeps no state between runs.
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Callable, Optional

from src.core import ExportFailed, get_settings
from src.models import Deck, GenerationProgress, deck_fingerprint

from .encoder import PptxEncoder, PresentationEncoder, TextBox, TextStyle

logger = logging.getLogger(__name__)

PPTX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

ProgressCallback = Callable[[GenerationProgress], Any]
EncoderFactory = Callable[[], PresentationEncoder]

# Layout, in inches
LEFT = 0.5
WIDTH = 9.0
TITLE_BOX = TextBox(x=LEFT, y=0.5, w=WIDTH, h=0.8)
FIRST_ITEM_Y = 1.5
ITEM_SPACING = 0.65
ITEM_HEIGHT = 0.5
OVERFLOW_HEIGHT = 0.4

TITLE_STYLE = TextStyle(font_size=32, color="363636", bold=True)
ITEM_STYLE = TextStyle(font_size=16, color="5F5F5F", bullet=True)
OVERFLOW_STYLE = TextStyle(font_size=14, color="999999", italic=True)


class ExportState(StrEnum):
    IDLE = "idle"
    RENDERING = "rendering"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ExportArtifact:
    """A rendered presentation ready for download."""
    data: bytes
    filename: str
    slide_count: int
    fingerprint: str
    media_type: str = PPTX_MEDIA_TYPE


def overflow_line(hidden: int) -> str:
    return f"... and {hidden} more point{'s' if hidden > 1 else ''}"


class ExportPipeline:
    """Renders decks one slide at a time, reporting progress as it goes."""

    def __init__(
        self,
        encoder_factory: EncoderFactory = PptxEncoder,
        max_visible_items: Optional[int] = None,
    ):
        self._settings = get_settings()
        self._encoder_factory = encoder_factory
        self._max_visible_items = max_visible_items or self._settings.export_max_visible_items

    async def export(
        self,
        deck: Deck,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ExportArtifact:
        """
        Render a deck into a presentation file.

        Emits one progress event per slide, before that slide is drawn, then
        a final "finalizing" event at current == total.

        Raises:
            ExportFailed: The deck is empty or the encoder failed. No
                partial artifact is returned in either case.
        """
        if not deck:
            raise ExportFailed("No slides to export")

        total = len(deck)
        state = ExportState.IDLE
        current = 0

        def report(progress: GenerationProgress) -> None:
            if on_progress is not None:
                on_progress(progress)

        try:
            encoder = self._encoder_factory()
            encoder.set_metadata(self._settings.export_author, self._settings.export_title)

            state = ExportState.RENDERING
            for current, slide in enumerate(deck, start=1):
                report(GenerationProgress(
                    current=current,
                    total=total,
                    status=f"Creating slide {current} of {total}...",
                ))
                self._render_slide(encoder, slide.title, slide.content)
                # Let other tasks run between slides
                await asyncio.sleep(0)

            state = ExportState.FINALIZING
            report(GenerationProgress(current=total, total=total, status="Finalizing presentation..."))
            data = encoder.to_bytes()

        except Exception as e:
            logger.error(f"Export failed while {state} (slide {current} of {total}): {e}")
            raise ExportFailed(f"Encoder error on slide {current} of {total}: {e}") from e

        state = ExportState.DONE
        logger.info(f"Export {state}: {total} slides ({len(data)} bytes)")
        return ExportArtifact(
            data=data,
            filename=self._settings.export_filename,
            slide_count=total,
            fingerprint=deck_fingerprint(deck),
        )

    def _render_slide(self, encoder: PresentationEncoder, title: str, content: list[str]) -> None:
        page = encoder.add_slide()

        if title:
            encoder.add_text(page, title, TITLE_BOX, TITLE_STYLE)

        visible = content[:self._max_visible_items]
        for index, item in enumerate(visible):
            box = TextBox(x=LEFT, y=FIRST_ITEM_Y + index * ITEM_SPACING, w=WIDTH, h=ITEM_HEIGHT)
            encoder.add_text(page, item, box, ITEM_STYLE)

        hidden = len(content) - len(visible)
        if hidden > 0:
            box = TextBox(
                x=LEFT,
                y=FIRST_ITEM_Y + self._max_visible_items * ITEM_SPACING,
                w=WIDTH,
                h=OVERFLOW_HEIGHT,
            )
            encoder.add_text(page, overflow_line(hidden), box, OVERFLOW_STYLE)


_export_pipeline: Optional[ExportPipeline] = None


def get_export_pipeline() -> ExportPipeline:
    """Get the singleton export pipeline instance."""
    global _export_pipeline
    if _export_pipeline is None:
        _export_pipeline = ExportPipeline()
    return _export_pipeline
