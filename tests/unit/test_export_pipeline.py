"""
Unit tests for the export pipeline and the python-pptx encoder.
"""
import io
import logging

import pytest
from pptx import Presentation
from pptx.util import Inches, Pt

from src.core import ExportFailed
from src.models import Slide, deck_fingerprint
from src.services.export.encoder import PptxEncoder
from src.services.export.pipeline import PPTX_MEDIA_TYPE, ExportPipeline, overflow_line


class FailingEncoder(PptxEncoder):
    """Encoder that breaks on a chosen slide."""

    def __init__(self, fail_on: int):
        super().__init__()
        self._fail_on = fail_on
        self._count = 0

    def add_slide(self):
        self._count += 1
        if self._count == self._fail_on:
            raise RuntimeError("encoder exploded")
        return super().add_slide()


def _texts(slide) -> list[str]:
    return [shape.text_frame.text for shape in slide.shapes if shape.has_text_frame]


def _reopen(data: bytes):
    return Presentation(io.BytesIO(data))


class TestOverflowLine:
    """Tests for overflow_line."""

    def test_singular(self):
        assert overflow_line(1) == "... and 1 more point"

    def test_plural(self):
        assert overflow_line(3) == "... and 3 more points"


class TestExportPipeline:
    """Tests for ExportPipeline.export."""

    @pytest.mark.asyncio
    async def test_artifact_reopens_with_all_slides(self, export_pipeline, sample_deck):
        artifact = await export_pipeline.export(sample_deck)

        presentation = _reopen(artifact.data)
        assert len(presentation.slides) == 3
        assert _texts(presentation.slides[0]) == ["Introduction", "What it is", "Why it matters"]
        assert artifact.filename == "presentation.pptx"
        assert artifact.media_type == PPTX_MEDIA_TYPE
        assert artifact.slide_count == 3
        assert artifact.fingerprint == deck_fingerprint(sample_deck)

    @pytest.mark.asyncio
    async def test_logs_final_state(self, export_pipeline, sample_deck, caplog):
        with caplog.at_level(logging.INFO):
            await export_pipeline.export(sample_deck)

        assert "Export done: 3 slides" in caplog.text

    @pytest.mark.asyncio
    async def test_metadata(self, export_pipeline, sample_deck):
        artifact = await export_pipeline.export(sample_deck)

        props = _reopen(artifact.data).core_properties
        assert props.author == "SlideChat"
        assert props.title == "AI Generated Presentation"

    @pytest.mark.asyncio
    async def test_title_layout_and_style(self, export_pipeline):
        artifact = await export_pipeline.export([Slide(title="Heading", content=["One"])])

        shapes = list(_reopen(artifact.data).slides[0].shapes)
        title, item = shapes
        assert title.left == Inches(0.5)
        assert title.top == Inches(0.5)
        assert title.width == Inches(9)
        run = title.text_frame.paragraphs[0].runs[0]
        assert run.font.size == Pt(32)
        assert run.font.bold is True
        assert str(run.font.color.rgb) == "363636"

        assert item.top == Inches(1.5)
        item_run = item.text_frame.paragraphs[0].runs[0]
        assert item_run.font.size == Pt(16)
        assert str(item_run.font.color.rgb) == "5F5F5F"

    @pytest.mark.asyncio
    async def test_overflow_after_seven_items(self, export_pipeline):
        slide = Slide(title="Many", content=[f"Point {i}" for i in range(10)])

        artifact = await export_pipeline.export([slide])

        texts = _texts(_reopen(artifact.data).slides[0])
        assert texts[1:8] == [f"Point {i}" for i in range(7)]
        assert texts[-1] == "... and 3 more points"
        assert len(texts) == 9

    @pytest.mark.asyncio
    async def test_empty_title_renders_items_only(self, export_pipeline):
        artifact = await export_pipeline.export([Slide(title="", content=["Alone"])])

        assert _texts(_reopen(artifact.data).slides[0]) == ["Alone"]

    @pytest.mark.asyncio
    async def test_progress_is_monotonic_and_ends_finalizing(self, export_pipeline, sample_deck):
        events = []

        await export_pipeline.export(sample_deck, on_progress=events.append)

        assert [e.current for e in events] == [1, 2, 3, 3]
        assert all(e.total == 3 for e in events)
        assert events[0].status == "Creating slide 1 of 3..."
        assert events[-1].status == "Finalizing presentation..."

    @pytest.mark.asyncio
    async def test_empty_deck_rejected(self, export_pipeline):
        with pytest.raises(ExportFailed):
            await export_pipeline.export([])

    @pytest.mark.asyncio
    async def test_encoder_failure_mid_deck(self):
        pipeline = ExportPipeline(encoder_factory=lambda: FailingEncoder(fail_on=3))
        deck = [Slide(title=f"S{i}", content=["x"]) for i in range(5)]
        events = []

        with pytest.raises(ExportFailed) as exc_info:
            await pipeline.export(deck, on_progress=events.append)

        assert "slide 3 of 5" in str(exc_info.value)
        assert [e.current for e in events] == [1, 2, 3]
        assert exc_info.value.user_message == "Failed to generate PowerPoint presentation"

    @pytest.mark.asyncio
    async def test_same_deck_same_slide_text(self, export_pipeline, sample_deck):
        first = await export_pipeline.export(sample_deck)
        second = await export_pipeline.export(sample_deck)

        assert [_texts(s) for s in _reopen(first.data).slides] == [
            _texts(s) for s in _reopen(second.data).slides
        ]
