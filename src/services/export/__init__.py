"""Export of decks to presentation files."""

from .encoder import PptxEncoder, PresentationEncoder, TextBox, TextStyle
from .pipeline import ExportArtifact, ExportPipeline, ExportState, get_export_pipeline

__all__ = [
    "PptxEncoder",
    "PresentationEncoder",
    "TextBox",
    "TextStyle",
    "ExportArtifact",
    "ExportPipeline",
    "ExportState",
    "get_export_pipeline",
]
