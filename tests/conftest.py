"""
Pytest configuration and fixtures.
"""
import json
from unittest.mock import AsyncMock, Mock

import pytest

from src.core import get_settings
from src.models import Slide
from src.services.export import ExportPipeline
from src.services.persistence import FileKeyValueStore, LocalSessionStore, SessionSynchronizer


@pytest.fixture(scope="session")
def test_data_dir(tmp_path_factory):
    """Create a shared test data directory."""
    return tmp_path_factory.mktemp("test_data")


@pytest.fixture
def clean_environment(monkeypatch):
    """Provide a clean environment for tests."""
    # Clear relevant environment variables
    env_vars = [
        "AZURE_OPENAI_API_KEY",
        "AZURE_OPENAI_ENDPOINT",
        "AZURE_OPENAI_DEPLOYMENT",
        "AZURE_OPENAI_USE_ENTRA_ID",
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "TRACING_ENABLED",
    ]
    for var in env_vars:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Settings are cached process-wide; start every test from a fresh load."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_deck():
    """A small three-slide deck."""
    return [
        Slide(title="Introduction", content=["What it is", "Why it matters"]),
        Slide(title="History", content=["Early days", "Recent progress"]),
        Slide(title="Summary", content=["Key takeaways"]),
    ]


@pytest.fixture
def local_store(tmp_path):
    """Local single-slot store backed by a temp directory."""
    return LocalSessionStore(FileKeyValueStore(tmp_path / "local_store"))


@pytest.fixture
def synchronizer(local_store):
    return SessionSynchronizer(local_store)


@pytest.fixture
def mock_generation():
    """Generation service stand-in; set ``generate.return_value`` per test."""
    generation = Mock()
    generation.is_available = True
    generation.generate = AsyncMock()
    return generation


@pytest.fixture
def export_pipeline():
    return ExportPipeline()


@pytest.fixture
def slides_reply():
    """Build a raw generation reply holding one slide per title."""
    def build(*titles: str, points: int = 2) -> str:
        return json.dumps({
            "slides": [
                {"title": title, "content": [f"{title} point {i + 1}" for i in range(points)]}
                for title in titles
            ]
        })
    return build
