"""API routes for SlideChat."""

from .routes import chat, export, sessions

__all__ = [
    "chat",
    "export",
    "sessions",
]
