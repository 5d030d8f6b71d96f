"""
SlideChat - Main Application Entry Point

Conversational slide deck builder: chat with an AI assistant to create,
extend and revise a presentation, then download it as PowerPoint.
"""
from dotenv import load_dotenv

# Load .env before settings and tracing read the environment
load_dotenv()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.core import get_settings, is_tracing_enabled, setup_logging, setup_tracing
from src.api.routes import chat, export, sessions

setup_logging(logging.DEBUG if get_settings().debug else logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown."""
    settings = get_settings()

    # Startup
    logger.info(f"🚀 Starting {settings.app_name}...")
    settings.ensure_directories()

    if settings.debug:
        logger.info("🐛 Debug mode is \033[92mACTIVE\033[0m")

    # Initialize tracing (if enabled)
    if setup_tracing():
        logger.info("📡 OpenTelemetry tracing is active")

    # Log configuration
    logger.info(f"🤖 LLM Provider: \033[96m{settings.llm_provider}\033[0m")
    logger.info(f"💾 Persistence: \033[96m{settings.persistence_provider}\033[0m")
    logger.info(f"📁 Data directory: \033[93m{settings.data_dir}\033[0m")
    tracing_color = "\033[92m" if is_tracing_enabled() else "\033[91m"
    logger.info(f"🔍 Tracing enabled: {tracing_color}{is_tracing_enabled()}\033[0m")

    if not settings.has_azure_openai:
        logger.warning("⚠️  Azure OpenAI not configured - chat turns will report a configuration error")

    yield

    # Shutdown
    logger.info(f"👋 Shutting down {settings.app_name}...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Conversational slide deck builder with PowerPoint export",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    # Include API routers
    app.include_router(chat.router, tags=["chat"])
    app.include_router(sessions.router, tags=["sessions"])
    app.include_router(export.router, tags=["export"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "app_name": settings.app_name,
            "llm_provider": settings.llm_provider,
            "persistence_provider": settings.persistence_provider,
            "tracing_enabled": is_tracing_enabled(),
        }

    @app.get("/api/config")
    async def get_public_config():
        """Get public configuration."""
        return {
            "app_name": settings.app_name,
            "llm_enabled": settings.llm_provider != "none",
            "persistence_provider": settings.persistence_provider,
            "default_session_title": settings.default_session_title,
            "export_filename": settings.export_filename,
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
