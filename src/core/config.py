"""
Application settings using Pydantic for validation and type safety.
Security: All sensitive values loaded from environment variables.
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration with validation and security best practices."""

    # Application
    app_name: str = Field(default="SlideChat", description="Application name")
    debug: bool = Field(default=False, description="Debug mode flag")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=7004, ge=1, le=65535, description="Server port")

    # Paths (relative to workspace root)
    data_dir: Path = Field(default=Path("data"), description="Data directory")

    @property
    def local_store_dir(self) -> Path:
        """Get the local fallback key/value store directory."""
        return self.data_dir / "local_store"

    # Azure OpenAI Configuration
    azure_openai_api_key: Optional[str] = Field(
        default=None,
        description="Azure OpenAI API key (sensitive)"
    )
    azure_openai_endpoint: Optional[str] = Field(
        default=None,
        description="Azure OpenAI endpoint URL"
    )
    azure_openai_deployment: str = Field(
        default="gpt-4o",
        description="Azure OpenAI deployment name for slide generation"
    )
    azure_openai_api_version: str = Field(
        default="2024-10-21",
        description="Azure OpenAI API version"
    )
    azure_openai_use_entra_id: bool = Field(
        default=False,
        description="Authenticate with DefaultAzureCredential instead of an API key"
    )

    # Supabase Configuration (remote persistence)
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL"
    )
    supabase_anon_key: Optional[str] = Field(
        default=None,
        description="Supabase anonymous key (sensitive)"
    )
    supabase_sessions_table: str = Field(default="sessions", description="Sessions table name")
    supabase_messages_table: str = Field(default="messages", description="Messages table name")
    supabase_slides_table: str = Field(default="slides", description="Slides table name")

    # Generation Configuration
    generation_max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total attempts against the generation service, first call included"
    )
    generation_base_delay: float = Field(
        default=1.0,
        ge=0,
        description="Initial backoff delay in seconds, doubled after every overloaded attempt"
    )
    history_window: int = Field(
        default=5,
        ge=0,
        le=50,
        description="Number of prior messages rendered into the generation prompt"
    )

    # Export Configuration
    export_max_visible_items: int = Field(
        default=7,
        ge=1,
        le=20,
        description="Bullets rendered per slide before the overflow summary line"
    )
    export_filename: str = Field(default="presentation.pptx", description="Download file name")
    export_author: str = Field(default="SlideChat", description="Presentation author metadata")
    export_title: str = Field(default="AI Generated Presentation", description="Presentation title metadata")

    # Session Configuration
    default_session_title: str = Field(default="New Chat", description="Title given to fresh sessions")
    title_max_length: int = Field(
        default=50,
        ge=10,
        le=200,
        description="Maximum inferred session title length before truncation"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    # Tracing Configuration (Optional - disabled by default)
    tracing_enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing"
    )
    tracing_service_name: str = Field(
        default="slidechat",
        description="Service name for tracing"
    )
    applicationinsights_connection_string: Optional[str] = Field(
        default=None,
        description="Azure Application Insights connection string for cloud tracing"
    )

    @property
    def has_azure_openai(self) -> bool:
        """Check if Azure OpenAI is fully configured."""
        return bool(
            (self.azure_openai_api_key or self.azure_openai_use_entra_id)
            and self.azure_openai_endpoint
            and self.azure_openai_deployment
        )

    @property
    def llm_provider(self) -> str:
        """Get the active LLM provider name."""
        if self.has_azure_openai:
            return "azure"
        return "none"

    @property
    def has_supabase(self) -> bool:
        """Check if the Supabase remote store is configured."""
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def persistence_provider(self) -> str:
        """Get the active persistence backend name."""
        if self.has_supabase:
            return "supabase"
        return "local"

    @field_validator("data_dir")
    @classmethod
    def validate_data_dir(cls, v: Path) -> Path:
        """Ensure data directory path is valid."""
        return Path(v)

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        for dir_path in [self.data_dir, self.local_store_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        env_prefix = ""
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Using lru_cache ensures settings are loaded once and reused.
    """
    return Settings()
