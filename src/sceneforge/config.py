"""Configuration management."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key (inspection and narration splitting)"
    )
    google_application_credentials: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_APPLICATION_CREDENTIALS", ""),
        description="Path to Google Cloud service account JSON"
    )
    google_cloud_project: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_CLOUD_PROJECT", ""),
        description="Google Cloud project ID"
    )
    google_location: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1"),
        description="Vertex AI region"
    )
    veo_output_bucket: Optional[str] = Field(
        default_factory=lambda: os.getenv("VEO_OUTPUT_BUCKET") or None,
        description="Optional GCS bucket for Veo output"
    )

    # Paths
    workspace: Path = Field(
        default_factory=lambda: Path(os.getenv("SCENEFORGE_WORKSPACE", ".")),
        description="Workspace directory"
    )

    # Model settings
    default_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Default Claude model"
    )
    imagen_model: str = Field(
        default_factory=lambda: os.getenv("IMAGEN_MODEL", "imagen-3.0-generate-002"),
        description="Imagen model name"
    )
    veo_model: str = Field(
        default_factory=lambda: os.getenv("VEO_MODEL", "veo-2.0-generate-001"),
        description="Veo model name"
    )
    tts_language: str = Field(
        default_factory=lambda: os.getenv("TTS_LANGUAGE", "ko-KR"),
        description="Text-to-Speech language code"
    )

    # Pipeline pacing (seconds)
    retry_count: int = Field(
        default_factory=lambda: _env_int("SCENEFORGE_RETRY_COUNT", 3),
        description="Retries for transient remote failures",
        ge=0
    )
    retry_base_delay: float = Field(
        default_factory=lambda: _env_float("SCENEFORGE_RETRY_DELAY", 4.0),
        description="First backoff delay; doubles on each retry",
        ge=0
    )
    scene_delay: float = Field(
        default_factory=lambda: _env_float("SCENEFORGE_SCENE_DELAY", 2.0),
        description="Pause between scenes",
        ge=0
    )

    # Quota / storage
    daily_quota_limit: int = Field(
        default_factory=lambda: _env_int("SCENEFORGE_DAILY_LIMIT", 1500),
        description="Estimated daily request allowance"
    )
    project_key: str = Field(
        default="current_project",
        description="Store key holding the active script document"
    )

    class Config:
        """Pydantic config."""
        frozen = False

    @property
    def store_dir(self) -> Path:
        """Directory backing the file store."""
        return self.workspace / ".sceneforge"

    @property
    def assets_dir(self) -> Path:
        """Directory where generated media is written."""
        return self.workspace / "assets"

    def validate_required(self) -> None:
        """Validate that required credentials are set."""
        if not self.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY not set")

    def validate_google_required(self) -> None:
        """Validate that Google Cloud settings are usable.

        Raises:
            ValueError: If any required Google configuration is missing.
        """
        missing: list[str] = []

        if not self.google_cloud_project:
            missing.append("GOOGLE_CLOUD_PROJECT")

        if missing:
            raise ValueError(
                f"Missing required Google configuration: {', '.join(missing)}. "
                "Set the corresponding environment variables."
            )

        # Validate bucket format
        if self.veo_output_bucket and not self.veo_output_bucket.startswith("gs://"):
            raise ValueError(
                f"VEO_OUTPUT_BUCKET must be a GCS URI starting with 'gs://'. "
                f"Got: {self.veo_output_bucket}"
            )


# Global config instance
config = Config()
