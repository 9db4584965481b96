"""Configuration management for the image metadata service."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    ENV: str = "local"
    SERVICE_NAME: str = "image-meta"
    SERVICE_VERSION: str = "0.1.0"

    # GCP Configuration
    GCP_PROJECT_ID: str = ""
    LOG_LEVEL: str = "INFO"

    # MIME probe Configuration
    MIME_PROBE_BYTES: int = 512
    STRICT_MIME_PROBE: bool = False  # True rejects objects shorter than the probe

    # Source Constraints
    MAX_SOURCE_MB: int = 0  # 0 = no cap on the full-body read

    @property
    def gcp_project(self) -> str | None:
        """Project for the storage client, None for default credentials."""
        return self.GCP_PROJECT_ID or None

    @property
    def max_source_bytes(self) -> int:
        """Convert MAX_SOURCE_MB to bytes."""
        return self.MAX_SOURCE_MB * 1024 * 1024


# Singleton settings instance
settings = Settings()
