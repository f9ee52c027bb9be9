"""Configuration management for MediaForge.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the MEDIAFORGE_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (MEDIAFORGE_* prefix)
2. .env file in the project root
3. Default values defined in MediaForgeConfig

Example .env file:
    MEDIAFORGE_PRO_IMAGE_MODEL=gemini-3-pro-image-preview
    MEDIAFORGE_POLL_INTERVAL_SECONDS=5
    MEDIAFORGE_MAX_POLL_ATTEMPTS=120
    MEDIAFORGE_DATA_DIR=data

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from mediaforge.core.config import config

    print(config.video_model)
    print(config.poll_interval_seconds)

Backend Models
--------------
Each generation mode talks to a specific Gemini model variant:
- pro_image_model: primary image tier (supports explicit image size)
- flash_image_model: image fallback tier and image editing
- analysis_model: text answers about an uploaded image
- video_model: asynchronous Veo video synthesis

Credentials are deliberately NOT part of this configuration. The API key is
supplied by the user at runtime and persisted in durable storage, or picked
up by the SDK from GEMINI_API_KEY / GOOGLE_API_KEY.

See Also
--------
- MediaForgeConfig: Full configuration class documentation
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MediaForgeConfig(BaseSettings):
    """Main configuration for MediaForge.

    Values are loaded from environment variables with the MEDIAFORGE_ prefix,
    with fallback to defaults defined here. All Path fields are created on
    initialisation if they don't exist.

    Attributes
    ----------
    Backend Models:
        pro_image_model : str
            High-quality image model tried first
        flash_image_model : str
            Image model used as fallback tier and for edits
        analysis_model : str
            Text model used for image analysis
        video_model : str
            Video synthesis model

    Video Job Polling:
        poll_interval_seconds : float
            Constant wait between job status queries
        max_poll_attempts : int | None
            Optional ceiling on status queries (None = poll until terminal)
        download_timeout_seconds : float
            HTTP timeout for fetching the finished video

    Storage:
        data_dir : Path
            Directory holding durable key/value storage (gallery, api key)
        media_dir : Path
            Directory holding downloaded video blobs
        storage_quota_bytes : int
            Capacity of durable storage across all keys

    Server Settings:
        server_host : str
            Server bind address
        server_port : int
            Server port (1024-65535)

    Examples
    --------
        >>> custom_config = MediaForgeConfig(
        ...     poll_interval_seconds=1.0,
        ...     max_poll_attempts=10,
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MEDIAFORGE_",
        case_sensitive=False,
    )

    # Backend model variants
    pro_image_model: str = Field(
        default="gemini-3-pro-image-preview",
        description="Primary image model (aspect ratio and image size controls)",
    )
    flash_image_model: str = Field(
        default="gemini-2.5-flash-image",
        description="Fallback image model and image edit model (aspect ratio only)",
    )
    analysis_model: str = Field(
        default="gemini-2.5-flash",
        description="Text model for image analysis",
    )
    video_model: str = Field(
        default="veo-3.1-fast-generate-preview",
        description="Video synthesis model",
    )

    # Video job polling
    poll_interval_seconds: float = Field(
        default=5.0,
        description="Seconds to wait between video job status queries",
        gt=0,
    )
    max_poll_attempts: int | None = Field(
        default=None,
        description="Maximum status queries per video job (None = unbounded)",
        ge=1,
    )
    download_timeout_seconds: float = Field(
        default=120.0,
        description="Timeout for downloading a finished video",
        gt=0,
    )

    # Storage
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for durable key/value storage",
    )
    media_dir: Path = Field(
        default=Path("data/media"),
        description="Directory for downloaded video files",
    )
    storage_quota_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Durable storage capacity in bytes (all keys combined)",
        ge=1,
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=8080,
        description="Server port",
        ge=1024,
        le=65535,
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create required directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.media_dir.mkdir(parents=True, exist_ok=True)


# Global configuration instance
# Loads values from environment variables (MEDIAFORGE_* prefix) and .env file.
config = MediaForgeConfig()
