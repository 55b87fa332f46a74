"""
Centralized configuration management.

All application configuration is loaded and validated here.
"""
import os
import logging
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Application settings with validation."""

    # Canvas and grid mapping
    canvas_width: int = Field(default=1920, ge=320, le=10000, description="Default canvas width in pixels")
    canvas_height: int = Field(default=1080, ge=240, le=10000, description="Default canvas height in pixels")
    grid_padding: int = Field(default=20, ge=0, le=500, description="Outer padding when mapping grid cells")
    grid_gap: int = Field(default=16, ge=0, le=500, description="Gap between grid cells")
    snap_grid_size: int = Field(default=20, ge=1, le=500, description="Snap-to-grid step in pixels")

    # History
    max_history: int = Field(default=50, ge=2, le=1000, description="Maximum undo snapshots kept")
    history_debounce_ms: int = Field(default=300, ge=0, le=10000, description="Delay before an edit burst is snapshotted")

    # Dataset limits
    max_dataset_rows: int = Field(default=100000, ge=100, le=5000000, description="Maximum rows accepted for analysis")

    # Rate limiting
    rate_limit_per_minute: int = Field(default=30, ge=1, le=1000, description="Analysis requests per minute per IP")

    # Request timeout
    request_timeout_seconds: int = Field(default=60, ge=1, le=3600, description="Request timeout in seconds")

    # CORS
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v.upper()

    @property
    def history_debounce_seconds(self) -> float:
        return self.history_debounce_ms / 1000

    @property
    def allowed_origins_list(self) -> List[str]:
        """Get allowed origins as a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            canvas_width=int(os.getenv("CANVAS_WIDTH", "1920")),
            canvas_height=int(os.getenv("CANVAS_HEIGHT", "1080")),
            grid_padding=int(os.getenv("GRID_PADDING", "20")),
            grid_gap=int(os.getenv("GRID_GAP", "16")),
            snap_grid_size=int(os.getenv("SNAP_GRID_SIZE", "20")),
            max_history=int(os.getenv("MAX_HISTORY", "50")),
            history_debounce_ms=int(os.getenv("HISTORY_DEBOUNCE_MS", "300")),
            max_dataset_rows=int(os.getenv("MAX_DATASET_ROWS", "100000")),
            rate_limit_per_minute=int(os.getenv("RATE_LIMIT_PER_MINUTE", "30")),
            request_timeout_seconds=int(os.getenv("REQUEST_TIMEOUT_SECONDS", "60")),
            allowed_origins=os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info("Configuration loaded and validated successfully")
    return _settings


def reload_settings() -> Settings:
    """Reload settings (useful for testing)."""
    global _settings
    _settings = None
    return get_settings()
