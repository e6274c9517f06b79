"""Explorer configuration.

Settings are read from ``FILE_AGENT_*`` environment variables and an
optional ``.env`` file; every value has a default matching the stock file
agent installation.
"""

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class ExplorerSettings(BaseSettings):
    """Configuration for an explorer session."""

    model_config = SettingsConfigDict(
        env_prefix="FILE_AGENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Agent connection
    base_url: str = Field(default="http://localhost:8767/api", description="Agent API base URL")
    token: str = Field(default="default-token-12345", description="Agent access token")
    request_timeout: float = Field(default=10.0, gt=0, description="Default request timeout (s)")
    health_timeout: float = Field(default=3.0, gt=0, description="Health check timeout (s)")
    binary_timeout: float = Field(default=30.0, gt=0, description="Binary read timeout (s)")
    connection_poll_interval: float = Field(
        default=10.0, gt=0, description="Seconds between background health checks"
    )

    # Caches and history
    directory_cache_size: int = Field(default=100, gt=0)
    search_cache_size: int = Field(default=50, gt=0)
    history_size: int = Field(default=50, gt=0)
    prefetch_children: int = Field(default=5, ge=0, description="Child dirs queued per navigation")
    prefetch_queue_size: int = Field(default=50, gt=0)

    # Search
    search_debounce: float = Field(default=0.2, ge=0, description="Typing debounce (s)")
    default_root: str = Field(default="C:\\", description="Search root when nothing is open")

    # Virtual list
    item_height: int = Field(default=36, gt=0)
    buffer_items: int = Field(default=10, ge=0)
    initial_visible_items: int = Field(default=50, gt=0)
    virtual_threshold: int = Field(default=1000, gt=0)
    scroll_throttle: float = Field(default=0.016, ge=0, description="Scroll recompute interval (s)")

    # Status line
    error_display_seconds: float = Field(default=5.0, gt=0)

    # Audio
    waveform_width: int = Field(default=800, gt=0)
    waveform_height: int = Field(default=120, gt=0)
    progress_interval: float = Field(default=1 / 30, gt=0)
    peak_meter_interval: float = Field(default=1 / 60, gt=0)

    # Drives probed at startup
    drive_letters: str = Field(default="CDEFGH")


def get_settings() -> ExplorerSettings:
    """Load settings from the environment."""
    settings = ExplorerSettings()
    logger.debug(f"Loaded explorer settings for {settings.base_url}")
    return settings
