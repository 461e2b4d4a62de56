"""Configuration management for the 100 Days of Craft feed service."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="CRAFT_", extra="ignore"
    )

    # Site identity
    site_url: str = "https://100daysofcraft.com"
    site_title: str = "100 Days of Craft"
    site_description: str = (
        "A journey through web development, design, and digital craftsmanship"
    )
    site_language: str = "en"
    author_name: str = "100 Days of Craft Team"
    author_email: str = "noreply@100daysofcraft.com"

    # Content snapshot exported from the CMS
    content_path: str = Field(default="./content.json")

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # Feed settings
    cache_backend: str = Field(default="memory", pattern="^(memory|redis)$")
    feed_cache_ttl_seconds: int = 3600  # 1 hour
    feed_page_size: int = 30  # 20-30 items is the usual recommendation
    category_page_size: int = 20

    # WebSub
    websub_enabled: bool = True
    websub_hub_url: str = "https://pubsubhubbub.appspot.com/"
    websub_timeout_seconds: float = 10.0

    # Revalidation webhook; empty disables signature checks
    webhook_secret: str = Field(default="")

    # Environment
    env: str = Field(default="dev", pattern="^(dev|prod)$")
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
