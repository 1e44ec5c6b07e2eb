"""Application configuration from environment."""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root (parent of app/); .env is loaded from here so it works regardless of CWD
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Gemini
    gemini_api_key: str = ""
    gemini_text_model: str = "gemini-2.5-flash"
    gemini_image_model: str = "gemini-2.5-flash-image"
    alt_text_max_tokens: int = 100

    # Database (postgresql+asyncpg://... in production, sqlite+aiosqlite:// for tests)
    database_url: str = ""

    @property
    def database_url_sync(self) -> str:
        """Sync URL for Alembic (drop the async driver suffix)."""
        if not self.database_url:
            return ""
        return self.database_url.replace("+asyncpg", "").replace("+aiosqlite", "")

    # Dispatch: in-process APScheduler jobs, or an external service calling /schedule/.../status
    dispatch_enabled: bool = True
    # Shared secret expected in X-Dispatch-Token on status callbacks; empty closes the callback
    dispatch_token: str = ""

    # Platform APIs
    linkedin_api_base: str = "https://api.linkedin.com"
    twitter_api_base: str = "https://api.twitter.com"
    # OAuth token endpoint used to refresh YouTube credentials
    google_token_uri: str = "https://oauth2.googleapis.com/token"

    # App
    log_level: str = "INFO"


settings = Settings()
