from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    server_port: int = 8000
    # The hosted client calls from arbitrary origins; tighten per deployment
    allowed_origins: List[str] = ["*"]
    database_url: str = "sqlite+aiosqlite:///./chronochat.db"
    log_level: str = "INFO"

    # Gemini config
    gemini_api_key: Optional[str] = None
    google_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash-exp"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    provider_timeout_seconds: float = 60.0

    # Identity provider (HS256 shared secret, e.g. a Supabase project JWT secret)
    auth_jwt_secret: Optional[str] = None
    auth_jwt_audience: Optional[str] = "authenticated"

    # Orchestration policy
    history_limit: Optional[int] = Field(default=None, ge=1)
    enforce_boost_balance: bool = False
    fail_on_user_message_write: bool = False

    # pydantic-settings v2 style config: load env from both ../.env (repo root) and .env
    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=("../.env", ".env"),
        extra="ignore",  # ignore env vars not defined as fields
    )

    @property
    def provider_api_key(self) -> Optional[str]:
        return self.gemini_api_key or self.google_api_key


@lru_cache()
def get_settings() -> Settings:
    return Settings()
