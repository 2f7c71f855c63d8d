"""Application settings."""

from functools import lru_cache
import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "content-orchestrator"
    app_env: str = "dev"
    log_level: str = "INFO"
    api_host: str = "127.0.0.1"
    api_port: int = Field(default=8000, ge=1, le=65535)
    state_backend: str = "memory"
    database_url: str = ""
    state_ttl_s: int = Field(default=7200, ge=60)
    time_budget_s: float = Field(default=270.0, gt=0.0)
    max_resume_count: int = Field(default=5, ge=0)
    agent_max_tokens: int = Field(default=4096, ge=1)
    critique_max_turns: int = Field(default=30, ge=1)
    critic_concurrency: int = Field(default=2, ge=1)
    llm_model: str = "claude-sonnet-4-5-20250929"
    llm_base_url: str = "https://api.anthropic.com/v1"
    llm_api_version: str = "2023-06-01"
    llm_timeout_s: float = Field(default=120.0, ge=0.5)
    llm_max_retries: int = Field(default=1, ge=0)
    llm_backoff_s: float = Field(default=0.5, ge=0.0)
    anthropic_api_key: str = ""

    model_config = SettingsConfigDict(
        env_prefix="CONTENT_ORCHESTRATOR_",
        extra="ignore",
        env_file=(PROJECT_ROOT / ".env", PROJECT_ROOT / ".env.local"),
        env_file_encoding="utf-8",
    )

    def resolved_database_url(self) -> str:
        return self.database_url or os.getenv("ORCHESTRATOR_DATABASE_URL", "")

    def resolved_anthropic_api_key(self) -> str:
        return self.anthropic_api_key or os.getenv("ANTHROPIC_API_KEY", "")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
