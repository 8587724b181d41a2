from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """
    Runtime settings, read from `MINISTRY_*` environment variables.

    With nothing set the API uses a SQLite file at the repo root, the YAML
    route rules under config/, and seeds the demo organisation on startup.
    Session-token settings live in ministry.identity (SESSION_* variables).
    """

    model_config = SettingsConfigDict(env_prefix="MINISTRY_", extra="ignore")

    db_url: str | None = None
    db_echo: bool = False
    security_config_path: str | None = None
    log_level: str = "INFO"
    seed_demo_data: bool = True

    def resolved_db_url(self) -> str:
        return self.db_url or f"sqlite:///{REPO_ROOT / 'ministry.db'}"

    def resolved_security_config_path(self) -> Path:
        if self.security_config_path:
            return Path(self.security_config_path)
        return REPO_ROOT / "config" / "security_config.yaml"


@lru_cache
def get_settings() -> Settings:
    return Settings()
