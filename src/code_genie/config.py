"""Environment-driven settings shared by the API and CLI."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings

from code_genie.generator import DEFAULT_MODEL_NAME
from code_genie.store import DEFAULT_HISTORY_CAPACITY


class Settings(BaseSettings):
    gemini_model: str = DEFAULT_MODEL_NAME
    app_env: str = "development"
    allowed_origins: str = "https://vibe-qoder.vercel.app,http://localhost:3000,http://127.0.0.1:3000"
    history_db_path: Path = Path(".code_genie/history.db")
    history_capacity: int = DEFAULT_HISTORY_CAPACITY
    host: str = "127.0.0.1"
    port: int = 3001
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def origins(self) -> list[str]:
        """Allowed CORS origins with trailing slashes removed."""
        return [origin.strip().rstrip("/") for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


settings = Settings()
