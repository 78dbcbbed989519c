from functools import lru_cache
import json
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(env_file=str(BACKEND_ENV_FILE), env_file_encoding="utf-8")

    project_name: str = "Timetable Admin API"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./timetable.db"

    max_request_size_bytes: int = 2_500_000

    default_academic_year: str = "2024-2025"
    default_semester: str = "1"

    part_time_unit_cap: int = 18
    full_time_unit_cap: int = 24
    # Stored instead of infinity so the column stays a plain integer.
    overload_unit_limit: int = 999

    workload_batch_fail_fast: bool = True
    enforce_minimum_hours: bool = False

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    parsed = json.loads(stripped)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return (value or "INFO").strip().upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()
