# app/core/config.py
from __future__ import annotations

import json
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


EnvType = Literal["local", "dev", "staging", "prod"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    APP_NAME: str = "GoalDraftAPI"
    APP_ENV: EnvType = "local"

    # CORS
    CORS_ORIGINS: str | List[str] = Field(
        default='["http://localhost:3000","http://127.0.0.1:3000"]',
        description='JSON list or comma-separated origins',
    )

    # DB
    DATABASE_URL: Optional[str] = None

    # Draft
    DRAFT_PICK_SECONDS: int = Field(default=60, description="Per-pick clock")
    DRAFT_AUTOPICK_SWEEP: bool = False  # background autopick on expired deadlines
    DRAFT_SWEEP_INTERVAL_SECONDS: float = 5.0

    @property
    def IS_LOCAL(self) -> bool:
        return self.APP_ENV == "local"

    # ---------- Validators ----------

    @field_validator("CORS_ORIGINS")
    @classmethod
    def _parse_cors(cls, v):
        # Accept JSON list or comma-separated string
        if isinstance(v, list):
            return v
        s = str(v).strip()
        if not s:
            return []
        try:
            parsed = json.loads(s)
            if isinstance(parsed, list):
                return parsed
        except ValueError:
            pass
        # fallback: comma-separated
        return [p.strip() for p in s.split(",") if p.strip()]

    @field_validator("DRAFT_PICK_SECONDS", "DRAFT_SWEEP_INTERVAL_SECONDS")
    @classmethod
    def _positive(cls, v):
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    # ---------- Runtime validations ----------

    def validate_at_startup(self) -> None:
        """Fail fast with clear messages for misconfigurations."""
        problems: list[str] = []

        # Local falls back to SQLite; hosted envs need a real database
        if not self.IS_LOCAL and not self.DATABASE_URL:
            problems.append("DATABASE_URL is required in non-local env.")

        # CORS must not be empty outside local
        if not self.IS_LOCAL and not self.CORS_ORIGINS:
            problems.append("CORS_ORIGINS must contain at least one allowed origin in non-local env.")

        if problems:
            # Collapse to one helpful error line
            raise RuntimeError("Config validation failed: " + " ".join(problems))


settings = Settings()
