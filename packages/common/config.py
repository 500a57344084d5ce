from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Strongly-typed settings model loaded from env / .env.

    Notes:
        - Every field has a local-development default; deployments override via env.
        - `QUESTION_BANK_PATH` unset means the built-in seed event is served.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        protected_namespaces=()
    )

    ENV: str = Field(default="dev", description="Deployment environment, e.g. dev/staging/prod")
    SERVICE_NAME: str = Field(default="sprintscore-assessment", description="Service name")
    LOG_LEVEL: str = Field(default="INFO", description="Root logging level")

    QUESTION_BANK_PATH: Optional[str] = Field(default=None, description="YAML/JSON question bank file")
    EVENT_OPEN: bool = Field(default=True, description="Whether teams may submit answers")
    LEADERBOARD_VISIBILITY: Literal["ADMIN_ONLY", "TEAMS"] = Field(
        default="ADMIN_ONLY", description="Who may read the leaderboard"
    )


@lru_cache()
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance."""
    return Settings()
