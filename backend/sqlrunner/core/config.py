from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import AnyUrl, BeforeValidator, HttpUrl, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Use top level .env file (one level above ./backend/)
        env_file="../.env",
        env_ignore_empty=True,
        extra="ignore",
    )
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "pysqlrunner"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    SENTRY_DSN: HttpUrl | None = None
    LOG_LEVEL: str = "INFO"

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    # Where connection profiles come from: "memory" (seeded from PROFILES_FILE)
    # or "database" (ConnectionProfile table in DATABASE_URL).
    PROFILE_STORE: Literal["memory", "database"] = "memory"
    PROFILES_FILE: Path | None = None
    DATABASE_URL: str = "sqlite:///./sqlrunner.db"

    # Relative script paths are resolved against this directory.
    SQL_WORKSPACE_DIR: Path = Path(".")
    SQL_DEFAULT_MAX_ROWS: int = 1000

    # Out-of-band connection probes (POST /connections/test)
    CONNECTION_TEST_TIMEOUT: int = 5


settings = Settings()  # type: ignore
