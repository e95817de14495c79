from pydantic import AliasChoices
from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

from chronicle.models import PinnedRepoConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Values are read from process environment and optionally from `.env`.
    `PINNED` and `STACK` are JSON encoded lists.
    """

    github_token: str | None = Field(
        default=None, validation_alias=AliasChoices("github_token", "token")
    )
    github_username: str | None = None
    github_graphql_url: str = "https://api.github.com/graphql"
    http_timeout_seconds: float = 20.0
    pinned: list[PinnedRepoConfig] = []
    stack: list[str] = []
    output_path: str = "data.json"
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    environment: str = "development"
    release: str | None = None
    sentry_traces_sample_rate: float = 0.1
    rate_limit_per_minute: int = 30
    rate_limit_window_seconds: int = 60

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", populate_by_name=True
    )
