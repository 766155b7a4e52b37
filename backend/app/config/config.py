from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_version: str = "0.1.0"
    cors_origins: list[str] = ["http://localhost:3000"]
    github_token: str = Field(default="", validation_alias="GITHUB_PERSONAL_ACCESS_TOKEN")
    github_graphql_url: str = "https://api.github.com/graphql"
    default_path: str = "the-road-to-learn-react/the-road-to-learn-react"
    fetch_on_startup: bool = True
    fetch_policy: Literal["last_write_wins", "cancel_stale"] = "last_write_wins"
    request_timeout_seconds: float = 10.0


settings = Settings()
