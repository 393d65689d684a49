from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Storage: "file" = single JSON array, "tree" = data_dir/YYYY/MM.json, "github" = remote repo only
    storage_backend: Literal["file", "tree", "github"] = "tree"
    data_file: str = "fitness_data.json"
    data_dir: str = "fitness_data"
    partition_layout: Literal["month", "day"] = "month"  # "day" -> YYYY/MM/DD.json

    # Seconds between full reloads from storage; 0 disables the ticker.
    refresh_interval_seconds: float = 300.0

    # GitHub Contents API. With a local backend a token turns on mirroring.
    github_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("UP_TOK", "GITHUB_TOKEN", "github_token"),
    )
    github_repo: str = "prkpwm/fitness-tracker-backend"
    github_branch: str | None = None
    github_path_prefix: str = "fitness_data"
    github_api_url: str = "https://api.github.com"
    github_timeout_seconds: float = 15.0

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
