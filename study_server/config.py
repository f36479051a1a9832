from __future__ import annotations

import logging
import sys
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the study server programs.

    All values are loaded from environment variables with `STUDY_` prefix.
    You can also use a `.env` file in the working directory during development.
    """

    model_config = SettingsConfigDict(
        env_prefix="STUDY_",
        env_file=".env",
        extra="ignore",
    )

    # General
    env: str = "dev"
    log_level: str = "INFO"

    # MCP tool server
    server_port: int = 8000
    server_host: str = "0.0.0.0"
    transport: str = "stdio"  # "stdio" or "http"

    # Web demo
    web_host: str = "localhost"
    web_port: int = 3000
    ssr_delay_seconds: float = 1.0

    # Upstream APIs
    github_token: Optional[str] = None
    github_owner: str = ""
    github_api_url: str = "https://api.github.com"
    zipcloud_api_url: str = "https://zipcloud.ibsnet.co.jp/api/search"
    http_timeout: float = 10.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache settings from environment."""
    return Settings()


def configure_logging(settings: Settings) -> None:
    # stdout carries the MCP stream in stdio mode, so logs go to stderr
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
