"""Environment-driven settings for the Linear MCP server."""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from environment variables or a local .env file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Static personal API key or OAuth access token. When unset, use linear_auth.
    linear_access_token: Optional[str] = None

    linear_api_url: str = "https://api.linear.app/graphql"
    linear_oauth_authorize_url: str = "https://linear.app/oauth/authorize"
    linear_oauth_token_url: str = "https://api.linear.app/oauth/token"
    linear_oauth_scopes: str = "read,write,issues:create"
    linear_request_timeout: float = 30.0

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
