"""Application settings (env/.env)."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .joplin_client import JoplinClientConfig


class Settings(BaseSettings):
    """Settings for the MCP server and Joplin Data API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    joplin_token: str = Field(alias="JOPLIN_TOKEN", min_length=1)
    joplin_host: str = Field(default="127.0.0.1", alias="JOPLIN_HOST")
    joplin_port: int = Field(default=41184, alias="JOPLIN_PORT", ge=1, le=65535)
    joplin_max_pages: int = Field(default=1000, alias="JOPLIN_MAX_PAGES", ge=1)

    http_timeout_seconds: float = Field(
        default=15.0,
        alias="HTTP_TIMEOUT_SECONDS",
        gt=0,
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    log_file: str | None = Field(default=None, alias="LOG_FILE")

    mcp_transport: Literal["stdio", "streamable-http"] = Field(
        default="stdio", alias="MCP_TRANSPORT"
    )
    mcp_api_key: str | None = Field(default=None, alias="MCP_API_KEY")
    mcp_host: str = Field(default="127.0.0.1", alias="MCP_HOST")
    mcp_port: int = Field(default=5005, alias="MCP_PORT", ge=1, le=65535)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    def client_config(self) -> JoplinClientConfig:
        return JoplinClientConfig(
            token=self.joplin_token,
            port=self.joplin_port,
            host=self.joplin_host,
            timeout_seconds=self.http_timeout_seconds,
            max_pages=self.joplin_max_pages,
        )
