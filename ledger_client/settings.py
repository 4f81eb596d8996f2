# ledger_client/settings.py
# -*- coding: utf-8 -*-
"""
Typed settings for ledger-client.

Requirements:
  - pydantic>=2.5
  - pydantic-settings>=2.0

Environment variables use the LEDGER_ prefix (nested: LEDGER_LOGGING__LEVEL).
The legacy SEQADDR variable is honoured for the API host.
"""

from __future__ import annotations

import json
import sys
from functools import lru_cache
from typing import Any, Dict, Literal

from pydantic import AliasChoices, BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.retry import RetryPolicy

DEFAULT_API_HOST = "api.seq.com"


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    json_format: bool = Field(default=True, validation_alias=AliasChoices("json_format", "json"))
    # library loggers that tend to be chatty at INFO
    quiet_loggers: Dict[str, str] = Field(
        default_factory=lambda: {"httpx": "WARNING", "httpcore": "WARNING"}
    )


class ClientSettings(BaseSettings):
    """
    Connection, retry and session settings for a ledger client.
    Loads from environment and optional .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        populate_by_name=True,
        validate_default=True,
        extra="ignore",
    )

    api_host: str = Field(
        default=DEFAULT_API_HOST,
        validation_alias=AliasChoices("api_host", "LEDGER_API_HOST", "SEQADDR"),
    )
    scheme: Literal["https", "http"] = Field(default="https")

    # Retry (milliseconds)
    retry_timeout_ms: int = Field(default=120_000, gt=0)
    retry_connection_timeout_ms: int = Field(default=5_000, gt=0)
    retry_base_delay_ms: int = Field(default=40, gt=0)
    retry_max_delay_ms: int = Field(default=20_000, gt=0)
    # Machine codes that are never retried even if the backend flags them retriable
    never_retry_codes: list[str] = Field(default_factory=list)

    # HTTP
    request_timeout_seconds: float = Field(default=60.0, gt=0)
    connect_timeout_seconds: float = Field(default=5.0, gt=0)
    user_agent: str = Field(default="ledger-client-python/1.0")

    # Session
    session_refresh_window_seconds: float = Field(default=30.0, ge=0)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def _validate_delays(self) -> "ClientSettings":
        if self.retry_max_delay_ms < self.retry_base_delay_ms:
            raise ValueError("retry_max_delay_ms cannot be lower than retry_base_delay_ms")
        return self

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.api_host}"

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            base_delay_ms=self.retry_base_delay_ms,
            max_delay_ms=self.retry_max_delay_ms,
            connection_timeout_ms=self.retry_connection_timeout_ms,
            timeout_ms=self.retry_timeout_ms,
        )

    def asdict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        return json.dumps(self.asdict(), ensure_ascii=False, indent=2)


@lru_cache(maxsize=1)
def get_settings() -> ClientSettings:
    """
    Lazy singleton. Reads from env and optional .env exactly once.
    Usage:
        from ledger_client.settings import get_settings
        settings = get_settings()
    """
    try:
        s = ClientSettings()
    except ValidationError as e:
        # Fail fast with clear diagnostics
        print("Invalid ledger-client configuration:", file=sys.stderr)
        print(e, file=sys.stderr)
        raise
    return s


__all__ = ["ClientSettings", "LoggingConfig", "get_settings", "DEFAULT_API_HOST"]
