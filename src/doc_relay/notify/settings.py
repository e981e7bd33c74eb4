from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class NotifySettings(BaseSettings):
    """
    Outbound link delivery. Recipients are always supplied per request.

    Env:
      NOTIFY_BACKEND, NOTIFY_SMTP_HOST, NOTIFY_SMTP_PORT, NOTIFY_USERNAME,
      NOTIFY_PASSWORD, NOTIFY_SENDER, NOTIFY_SUBJECT, NOTIFY_USE_TLS
    """

    backend: Literal["null", "smtp"] = Field(default="null")
    smtp_host: Optional[str] = Field(default=None)
    smtp_port: int = Field(default=587)
    username: Optional[str] = Field(default=None)
    password: SecretStr = Field(default=SecretStr(""))
    sender: Optional[str] = Field(default=None)
    subject: str = Field(default="Your document download link")
    use_tls: bool = Field(default=True)
    timeout_seconds: float = Field(default=30.0)

    model_config = SettingsConfigDict(
        env_prefix="NOTIFY_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_notify_settings(**kwargs) -> NotifySettings:
    filtered = {k: v for k, v in kwargs.items() if v is not None}
    return NotifySettings(**filtered)
