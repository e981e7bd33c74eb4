from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Strategy = Literal["auto", "passthrough", "storage_path", "hash_segment"]


class LinkSettings(BaseSettings):
    """
    Download link derivation.

    ``tenant_id`` is required unless the strategy is ``passthrough``: every
    other strategy can build console URLs, which embed it.

    Env:
      LINKS_CONSOLE_HOST, LINKS_TENANT_ID, LINKS_EXTERNAL_DOWNLOAD_ENDPOINT,
      LINKS_STRATEGY
    """

    console_host: str = Field(default="console.cloudinary.com")
    tenant_id: str = Field(default="")
    external_download_endpoint: str = Field(default="https://drive.google.com/uc")
    strategy: Strategy = Field(default="auto")

    model_config = SettingsConfigDict(
        env_prefix="LINKS_",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_tenant(self) -> "LinkSettings":
        self.tenant_id = self.tenant_id.strip().strip("/")
        if self.strategy != "passthrough" and not self.tenant_id:
            raise ValueError(f"LINKS_TENANT_ID is required for strategy '{self.strategy}'")
        return self


@lru_cache
def get_link_settings(**kwargs) -> LinkSettings:
    filtered = {k: v for k, v in kwargs.items() if v is not None}
    return LinkSettings(**filtered)
