from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MongoSettings(BaseSettings):
    """
    Artifact registry settings.

    Env support:
      - MONGO_URL, MONGO_DB, MONGO_COLLECTION, MONGO_SERVER_SELECTION_TIMEOUT_MS
      - Also accepts MONGO_DB_URI as a fallback.
    """

    url: Optional[str] = Field(default=None)
    db: str = Field(default="doc_relay")
    collection: str = Field(default="artifacts")
    server_selection_timeout_ms: int = Field(default=5000)

    model_config = SettingsConfigDict(
        env_prefix="MONGO_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def resolved_url(self) -> str:
        url = self.url or os.getenv("MONGO_DB_URI")
        if not url:
            raise ValueError("MONGO_URL or MONGO_DB_URI must be set for the artifact registry")
        return url


@lru_cache
def get_mongo_settings(**kwargs) -> MongoSettings:
    filtered = {k: v for k, v in kwargs.items() if v is not None}
    return MongoSettings(**filtered)
