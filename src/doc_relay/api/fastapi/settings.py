from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiConfig(BaseSettings):
    version: str = "v0"
    routers_path: str | None = None
    cors_origins: list[str] | None = None
    public_base_url: str | None = None
    # How GET /artifacts/{id}/download presents the resolved link
    resolve_mode: Literal["json", "redirect"] = "json"
    max_request_bytes: int | None = 50_000_000

    model_config = SettingsConfigDict(
        env_prefix="API_",            # API_RESOLVE_MODE, API_CORS_ORIGINS, ...
        env_file=".env",
        extra="ignore",
    )
