from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Named allow-lists; a deployment selects one with STORAGE_MEDIA_PROFILE
MEDIA_PROFILES: dict[str, frozenset[str]] = {
    "pdf": frozenset({"application/pdf"}),
    "images": frozenset({"image/jpeg", "image/png", "image/gif", "image/bmp", "image/webp"}),
}


class StorageSettings(BaseSettings):
    """
    Local staging and content policy.

    Env:
      STORAGE_STAGING_DIR, STORAGE_MEDIA_PROFILE, STORAGE_ALLOWED_MEDIA_TYPES,
      STORAGE_MAX_UPLOAD_BYTES
    """

    staging_dir: str = Field(default="uploads")
    media_profile: Literal["pdf", "images"] = Field(default="pdf")
    # Overrides the profile when set (JSON list in env)
    allowed_media_types: Optional[list[str]] = Field(default=None)
    max_upload_bytes: Optional[int] = Field(default=None)

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def resolved_media_types(self) -> frozenset[str]:
        if self.allowed_media_types:
            return frozenset(self.allowed_media_types)
        return MEDIA_PROFILES[self.media_profile]


class CloudinarySettings(BaseSettings):
    """
    Provider credentials. Passed explicitly into CloudinaryClient; nothing
    is configured globally.

    Env:
      CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET,
      CLOUDINARY_FOLDER, CLOUDINARY_RESOURCE_TYPE, ...
    """

    cloud_name: str = Field(default="")
    api_key: SecretStr = Field(default=SecretStr(""))
    api_secret: SecretStr = Field(default=SecretStr(""))
    folder: str = Field(default="pdfs")
    resource_type: Literal["raw", "image"] = Field(default="raw")
    api_base: str = Field(default="https://api.cloudinary.com")
    timeout_seconds: float = Field(default=60.0)

    model_config = SettingsConfigDict(
        env_prefix="CLOUDINARY_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_storage_settings(**kwargs) -> StorageSettings:
    filtered = {k: v for k, v in kwargs.items() if v is not None}
    return StorageSettings(**filtered)


@lru_cache
def get_cloudinary_settings(**kwargs) -> CloudinarySettings:
    filtered = {k: v for k, v in kwargs.items() if v is not None}
    return CloudinarySettings(**filtered)
