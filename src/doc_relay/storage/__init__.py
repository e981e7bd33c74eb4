from .cloudinary import CloudinaryClient
from .filter import ContentFilter
from .settings import (
    MEDIA_PROFILES,
    CloudinarySettings,
    StorageSettings,
    get_cloudinary_settings,
    get_storage_settings,
)
from .staging import StagedFile, TemporaryStage

__all__ = [
    "CloudinaryClient",
    "CloudinarySettings",
    "ContentFilter",
    "MEDIA_PROFILES",
    "StagedFile",
    "StorageSettings",
    "TemporaryStage",
    "get_cloudinary_settings",
    "get_storage_settings",
]
