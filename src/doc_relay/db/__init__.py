from .models import ArtifactDraft, ArtifactRecord
from .registry import ArtifactRegistry, InMemoryArtifactRegistry, MongoArtifactRegistry
from .settings import MongoSettings, get_mongo_settings

__all__ = [
    "ArtifactDraft",
    "ArtifactRecord",
    "ArtifactRegistry",
    "InMemoryArtifactRegistry",
    "MongoArtifactRegistry",
    "MongoSettings",
    "get_mongo_settings",
]
