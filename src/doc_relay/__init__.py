from . import api, app

# Base exception
from .exceptions import DocRelayError

# Pipeline
from .service import ArtifactService, IngestResult

__all__ = [
    # Modules
    "app",
    "api",
    # Base exception
    "DocRelayError",
    # Pipeline
    "ArtifactService",
    "IngestResult",
]
