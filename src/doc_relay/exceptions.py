"""Error taxonomy for the upload-persist-resolve pipeline.

Every error raised by doc-relay derives from :class:`DocRelayError` and carries
the HTTP status it maps to, a short title and a stable machine code. The API
layer renders them as Problem+JSON (see
``doc_relay.api.fastapi.middleware.errors.handlers``).

Client errors (4xx) are raised before any side effect is attempted. Server
faults (5xx) wrap the underlying cause with the operation name and the
identifier involved, never with credentials.
"""

from __future__ import annotations

from typing import Optional


class DocRelayError(Exception):
    """Base exception for all doc-relay errors."""

    status_code: int = 500
    title: str = "Internal Server Error"
    code: str = "DOC_RELAY_ERROR"

    def __init__(
        self,
        message: str = "",
        *,
        operation: Optional[str] = None,
        identifier: Optional[str] = None,
    ):
        self.message = message or self.title
        self.operation = operation
        self.identifier = identifier
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = []
        if self.operation:
            parts.append(self.operation)
        if self.identifier:
            parts.append(f"[{self.identifier}]")
        prefix = " ".join(parts)
        return f"{prefix}: {self.message}" if prefix else self.message


# --- client errors -----------------------------------------------------------


class MissingFileError(DocRelayError):
    status_code = 400
    title = "Bad Request"
    code = "MISSING_FILE"


class MissingIdentifierError(DocRelayError):
    status_code = 400
    title = "Bad Request"
    code = "MISSING_IDENTIFIER"


class UnsupportedMediaTypeError(DocRelayError):
    status_code = 415
    title = "Unsupported Media Type"
    code = "UNSUPPORTED_MEDIA_TYPE"

    def __init__(self, media_type: Optional[str], allowed: frozenset[str] | set[str] = frozenset()):
        self.media_type = media_type
        self.allowed = sorted(allowed)
        allowed_txt = ", ".join(self.allowed) or "none"
        super().__init__(
            f"Media type '{media_type or ''}' is not accepted (allowed: {allowed_txt})",
            operation="filter",
        )


class PayloadTooLargeError(DocRelayError):
    status_code = 413
    title = "Payload Too Large"
    code = "PAYLOAD_TOO_LARGE"


class ArtifactNotFoundError(DocRelayError):
    status_code = 404
    title = "Not Found"
    code = "ARTIFACT_NOT_FOUND"

    def __init__(self, artifact_id: str):
        super().__init__("Artifact not found", operation="find_by_id", identifier=artifact_id)


class InvalidArtifactError(DocRelayError):
    status_code = 422
    title = "Unprocessable Entity"
    code = "INVALID_ARTIFACT"


class UnresolvableLocatorError(DocRelayError):
    """No download URL can be derived from the stored locators."""

    status_code = 422
    title = "Unprocessable Entity"
    code = "UNRESOLVABLE_LOCATOR"


class MalformedLocatorError(UnresolvableLocatorError):
    """The storage locator lacks the provider's ``upload/`` marker."""

    code = "MALFORMED_LOCATOR"


# --- server faults -----------------------------------------------------------


class StagingError(DocRelayError):
    status_code = 500
    title = "Internal Server Error"
    code = "STAGING_FAILED"


class RemoteUploadError(DocRelayError):
    status_code = 502
    title = "Bad Gateway"
    code = "REMOTE_UPLOAD_FAILED"


class RegistryUnavailableError(DocRelayError):
    status_code = 503
    title = "Service Unavailable"
    code = "REGISTRY_UNAVAILABLE"


class PartialIngestError(RegistryUnavailableError):
    """The provider holds the file but no registry record was written."""

    code = "PARTIAL_INGEST"

    def __init__(self, message: str, *, storage_locator: str, identifier: Optional[str] = None):
        self.storage_locator = storage_locator
        super().__init__(message, operation="ingest", identifier=identifier)


class NotificationError(DocRelayError):
    status_code = 502
    title = "Bad Gateway"
    code = "NOTIFICATION_FAILED"


__all__ = [
    "DocRelayError",
    "MissingFileError",
    "MissingIdentifierError",
    "UnsupportedMediaTypeError",
    "PayloadTooLargeError",
    "ArtifactNotFoundError",
    "InvalidArtifactError",
    "UnresolvableLocatorError",
    "MalformedLocatorError",
    "StagingError",
    "RemoteUploadError",
    "RegistryUnavailableError",
    "PartialIngestError",
    "NotificationError",
]
