"""Cloudinary upload client.

Only the two calls the pipeline needs are exposed: an upload of a staged file
and construction of the attachment delivery URL. Credentials come from an
explicit :class:`CloudinarySettings` and are passed on every SDK call; the
global ``cloudinary.config()`` is never touched.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Union

import cloudinary.exceptions
import cloudinary.uploader
import cloudinary.utils
from starlette.concurrency import run_in_threadpool

from doc_relay.exceptions import RemoteUploadError, StagingError
from doc_relay.storage.settings import CloudinarySettings
from doc_relay.storage.staging import StagedFile

logger = logging.getLogger(__name__)

StagedRef = Union[StagedFile, Path, str]


class CloudinaryClient:
    def __init__(self, settings: CloudinarySettings):
        self.settings = settings

    def _credentials(self) -> dict[str, Any]:
        s = self.settings
        return {
            "cloud_name": s.cloud_name,
            "api_key": s.api_key.get_secret_value(),
            "api_secret": s.api_secret.get_secret_value(),
        }

    def delivery_url(self, public_id: str) -> str:
        """Attachment (forced download) URL for an already uploaded asset."""
        url, _ = cloudinary.utils.cloudinary_url(
            public_id,
            resource_type=self.settings.resource_type,
            type="upload",
            secure=True,
            flags="attachment",
            force_version=False,
            cloud_name=self.settings.cloud_name,
        )
        return url

    def _redact(self, message: str) -> str:
        for secret in (
            self.settings.api_key.get_secret_value(),
            self.settings.api_secret.get_secret_value(),
        ):
            if secret:
                message = message.replace(secret, "***")
        return message

    def _fail(self, message: str, public_id: str) -> RemoteUploadError:
        message = self._redact(message)
        logger.error(
            "Cloudinary upload error: %s", message,
            extra={"operation": "upload", "public_id": public_id},
        )
        return RemoteUploadError(
            f"Error uploading to Cloudinary: {message}",
            operation="upload",
            identifier=public_id,
        )

    async def upload(self, staged: StagedRef, public_id: str) -> str:
        """Upload the staged file and return the provider's ``secure_url``.

        The staged file is deleted before this returns or raises.
        """
        staged_file = staged if isinstance(staged, StagedFile) else StagedFile(path=Path(staged))
        try:
            return await self._upload(staged_file.path, public_id)
        finally:
            try:
                staged_file.release()
            except OSError as exc:
                logger.error(
                    "Error deleting staged file %s: %s", staged_file.path.name, exc,
                    extra={"operation": "cleanup", "public_id": public_id},
                )

    async def _upload(self, path: Path, public_id: str) -> str:
        try:
            fh = open(path, "rb")
        except OSError as exc:
            raise StagingError(
                f"Staged file is not readable: {exc.strerror or exc}",
                operation="upload",
                identifier=public_id,
            ) from exc

        s = self.settings
        with fh:
            try:
                result = await run_in_threadpool(
                    cloudinary.uploader.upload,
                    fh,
                    folder=s.folder,
                    public_id=public_id,
                    resource_type=s.resource_type,
                    upload_prefix=s.api_base,
                    timeout=s.timeout_seconds,
                    **self._credentials(),
                )
            except cloudinary.exceptions.Error as exc:
                raise self._fail(str(exc) or type(exc).__name__, public_id) from exc

        if not isinstance(result, dict):
            raise self._fail(f"unexpected response of type {type(result).__name__}", public_id)
        secure_url = result.get("secure_url")
        if not secure_url:
            raise RemoteUploadError(
                "Provider response did not include a secure_url",
                operation="upload",
                identifier=public_id,
            )
        return secure_url


__all__ = ["CloudinaryClient"]
