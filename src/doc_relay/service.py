"""Upload-persist-resolve pipeline.

Ingest runs filter -> stage -> remote upload -> registry insert, strictly in
that order and without retries. Resolution reads a record and hands it to the
link resolver; it never calls the provider.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import BinaryIO, Optional

from starlette.concurrency import run_in_threadpool

from doc_relay.db.models import ArtifactDraft, ArtifactRecord
from doc_relay.db.registry import ArtifactRegistry
from doc_relay.exceptions import (
    MissingFileError,
    MissingIdentifierError,
    PartialIngestError,
    RegistryUnavailableError,
)
from doc_relay.links.resolver import LinkResolver, ResolvedLink
from doc_relay.notify.smtp import Notifier, NullNotifier
from doc_relay.storage.cloudinary import CloudinaryClient
from doc_relay.storage.filter import ContentFilter
from doc_relay.storage.staging import TemporaryStage, sanitize_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestResult:
    artifact_id: str
    storage_locator: str
    derived_download_locator: Optional[str] = None


def _label_from(original_filename: Optional[str]) -> Optional[str]:
    if not original_filename:
        return None
    return PurePath(original_filename.replace("\\", "/")).stem or None


class ArtifactService:
    def __init__(
        self,
        *,
        content_filter: ContentFilter,
        stage: TemporaryStage,
        store: CloudinaryClient,
        registry: ArtifactRegistry,
        resolver: LinkResolver,
        notifier: Optional[Notifier] = None,
    ):
        self.content_filter = content_filter
        self.stage = stage
        self.store = store
        self.registry = registry
        self.resolver = resolver
        self.notifier = notifier or NullNotifier()

    async def ingest(
        self,
        stream: Optional[BinaryIO],
        *,
        media_type: Optional[str],
        original_filename: Optional[str] = None,
        display_name: Optional[str] = None,
        description: Optional[str] = None,
        sharing_url: Optional[str] = None,
    ) -> IngestResult:
        """Relay one upload to the provider and record it.

        Raises:
            MissingFileError, UnsupportedMediaTypeError, PayloadTooLargeError:
                rejected before anything is written.
            StagingError: local write failed; provider untouched.
            RemoteUploadError: provider refused; no record written.
            PartialIngestError: provider holds the file but the registry
                write failed. The remote object is not deleted.
        """
        if stream is None:
            raise MissingFileError("No file uploaded", operation="ingest")
        content_type = self.content_filter.ensure(media_type)

        label = display_name or _label_from(original_filename)
        public_id = sanitize_name(label)
        derived = self.resolver.derive(sharing_url)

        staged = await run_in_threadpool(self.stage.stage, stream, display_name, original_filename)
        storage_locator = await self.store.upload(staged, public_id)

        draft = ArtifactDraft(
            display_name=label,
            description=description,
            storage_locator=storage_locator,
            derived_download_locator=derived,
            content_type=content_type,
        )
        try:
            artifact_id = await self.registry.insert(draft)
        except RegistryUnavailableError as exc:
            logger.error(
                "Uploaded %s but registry write failed; remote object left in place",
                public_id,
                extra={"operation": "ingest", "public_id": public_id, "storage_locator": storage_locator},
            )
            raise PartialIngestError(
                "File stored at provider but not recorded",
                storage_locator=storage_locator,
                identifier=public_id,
            ) from exc

        logger.info(
            "Ingested %s as %s", public_id, artifact_id,
            extra={"operation": "ingest", "artifact_id": artifact_id, "public_id": public_id},
        )
        return IngestResult(
            artifact_id=artifact_id,
            storage_locator=storage_locator,
            derived_download_locator=derived,
        )

    async def get(self, artifact_id: Optional[str]) -> ArtifactRecord:
        if not artifact_id:
            raise MissingIdentifierError("Artifact id not provided", operation="find_by_id")
        return await self.registry.find_by_id(artifact_id)

    async def list_artifacts(self, *, limit: Optional[int] = None) -> list[ArtifactRecord]:
        return await self.registry.list_all(limit=limit)

    async def resolve(self, artifact_id: Optional[str]) -> ResolvedLink:
        record = await self.get(artifact_id)
        return self.resolver.resolve(record)

    async def notify(self, artifact_id: Optional[str], recipient: str) -> ResolvedLink:
        link = await self.resolve(artifact_id)
        await self.notifier.send(recipient, link.url)
        return link

    def delivery_url(self, public_id: Optional[str]) -> str:
        if not public_id:
            raise MissingIdentifierError("Public ID (file_id) not provided", operation="delivery_url")
        return self.store.delivery_url(public_id)
