from __future__ import annotations

import itertools
import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from doc_relay.exceptions import (
    ArtifactNotFoundError,
    InvalidArtifactError,
    RegistryUnavailableError,
)

from .models import ArtifactDraft, ArtifactRecord

logger = logging.getLogger(__name__)


def _check_draft(draft: ArtifactDraft) -> None:
    if not draft.storage_locator or not draft.storage_locator.strip():
        raise InvalidArtifactError("storage_locator is required", operation="insert")


def _unavailable(
    exc: PyMongoError, operation: str, identifier: Optional[str] = None
) -> RegistryUnavailableError:
    # Driver messages name cluster hosts; they go to the log only
    logger.error(
        "Mongo %s failed: %s", operation, exc,
        extra={"operation": operation, "artifact_id": identifier},
    )
    return RegistryUnavailableError(
        "Artifact registry is unavailable", operation=operation, identifier=identifier
    )


def _parse_id(artifact_id: str) -> ObjectId:
    try:
        return ObjectId(artifact_id)
    except (InvalidId, TypeError):
        raise ArtifactNotFoundError(str(artifact_id)) from None


class ArtifactRegistry(Protocol):
    async def insert(self, draft: ArtifactDraft) -> str:
        ...

    async def find_by_id(self, artifact_id: str) -> ArtifactRecord:
        ...

    async def list_all(self, *, limit: Optional[int] = None) -> list[ArtifactRecord]:
        ...

    async def ping(self) -> bool:
        ...


class MongoArtifactRegistry:
    """Artifact registry backed by one Mongo collection (motor)."""

    def __init__(self, collection):
        self.collection = collection

    async def ensure_indexes(self) -> None:
        try:
            await self.collection.create_index([("created_at", DESCENDING)], name="created_at_desc")
        except PyMongoError as exc:
            raise _unavailable(exc, "ensure_indexes") from exc

    async def insert(self, draft: ArtifactDraft) -> str:
        _check_draft(draft)
        doc = draft.model_dump()
        doc["created_at"] = datetime.now(timezone.utc)
        try:
            result = await self.collection.insert_one(doc)
        except PyMongoError as exc:
            raise _unavailable(exc, "insert") from exc
        return str(result.inserted_id)

    async def find_by_id(self, artifact_id: str) -> ArtifactRecord:
        oid = _parse_id(artifact_id)
        try:
            doc = await self.collection.find_one({"_id": oid})
        except PyMongoError as exc:
            raise _unavailable(exc, "find_by_id", artifact_id) from exc
        if doc is None:
            raise ArtifactNotFoundError(artifact_id)
        return ArtifactRecord.from_document(doc)

    async def list_all(self, *, limit: Optional[int] = None) -> list[ArtifactRecord]:
        try:
            cursor = self.collection.find().sort("created_at", DESCENDING)
            if limit:
                cursor = cursor.limit(limit)
            docs = await cursor.to_list(length=None)
        except PyMongoError as exc:
            raise _unavailable(exc, "list_all") from exc
        return [ArtifactRecord.from_document(d) for d in docs]

    async def ping(self) -> bool:
        try:
            await self.collection.database.command("ping")
            return True
        except PyMongoError:
            logger.warning("Artifact registry ping failed", exc_info=True)
            return False


class InMemoryArtifactRegistry:
    """Process-local registry for tests/dev only."""

    def __init__(self):
        self._records: dict[str, tuple[int, ArtifactRecord]] = {}
        self._seq = itertools.count()

    async def insert(self, draft: ArtifactDraft) -> str:
        _check_draft(draft)
        artifact_id = str(ObjectId())
        record = ArtifactRecord(
            **draft.model_dump(), id=artifact_id, created_at=datetime.now(timezone.utc)
        )
        self._records[artifact_id] = (next(self._seq), record)
        return artifact_id

    async def find_by_id(self, artifact_id: str) -> ArtifactRecord:
        _parse_id(artifact_id)
        entry = self._records.get(artifact_id)
        if entry is None:
            raise ArtifactNotFoundError(artifact_id)
        return entry[1]

    async def list_all(self, *, limit: Optional[int] = None) -> list[ArtifactRecord]:
        ordered = sorted(self._records.values(), key=lambda e: (e[1].created_at, e[0]), reverse=True)
        records = [rec for _, rec in ordered]
        return records[:limit] if limit else records

    async def ping(self) -> bool:
        return True

    def clear(self) -> None:
        self._records.clear()


__all__ = ["ArtifactRegistry", "MongoArtifactRegistry", "InMemoryArtifactRegistry"]
