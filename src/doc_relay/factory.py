from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from doc_relay.db.mongo import MongoConnection
from doc_relay.db.registry import ArtifactRegistry, MongoArtifactRegistry
from doc_relay.db.settings import MongoSettings, get_mongo_settings
from doc_relay.links.resolver import LinkResolver
from doc_relay.links.settings import LinkSettings, get_link_settings
from doc_relay.notify.settings import NotifySettings, get_notify_settings
from doc_relay.notify.smtp import build_notifier
from doc_relay.service import ArtifactService
from doc_relay.storage.cloudinary import CloudinaryClient
from doc_relay.storage.filter import ContentFilter
from doc_relay.storage.settings import (
    CloudinarySettings,
    StorageSettings,
    get_cloudinary_settings,
    get_storage_settings,
)
from doc_relay.storage.staging import TemporaryStage

logger = logging.getLogger(__name__)


def build_service(
    *,
    registry: ArtifactRegistry,
    store: Optional[CloudinaryClient] = None,
    storage: Optional[StorageSettings] = None,
    cloudinary: Optional[CloudinarySettings] = None,
    links: Optional[LinkSettings] = None,
    notify: Optional[NotifySettings] = None,
) -> ArtifactService:
    storage = storage or get_storage_settings()
    links = links or get_link_settings()
    notify = notify or get_notify_settings()
    return ArtifactService(
        content_filter=ContentFilter(storage.resolved_media_types),
        stage=TemporaryStage(storage.staging_dir, max_bytes=storage.max_upload_bytes),
        store=store or CloudinaryClient(cloudinary or get_cloudinary_settings()),
        registry=registry,
        resolver=LinkResolver(links),
        notifier=build_notifier(notify),
    )


@asynccontextmanager
async def service_from_env(mongo: Optional[MongoSettings] = None) -> AsyncIterator[ArtifactService]:
    """Build the service from environment settings and close the Mongo client on exit."""
    conn = MongoConnection(mongo or get_mongo_settings())
    registry = MongoArtifactRegistry(conn.collection)
    service = build_service(registry=registry)
    try:
        service.stage.ensure_dir()
        await registry.ensure_indexes()
        yield service
    finally:
        conn.close()
