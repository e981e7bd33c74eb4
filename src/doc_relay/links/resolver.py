from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from doc_relay.db.models import ArtifactRecord
from doc_relay.exceptions import UnresolvableLocatorError

from .settings import LinkSettings
from .variants import (
    UPLOAD_MARKER,
    LocatorVariant,
    console_download_url,
    derive_download_locator,
    hash_segment_asset_id,
    storage_path_asset_id,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedLink:
    url: str
    variant: LocatorVariant
    asset_id: Optional[str] = None


class LinkResolver:
    """Turns an artifact record into a fetchable URL.

    With ``strategy="auto"`` the variant is picked from which locators the
    record carries: a derived download locator wins, then the provider's
    ``upload/`` path, then a content-hash segment. A fixed strategy applies
    that variant only.
    """

    def __init__(self, settings: LinkSettings):
        self.settings = settings
        self._handlers: dict[LocatorVariant, Callable[[ArtifactRecord], ResolvedLink]] = {
            LocatorVariant.PASSTHROUGH: self._passthrough,
            LocatorVariant.STORAGE_PATH: self._storage_path,
            LocatorVariant.HASH_SEGMENT: self._hash_segment,
        }

    def derive(self, sharing_url: Optional[str]) -> Optional[str]:
        """Ingest-time derivation of the passthrough locator."""
        return derive_download_locator(sharing_url, self.settings.external_download_endpoint)

    def select(self, record: ArtifactRecord) -> LocatorVariant:
        if self.settings.strategy != "auto":
            return LocatorVariant(self.settings.strategy)
        if record.derived_download_locator:
            return LocatorVariant.PASSTHROUGH
        if UPLOAD_MARKER in record.storage_locator:
            return LocatorVariant.STORAGE_PATH
        return LocatorVariant.HASH_SEGMENT

    def resolve(self, record: ArtifactRecord) -> ResolvedLink:
        variant = self.select(record)
        try:
            link = self._handlers[variant](record)
        except UnresolvableLocatorError as exc:
            exc.identifier = exc.identifier or record.id
            raise
        logger.debug(
            "Resolved %s via %s", record.id, variant.value,
            extra={"operation": "resolve", "artifact_id": record.id},
        )
        return link

    def _console(self, asset_id: str) -> str:
        return console_download_url(self.settings.console_host, self.settings.tenant_id, asset_id)

    def _passthrough(self, record: ArtifactRecord) -> ResolvedLink:
        if not record.derived_download_locator:
            raise UnresolvableLocatorError(
                "No download URL available for this artifact", operation="resolve"
            )
        return ResolvedLink(url=record.derived_download_locator, variant=LocatorVariant.PASSTHROUGH)

    def _storage_path(self, record: ArtifactRecord) -> ResolvedLink:
        asset_id = storage_path_asset_id(record.storage_locator)
        return ResolvedLink(self._console(asset_id), LocatorVariant.STORAGE_PATH, asset_id)

    def _hash_segment(self, record: ArtifactRecord) -> ResolvedLink:
        asset_id = hash_segment_asset_id(record.storage_locator)
        return ResolvedLink(self._console(asset_id), LocatorVariant.HASH_SEGMENT, asset_id)


__all__ = ["LinkResolver", "ResolvedLink"]
