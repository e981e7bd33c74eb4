"""String transforms over locator shapes.

These parse provider and sharing URLs by their observed layout; none of them
talks to the provider. If the provider changes its URL format, this module is
the only place that needs to follow.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Optional
from urllib.parse import quote, urlencode

from doc_relay.exceptions import MalformedLocatorError, UnresolvableLocatorError

UPLOAD_MARKER = "upload/"

SHARING_ID = re.compile(r"/d/([a-zA-Z0-9_-]+)")
HASH_SEGMENT = re.compile(r"(?:^|/)([0-9a-f]{32})(?=/|$)")


class LocatorVariant(StrEnum):
    PASSTHROUGH = "passthrough"
    STORAGE_PATH = "storage_path"
    HASH_SEGMENT = "hash_segment"


def extract_sharing_id(sharing_url: Optional[str]) -> Optional[str]:
    """``https://host/d/<token>/view`` -> ``<token>``; ``None`` when absent."""
    if not sharing_url:
        return None
    match = SHARING_ID.search(sharing_url)
    return match.group(1) if match else None


def derive_download_locator(sharing_url: Optional[str], endpoint: str) -> Optional[str]:
    """Build a direct-download URL from an external sharing link, if it carries an id."""
    file_id = extract_sharing_id(sharing_url)
    if file_id is None:
        return None
    return f"{endpoint}?{urlencode({'export': 'download', 'id': file_id})}"


def storage_path_asset_id(storage_locator: str) -> str:
    """Segment right after the first ``upload/`` marker."""
    if UPLOAD_MARKER not in storage_locator:
        raise MalformedLocatorError(
            f"Locator has no '{UPLOAD_MARKER}' marker", operation="resolve"
        )
    tail = storage_locator.split(UPLOAD_MARKER, 1)[1]
    asset_id = tail.split("/", 1)[0]
    if not asset_id:
        raise MalformedLocatorError(
            f"Locator has nothing after '{UPLOAD_MARKER}'", operation="resolve"
        )
    return asset_id


def hash_segment_asset_id(storage_locator: str) -> str:
    """First path segment made of exactly 32 lowercase hex characters."""
    path = storage_locator.split("?", 1)[0].split("#", 1)[0]
    match = HASH_SEGMENT.search(path)
    if match is None:
        raise UnresolvableLocatorError(
            "Locator has no 32-character content hash segment", operation="resolve"
        )
    return match.group(1)


def console_download_url(console_host: str, tenant_id: str, asset_id: str) -> str:
    host = console_host.removeprefix("https://").removeprefix("http://").strip("/")
    return (
        f"https://{host}/{quote(tenant_id, safe='')}"
        f"/media_explorer_thumbnails/{quote(asset_id, safe='')}/download"
    )


__all__ = [
    "LocatorVariant",
    "UPLOAD_MARKER",
    "extract_sharing_id",
    "derive_download_locator",
    "storage_path_asset_id",
    "hash_segment_asset_id",
    "console_download_url",
]
