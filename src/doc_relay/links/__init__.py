from .resolver import LinkResolver, ResolvedLink
from .settings import LinkSettings, get_link_settings
from .variants import (
    LocatorVariant,
    console_download_url,
    derive_download_locator,
    extract_sharing_id,
    hash_segment_asset_id,
    storage_path_asset_id,
)

__all__ = [
    "LinkResolver",
    "LinkSettings",
    "LocatorVariant",
    "ResolvedLink",
    "console_download_url",
    "derive_download_locator",
    "extract_sharing_id",
    "get_link_settings",
    "hash_segment_asset_id",
    "storage_path_asset_id",
]
