"""Tests for the locator string transforms."""

import pytest

from doc_relay.exceptions import MalformedLocatorError, UnresolvableLocatorError
from doc_relay.links.variants import (
    console_download_url,
    derive_download_locator,
    extract_sharing_id,
    hash_segment_asset_id,
    storage_path_asset_id,
)

ENDPOINT = "https://drive.google.com/uc"


@pytest.mark.links
class TestSharingLinks:
    @pytest.mark.parametrize(
        "url,token",
        [
            ("https://host/d/AbC123_-/view", "AbC123_-"),
            ("https://drive.google.com/file/d/1xYz-_09/view?usp=sharing", "1xYz-_09"),
            ("https://host/d/tok", "tok"),
        ],
    )
    def test_extract_token(self, url, token):
        assert extract_sharing_id(url) == token

    @pytest.mark.parametrize("url", [None, "", "https://host/file/view", "https://host/d/"])
    def test_no_token(self, url):
        assert extract_sharing_id(url) is None

    def test_derive_download_locator(self):
        assert derive_download_locator("https://host/d/AbC123_-/view", ENDPOINT) == (
            "https://drive.google.com/uc?export=download&id=AbC123_-"
        )

    def test_derive_without_token_is_none(self):
        assert derive_download_locator("https://host/file/view", ENDPOINT) is None
        assert derive_download_locator(None, ENDPOINT) is None


@pytest.mark.links
class TestStoragePath:
    def test_segment_after_upload_marker(self):
        locator = "https://cdn.example/upload/v1700000000/pdfs/myfile.pdf"
        assert storage_path_asset_id(locator) == "v1700000000"

    def test_first_marker_wins(self):
        assert storage_path_asset_id("https://x/upload/a/upload/b") == "a"

    def test_missing_marker_is_malformed(self):
        with pytest.raises(MalformedLocatorError) as ei:
            storage_path_asset_id("https://cdn.example/files/myfile.pdf")
        assert ei.value.status_code == 422
        assert ei.value.code == "MALFORMED_LOCATOR"

    def test_empty_tail_is_malformed(self):
        with pytest.raises(MalformedLocatorError):
            storage_path_asset_id("https://cdn.example/upload/")

    def test_malformed_is_an_unresolvable_locator(self):
        with pytest.raises(UnresolvableLocatorError):
            storage_path_asset_id("no marker here")


@pytest.mark.links
class TestHashSegment:
    def test_finds_32_hex_segment(self):
        locator = "https://cdn.example/assets/a1b2c3d4e5f6a1b2c3d4e5f6a1b2c3d4/file.pdf"
        assert hash_segment_asset_id(locator) == "a1b2c3d4e5f6a1b2c3d4e5f6a1b2c3d4"

    def test_hash_as_last_segment(self):
        locator = "https://cdn.example/a1b2c3d4e5f6a1b2c3d4e5f6a1b2c3d4?x=1"
        assert hash_segment_asset_id(locator) == "a1b2c3d4e5f6a1b2c3d4e5f6a1b2c3d4"

    @pytest.mark.parametrize(
        "locator",
        [
            "https://cdn.example/assets/file.pdf",
            # 33 characters
            "https://cdn.example/a1b2c3d4e5f6a1b2c3d4e5f6a1b2c3d4f/file.pdf",
            # uppercase hex
            "https://cdn.example/A1B2C3D4E5F6A1B2C3D4E5F6A1B2C3D4/file.pdf",
            # only in the query string
            "https://cdn.example/file.pdf?h=a1b2c3d4e5f6a1b2c3d4e5f6a1b2c3d4",
        ],
    )
    def test_no_hash_is_unresolvable(self, locator):
        with pytest.raises(UnresolvableLocatorError):
            hash_segment_asset_id(locator)


def test_console_download_url():
    assert console_download_url("console.cloudinary.com", "c-tenant42", "v1700000000") == (
        "https://console.cloudinary.com/c-tenant42/media_explorer_thumbnails/v1700000000/download"
    )


def test_console_download_url_tolerates_scheme_and_slash():
    assert console_download_url("https://console.example/", "t", "a") == (
        "https://console.example/t/media_explorer_thumbnails/a/download"
    )
