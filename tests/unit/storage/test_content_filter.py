"""Unit tests for ContentFilter."""

import pytest

from doc_relay.exceptions import UnsupportedMediaTypeError
from doc_relay.storage.filter import ContentFilter
from doc_relay.storage.settings import MEDIA_PROFILES, StorageSettings


@pytest.mark.storage
class TestContentFilter:
    @pytest.mark.parametrize("profile", sorted(MEDIA_PROFILES))
    def test_accepts_every_type_in_profile(self, profile):
        f = ContentFilter(MEDIA_PROFILES[profile])
        for media_type in MEDIA_PROFILES[profile]:
            assert f.accept(media_type) is True

    @pytest.mark.parametrize(
        "media_type",
        ["image/png", "text/plain", "application/x-pdf", "application/octet-stream", "", None],
    )
    def test_rejects_everything_else_for_pdf(self, media_type):
        f = ContentFilter(MEDIA_PROFILES["pdf"])
        assert f.accept(media_type) is False

    def test_images_profile_rejects_pdf(self):
        f = ContentFilter(MEDIA_PROFILES["images"])
        assert not f.accept("application/pdf")
        assert f.accept("image/webp")

    def test_case_and_parameters_are_ignored(self):
        f = ContentFilter({"application/pdf"})
        assert f.accept("Application/PDF")
        assert f.accept("application/pdf; charset=binary")

    def test_ensure_returns_normalized_type(self):
        f = ContentFilter({"application/pdf"})
        assert f.ensure("APPLICATION/PDF ") == "application/pdf"

    def test_ensure_raises_client_error(self):
        f = ContentFilter({"application/pdf"})
        with pytest.raises(UnsupportedMediaTypeError) as ei:
            f.ensure("image/png")
        assert ei.value.status_code == 415
        assert ei.value.allowed == ["application/pdf"]
        assert "image/png" in ei.value.message


@pytest.mark.storage
class TestStorageSettingsMediaTypes:
    def test_profile_is_default(self):
        s = StorageSettings(media_profile="images")
        assert s.resolved_media_types == MEDIA_PROFILES["images"]

    def test_explicit_list_overrides_profile(self):
        s = StorageSettings(media_profile="pdf", allowed_media_types=["text/csv"])
        assert s.resolved_media_types == frozenset({"text/csv"})

    def test_env_selects_profile(self, monkeypatch):
        monkeypatch.setenv("STORAGE_MEDIA_PROFILE", "images")
        assert StorageSettings().media_profile == "images"
