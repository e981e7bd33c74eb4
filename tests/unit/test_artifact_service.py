"""Tests for the ingest / resolve pipeline."""

from __future__ import annotations

import io

import pytest
from pymongo.errors import AutoReconnect

from doc_relay.db.registry import InMemoryArtifactRegistry
from doc_relay.exceptions import (
    ArtifactNotFoundError,
    MissingFileError,
    MissingIdentifierError,
    PartialIngestError,
    RegistryUnavailableError,
    RemoteUploadError,
    StagingError,
    UnsupportedMediaTypeError,
)
from doc_relay.links.variants import LocatorVariant

PDF = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\n%%EOF"


class FailingRegistry(InMemoryArtifactRegistry):
    async def insert(self, draft):
        raise RegistryUnavailableError("connection reset", operation="insert")


@pytest.mark.asyncio
class TestIngest:
    async def test_happy_path(self, service, registry, fake_provider, staging_dir):
        result = await service.ingest(
            io.BytesIO(PDF),
            media_type="application/pdf",
            original_filename="Quarterly Report.pdf",
            display_name="report",
            description="Q3",
        )

        record = await registry.find_by_id(result.artifact_id)
        assert record.storage_locator == result.storage_locator
        assert record.display_name == "report"
        assert record.description == "Q3"
        assert record.content_type == "application/pdf"
        assert record.derived_download_locator is None
        assert len(fake_provider.requests) == 1
        assert list(staging_dir.iterdir()) == []

    async def test_label_falls_back_to_filename_stem(self, service, registry, fake_provider):
        result = await service.ingest(
            io.BytesIO(PDF), media_type="application/pdf", original_filename="Quarterly Report.pdf"
        )

        record = await registry.find_by_id(result.artifact_id)
        assert record.display_name == "Quarterly Report"
        assert result.storage_locator.endswith("/pdfs/Quarterly_Report.pdf")

    async def test_sharing_url_is_derived_at_ingest(self, service, registry):
        result = await service.ingest(
            io.BytesIO(PDF),
            media_type="application/pdf",
            original_filename="a.pdf",
            sharing_url="https://drive.google.com/file/d/AbC123_-/view",
        )

        expected = "https://drive.google.com/uc?export=download&id=AbC123_-"
        assert result.derived_download_locator == expected
        record = await registry.find_by_id(result.artifact_id)
        assert record.derived_download_locator == expected

    async def test_missing_file(self, service, fake_provider):
        with pytest.raises(MissingFileError):
            await service.ingest(None, media_type="application/pdf")
        assert fake_provider.requests == []

    async def test_rejected_type_never_stages_or_uploads(
        self, service, registry, fake_provider, staging_dir
    ):
        with pytest.raises(UnsupportedMediaTypeError):
            await service.ingest(io.BytesIO(b"\x89PNG"), media_type="image/png", original_filename="a.png")

        assert not staging_dir.exists() or list(staging_dir.iterdir()) == []
        assert fake_provider.requests == []
        assert await registry.list_all() == []

    async def test_remote_failure_writes_no_record(
        self, service, registry, fake_provider, staging_dir
    ):
        fake_provider.fail_with = (500, "Internal error")

        with pytest.raises(RemoteUploadError):
            await service.ingest(io.BytesIO(PDF), media_type="application/pdf", original_filename="a.pdf")

        assert await registry.list_all() == []
        assert list(staging_dir.iterdir()) == []

    async def test_staging_failure_leaves_provider_untouched(
        self, service, fake_provider, mocker
    ):
        mocker.patch.object(
            service.stage, "stage", side_effect=StagingError("disk full", operation="stage")
        )

        with pytest.raises(StagingError):
            await service.ingest(io.BytesIO(PDF), media_type="application/pdf", original_filename="a.pdf")
        assert fake_provider.requests == []

    async def test_registry_failure_is_partial_ingest(self, service, fake_provider, caplog):
        service.registry = FailingRegistry()

        with pytest.raises(PartialIngestError) as ei:
            await service.ingest(
                io.BytesIO(PDF), media_type="application/pdf", original_filename="a.pdf", display_name="spec"
            )

        assert ei.value.status_code == 503
        assert ei.value.storage_locator.startswith("https://res.cloudinary.com/")
        assert ei.value.identifier == "spec"
        assert len(fake_provider.requests) == 1
        assert "registry write failed" in caplog.text

    async def test_driver_error_surfaces_as_partial_ingest(self, service, mocker):
        mocker.patch.object(service.registry, "insert", side_effect=RegistryUnavailableError(
            str(AutoReconnect("primary stepped down")), operation="insert"
        ))
        with pytest.raises(PartialIngestError) as ei:
            await service.ingest(io.BytesIO(PDF), media_type="application/pdf", original_filename="a.pdf")
        assert ei.value.message == "File stored at provider but not recorded"
        assert "primary stepped down" not in str(ei.value)


@pytest.mark.asyncio
class TestLookup:
    async def test_get_requires_id(self, service):
        with pytest.raises(MissingIdentifierError):
            await service.get("")

    async def test_get_unknown(self, service):
        with pytest.raises(ArtifactNotFoundError):
            await service.get("65a000000000000000000001")

    async def test_resolve_after_ingest(self, service):
        result = await service.ingest(
            io.BytesIO(PDF), media_type="application/pdf", original_filename="a.pdf", display_name="spec"
        )

        link = await service.resolve(result.artifact_id)

        assert link.variant is LocatorVariant.STORAGE_PATH
        assert link.url == (
            "https://console.cloudinary.com/c-tenant42/media_explorer_thumbnails/v1700000000/download"
        )

    async def test_list_newest_first(self, service):
        ids = []
        for name in ("one", "two"):
            r = await service.ingest(
                io.BytesIO(PDF), media_type="application/pdf", original_filename=f"{name}.pdf"
            )
            ids.append(r.artifact_id)

        records = await service.list_artifacts()
        assert [r.id for r in records] == list(reversed(ids))

    async def test_notify_sends_resolved_url(self, service, notifier):
        result = await service.ingest(
            io.BytesIO(PDF),
            media_type="application/pdf",
            original_filename="a.pdf",
            sharing_url="https://host/d/tok/view",
        )

        link = await service.notify(result.artifact_id, "someone@example.com")

        assert link.url == "https://drive.google.com/uc?export=download&id=tok"
        assert notifier.sent[0].recipient == "someone@example.com"
        assert notifier.sent[0].url == link.url

    async def test_delivery_url(self, service):
        assert service.delivery_url("pdfs/spec") == (
            "https://res.cloudinary.com/demo/raw/upload/fl_attachment/pdfs/spec"
        )
        with pytest.raises(MissingIdentifierError):
            service.delivery_url(None)
