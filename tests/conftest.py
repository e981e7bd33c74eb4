"""
Root conftest.py for doc-relay tests.

Provides:
1. A fake Cloudinary uploader patched over ``cloudinary.uploader.upload``
2. Pipeline components wired against a temp staging dir and an in-memory registry
3. FastAPI app / client fixtures
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional

import cloudinary.exceptions
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from doc_relay.api.fastapi import create_app
from doc_relay.api.fastapi.settings import ApiConfig
from doc_relay.db.registry import InMemoryArtifactRegistry
from doc_relay.links.resolver import LinkResolver
from doc_relay.links.settings import LinkSettings
from doc_relay.notify.smtp import NullNotifier
from doc_relay.service import ArtifactService
from doc_relay.storage.cloudinary import CloudinaryClient
from doc_relay.storage.filter import ContentFilter
from doc_relay.storage.settings import MEDIA_PROFILES, CloudinarySettings
from doc_relay.storage.staging import TemporaryStage

API_KEY = "key-123456"
API_SECRET = "super-secret-value"

# Exception classes the SDK raises per provider status
_SDK_ERRORS = {
    400: cloudinary.exceptions.BadRequest,
    401: cloudinary.exceptions.AuthorizationRequired,
    403: cloudinary.exceptions.NotAllowed,
    404: cloudinary.exceptions.NotFound,
    420: cloudinary.exceptions.RateLimited,
}


class FakeCloudinary:
    """Stands in for ``cloudinary.uploader.upload`` and records each call."""

    def __init__(self, staging_dir: Optional[Path] = None):
        self.requests: list[dict[str, Any]] = []
        self.staged_seen: list[list[str]] = []
        self.staging_dir = staging_dir
        self.fail_with: Optional[tuple[int, str]] = None
        self.raise_exc: Optional[Exception] = None
        self.result: Optional[Any] = None
        self.secure_url: Callable[[dict[str, Any]], str] = (
            lambda o: f"https://res.cloudinary.com/demo/raw/upload/v1700000000/{o['folder']}/{o['public_id']}.pdf"
        )

    def __call__(self, file, **options) -> Any:
        self.requests.append({**options, "file_name": Path(file.name).name, "content": file.read()})
        if self.staging_dir is not None:
            self.staged_seen.append(sorted(p.name for p in self.staging_dir.iterdir()))
        if self.raise_exc is not None:
            raise self.raise_exc
        if self.fail_with is not None:
            status, message = self.fail_with
            raise _SDK_ERRORS.get(status, cloudinary.exceptions.GeneralError)(message)
        if self.result is not None:
            return self.result
        return {"public_id": options["public_id"], "secure_url": self.secure_url(options)}


@pytest.fixture
def staging_dir(tmp_path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def cloudinary_settings() -> CloudinarySettings:
    return CloudinarySettings(
        cloud_name="demo",
        api_key=API_KEY,
        api_secret=API_SECRET,
        folder="pdfs",
        resource_type="raw",
    )


@pytest.fixture
def link_settings() -> LinkSettings:
    return LinkSettings(
        console_host="console.cloudinary.com",
        tenant_id="c-tenant42",
        external_download_endpoint="https://drive.google.com/uc",
        strategy="auto",
    )


@pytest.fixture
def fake_provider(staging_dir, monkeypatch) -> FakeCloudinary:
    fake = FakeCloudinary(staging_dir)
    monkeypatch.setattr("cloudinary.uploader.upload", fake)
    return fake


@pytest.fixture
def store(cloudinary_settings, fake_provider) -> CloudinaryClient:
    return CloudinaryClient(cloudinary_settings)


@pytest.fixture
def registry() -> InMemoryArtifactRegistry:
    return InMemoryArtifactRegistry()


@pytest.fixture
def notifier() -> NullNotifier:
    return NullNotifier()


@pytest.fixture
def service(staging_dir, store, registry, link_settings, notifier) -> ArtifactService:
    return ArtifactService(
        content_filter=ContentFilter(MEDIA_PROFILES["pdf"]),
        stage=TemporaryStage(staging_dir),
        store=store,
        registry=registry,
        resolver=LinkResolver(link_settings),
        notifier=notifier,
    )


@pytest.fixture
def app(service) -> FastAPI:
    return create_app(service, api_config=ApiConfig(resolve_mode="json", cors_origins=["http://localhost:3000"]))


@pytest_asyncio.fixture
async def client(app) -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
