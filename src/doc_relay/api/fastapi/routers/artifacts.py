"""Artifact ingest and resolution endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, Field

from doc_relay.api.fastapi.deps import get_api_config, get_service
from doc_relay.api.fastapi.settings import ApiConfig
from doc_relay.db.models import ArtifactRecord
from doc_relay.exceptions import MissingFileError
from doc_relay.service import ArtifactService

router = APIRouter()
ROUTER_PREFIX = "/artifacts"
ROUTER_TAG = "Artifacts"


class IngestResponse(BaseModel):
    artifact_id: str = Field(..., description="Registry identifier")
    storage_locator: str = Field(..., description="Provider secure URL")
    derived_download_locator: Optional[str] = Field(None, description="Direct download URL from the sharing link")


class ArtifactOut(BaseModel):
    id: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    storage_locator: str
    derived_download_locator: Optional[str] = None
    content_type: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_record(cls, record: ArtifactRecord) -> "ArtifactOut":
        return cls(**record.model_dump())


class ResolvedLinkResponse(BaseModel):
    artifact_id: str
    url: str
    variant: str


class NotifyRequest(BaseModel):
    recipient: str = Field(..., min_length=3, description="Delivery address")


class NotifyResponse(ResolvedLinkResponse):
    recipient: str


@router.post("", response_model=IngestResponse, status_code=201)
async def upload_artifact(
    file: Optional[UploadFile] = File(None),
    display_name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    sharing_url: Optional[str] = Form(None),
    service: ArtifactService = Depends(get_service),
) -> IngestResponse:
    """Upload a document, relay it to the provider and record it.

    Example:
        ```bash
        curl -X POST http://localhost:8000/v0/artifacts \\
          -F "file=@report.pdf;type=application/pdf" \\
          -F "display_name=report" \\
          -F "sharing_url=https://drive.google.com/file/d/1AbC/view"
        ```
    """
    if file is None:
        raise MissingFileError("No file uploaded", operation="ingest")
    try:
        result = await service.ingest(
            file.file,
            media_type=file.content_type,
            original_filename=file.filename,
            display_name=display_name,
            description=description,
            sharing_url=sharing_url,
        )
    finally:
        await file.close()
    return IngestResponse(
        artifact_id=result.artifact_id,
        storage_locator=result.storage_locator,
        derived_download_locator=result.derived_download_locator,
    )


@router.get("", response_model=list[ArtifactOut])
async def list_artifacts(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    service: ArtifactService = Depends(get_service),
) -> list[ArtifactOut]:
    records = await service.list_artifacts(limit=limit)
    return [ArtifactOut.from_record(r) for r in records]


@router.get("/{artifact_id}", response_model=ArtifactOut)
async def get_artifact(
    artifact_id: str,
    service: ArtifactService = Depends(get_service),
) -> ArtifactOut:
    return ArtifactOut.from_record(await service.get(artifact_id))


@router.get("/{artifact_id}/download", response_model=ResolvedLinkResponse)
async def download_artifact(
    artifact_id: str,
    redirect: Optional[bool] = Query(None, description="Override the deployment's resolve mode"),
    service: ArtifactService = Depends(get_service),
    api_config: ApiConfig = Depends(get_api_config),
):
    """Resolve an artifact to a fetchable URL, as JSON or as a redirect."""
    link = await service.resolve(artifact_id)
    as_redirect = redirect if redirect is not None else api_config.resolve_mode == "redirect"
    if as_redirect:
        return RedirectResponse(link.url, status_code=307)
    return ResolvedLinkResponse(artifact_id=artifact_id, url=link.url, variant=link.variant.value)


@router.post("/{artifact_id}/notify", response_model=NotifyResponse, status_code=202)
async def notify_artifact(
    artifact_id: str,
    body: NotifyRequest,
    service: ArtifactService = Depends(get_service),
) -> NotifyResponse:
    link = await service.notify(artifact_id, body.recipient)
    return NotifyResponse(
        artifact_id=artifact_id,
        url=link.url,
        variant=link.variant.value,
        recipient=body.recipient,
    )
