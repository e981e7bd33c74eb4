from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from doc_relay.api.fastapi.deps import get_service
from doc_relay.service import ArtifactService

router = APIRouter()
ROUTER_TAG = "Artifacts"


@router.get("/download")
async def provider_download(
    file_id: Optional[str] = Query(None, description="Provider public id"),
    service: ArtifactService = Depends(get_service),
):
    """Redirect to the provider's attachment URL for a known public id."""
    return RedirectResponse(service.delivery_url(file_id), status_code=307)
