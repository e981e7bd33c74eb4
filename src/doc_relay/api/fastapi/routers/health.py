from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from doc_relay.api.fastapi.deps import get_service
from doc_relay.service import ArtifactService

router = APIRouter()
ROUTER_PREFIX = "/_health"
ROUTER_TAG = "Health"


@router.get("/db")
async def registry_health(service: ArtifactService = Depends(get_service)):
    ok = await service.registry.ping()
    return JSONResponse(status_code=200 if ok else 503, content={"registry": "ok" if ok else "unavailable"})
