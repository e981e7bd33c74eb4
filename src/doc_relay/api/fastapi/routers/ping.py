from fastapi import APIRouter

router = APIRouter()
ROUTER_TAG = "Health"


@router.get("/ping")
async def ping():
    return {"status": "ok"}
