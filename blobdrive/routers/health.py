from os import getenv

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from blobdrive.models import HealthResponse, ReadyResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(ok=True)


@router.get(
    "/ready",
    response_model=ReadyResponse,
    responses={503: {"model": ReadyResponse, "description": "Missing blob storage configuration"}},
)
async def ready():
    if not getenv("AZURE_STORAGE_CONNECTION_STRING"):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=ReadyResponse(ready=False, reason="AZURE_STORAGE_CONNECTION_STRING missing").model_dump(),
        )
    return ReadyResponse(ready=True)
