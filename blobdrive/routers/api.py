from fastapi import APIRouter

from blobdrive.routers.containers import router as containers_router
from blobdrive.routers.health import router as health_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health_router)
api_router.include_router(containers_router)
