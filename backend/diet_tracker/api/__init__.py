from fastapi import APIRouter

from .diet_logs import router as diet_logs_router
from .status import router as status_router

api_router = APIRouter()
api_router.include_router(status_router, tags=["status"])
api_router.include_router(diet_logs_router, prefix="/api/diet-logs", tags=["diet-logs"])

__all__ = ["api_router"]
