"""Status and stats endpoints."""
from fastapi import APIRouter, Depends

from files_manager.container import Services
from files_manager.dependencies import get_services
from files_manager.schemas.file import StatsResponse, StatusResponse

router = APIRouter(tags=["status"])


@router.get("/status", response_model=StatusResponse)
async def get_status(services: Services = Depends(get_services)):
    """Verify Redis and database connectivity."""
    return StatusResponse(redis=await services.redis_alive(), db=await services.db_alive())


@router.get("/stats", response_model=StatsResponse)
async def get_stats(services: Services = Depends(get_services)):
    return StatsResponse(files=await services.file_store.count())
