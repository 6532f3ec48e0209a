import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.dependencies import get_profile_repository
from app.services.storage.profiles import ProfileRepository
from app.services.storage.record_store import StoreUnavailableError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
async def store_health(repo: ProfileRepository = Depends(get_profile_repository)):
    """Reports whether the profile store answers."""
    try:
        repo.store.list_all()
    except StoreUnavailableError as e:
        logger.warning("Health check failed: %s", e)
        return JSONResponse(status_code=503, content={"status": "offline"})
    return {"status": "live"}
