import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_profile_repository
from app.services.storage.profiles import ProfileRecord, ProfileRepository, ProfileUpdate
from app.services.storage.record_store import StoreUnavailableError

router = APIRouter()
logger = logging.getLogger(__name__)


def _unavailable(e: StoreUnavailableError) -> HTTPException:
    logger.error("Profile store unavailable: %s", e)
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Profile store unavailable")


@router.get("", response_model=List[ProfileRecord])
async def list_profiles(repo: ProfileRepository = Depends(get_profile_repository)):
    """All profiles, most recent first."""
    try:
        return repo.list_profiles()
    except StoreUnavailableError as e:
        raise _unavailable(e)


@router.get("/{profile_id}", response_model=ProfileRecord)
async def get_profile(profile_id: str, repo: ProfileRepository = Depends(get_profile_repository)):
    try:
        profile = repo.find_profile(profile_id)
    except StoreUnavailableError as e:
        raise _unavailable(e)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


@router.put("/{profile_id}", response_model=ProfileRecord)
async def update_profile(
    profile_id: str,
    updates: ProfileUpdate,
    repo: ProfileRepository = Depends(get_profile_repository),
):
    """Partial update; supplied genes get their risk badges recomputed."""
    try:
        profile = repo.update_profile(profile_id, updates)
    except StoreUnavailableError as e:
        raise _unavailable(e)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile
