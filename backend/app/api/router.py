from fastapi import APIRouter
from app.api.routes import ai, health, notifications, profiles, upload

api_router = APIRouter()

api_router.include_router(upload.router, prefix="/upload", tags=["Upload"])
api_router.include_router(profiles.router, prefix="/profile", tags=["Profiles"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(health.router, prefix="/health", tags=["Health"])
api_router.include_router(ai.router, prefix="/ai", tags=["AI"])
