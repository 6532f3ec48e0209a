"""
FastAPI dependency providers. Tests override these through
app.dependency_overrides.
"""

from functools import lru_cache
from typing import Optional

from app.services.llm.gemini_client import GeminiClient
from app.services.llm.text_generator import TextGenerator
from app.services.pharmacogenomics.config import PharmaGuardConfig, get_config
from app.services.pharmacogenomics.knowledge_base import DrugKnowledgeBase, get_knowledge_base
from app.services.storage.notifications import NotificationService
from app.services.storage.profiles import ProfileRepository
from app.services.storage.record_store import create_record_store


@lru_cache(maxsize=1)
def get_profile_repository() -> ProfileRepository:
    return ProfileRepository(create_record_store("profiles"))


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    return NotificationService(create_record_store("notifications"))


def get_drug_knowledge_base() -> DrugKnowledgeBase:
    return get_knowledge_base()


def get_text_generator() -> Optional[TextGenerator]:
    client = GeminiClient()
    return client if client.is_configured else None


def get_app_config() -> PharmaGuardConfig:
    return get_config()
