"""
FastAPI dependency providers.

Tests swap these out through `app.dependency_overrides`.
"""
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends

from app.config import Settings, get_settings
from app.models.report_models import Question
from app.repositories.base import AssessmentRepository, VerificationStore
from app.repositories.memory import MemoryRepository, MemoryVerificationStore
from app.utils.content import get_questions, get_report_config
from app.utils.scoring import ReportConfig
from app.utils.sms import SolapiClient


def _use_memory(settings: Settings) -> bool:
    return settings.STORAGE_BACKEND.lower() == "memory"


@lru_cache()
def _memory_repository() -> MemoryRepository:
    return MemoryRepository()


@lru_cache()
def _memory_verification_store() -> MemoryVerificationStore:
    return MemoryVerificationStore()


def get_repository(settings: Settings = Depends(get_settings)) -> AssessmentRepository:
    if _use_memory(settings):
        return _memory_repository()

    from app.repositories.firestore import FirestoreRepository
    from app.utils.firestore import get_db
    return FirestoreRepository(get_db())


def get_verification_store(settings: Settings = Depends(get_settings)) -> VerificationStore:
    if _use_memory(settings):
        return _memory_verification_store()

    from app.repositories.firestore import FirestoreVerificationStore
    from app.utils.firestore import get_db
    return FirestoreVerificationStore(get_db())


def get_sms_client(settings: Settings = Depends(get_settings)) -> Optional[SolapiClient]:
    if not (settings.SOLAPI_API_KEY and settings.SOLAPI_API_SECRET and settings.SOLAPI_SENDER_NUMBER):
        return None
    return SolapiClient(
        api_key=settings.SOLAPI_API_KEY,
        api_secret=settings.SOLAPI_API_SECRET,
        sender=settings.SOLAPI_SENDER_NUMBER,
        base_url=settings.SOLAPI_BASE_URL,
    )


def get_catalog(settings: Settings = Depends(get_settings)) -> List[Question]:
    return get_questions(settings.CONTENT_DIR)


def get_config(settings: Settings = Depends(get_settings)) -> ReportConfig:
    return get_report_config(settings.CONTENT_DIR)
