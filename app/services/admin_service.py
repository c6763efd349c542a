import hmac
from typing import Tuple

from app.repositories.base import AssessmentRepository
from app.utils.errors import AdminAuthError
from app.utils.logger import logger


def check_admin_key(provided: str, expected: str) -> None:
    if not expected or not provided or not hmac.compare_digest(provided, expected):
        raise AdminAuthError("인증에 실패했습니다.")


def add_created_at(repository: AssessmentRepository) -> Tuple[int, int]:
    """Backfill createdAt on users missing it. Returns (updated, skipped)."""
    users = repository.list_users()
    missing = [uid for uid, data in users if not data.get("createdAt")]

    if missing:
        # update_users also stamps updatedAt
        repository.update_users({uid: {"createdAt": repository.server_timestamp()} for uid in missing})

    logger.info(f"createdAt backfill: {len(missing)} updated, {len(users) - len(missing)} skipped")
    return len(missing), len(users) - len(missing)


def update_consents(repository: AssessmentRepository) -> int:
    users = repository.list_users()
    if users:
        repository.update_users({uid: {"privacyAgreed": True, "marketingAgreed": True} for uid, _ in users})
    logger.info(f"Consent flags set on {len(users)} users")
    return len(users)