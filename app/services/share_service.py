from datetime import datetime, timedelta, timezone
from typing import Tuple

from app.repositories.base import AssessmentRepository
from app.utils.errors import NotFoundError, ShareExpiredError
from app.utils.logger import logger


def create_share(snapshot: dict, repository: AssessmentRepository, ttl_days: int = 30, now=None) -> Tuple[str, str]:
    now = now or datetime.now(timezone.utc)
    share_id = repository.create_share(snapshot, now + timedelta(days=ttl_days))
    logger.info(f"Created share {share_id} (expires in {ttl_days} days)")
    return share_id, f"/share/{share_id}"


def get_share(share_id: str, repository: AssessmentRepository, now=None) -> dict:
    result = repository.get_share(share_id)
    if result is None:
        raise NotFoundError("공유된 결과를 찾을 수 없습니다.")

    now = now or datetime.now(timezone.utc)
    expires_at = result.get("expiresAt")
    if expires_at and now > expires_at:
        logger.warning(f"Share {share_id} expired at {expires_at}")
        raise ShareExpiredError("공유 링크가 만료되었습니다.")

    # Shared links never expose the owner's phone number
    user_info = result.get("userInfo")
    if isinstance(user_info, dict):
        user_info.pop("phone", None)

    return result
