from typing import Optional

from app.repositories.base import AssessmentRepository
from app.utils.logger import logger, mask_phone
from app.utils.phone import normalize_phone_number


def register_member(profile: dict, repository: AssessmentRepository) -> str:
    user_id = normalize_phone_number(profile["phone"])
    repository.upsert_user(user_id, {**profile, "phone": user_id}, merge=False)
    logger.info(f"Registered member {mask_phone(user_id)}")
    return user_id


def check_member(user_id: str, repository: AssessmentRepository) -> Optional[dict]:
    user_id = normalize_phone_number(user_id)
    user = repository.get_user(user_id)
    logger.info(f"Member check for {mask_phone(user_id)}: {'found' if user else 'not found'}")
    return user
