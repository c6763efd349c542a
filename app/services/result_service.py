import secrets
import string
import time
from typing import List, Mapping, Optional, Sequence, Tuple

from app.models.report_models import Question, Report
from app.repositories.base import AssessmentRepository
from app.services.report_service import assemble_report
from app.utils.errors import NotFoundError
from app.utils.logger import logger, mask_phone
from app.utils.phone import normalize_phone_number
from app.utils.scoring import ReportConfig

BASE36 = string.digits + string.ascii_lowercase


def new_result_id() -> str:
    suffix = "".join(secrets.choice(BASE36) for _ in range(9))
    return f"result_{int(time.time() * 1000)}_{suffix}"


def submit_result(
    answers: Mapping[str, object],
    user_info: dict,
    questions: Sequence[Question],
    config: ReportConfig,
    repository: AssessmentRepository,
) -> Tuple[str, Report]:
    """Score a submission and persist it for its owner."""
    user_id = normalize_phone_number(user_info["phone"])
    report = assemble_report(questions, answers, config)
    result_id = new_result_id()

    repository.save_result(
        user_id=user_id,
        result_id=result_id,
        user_info={**user_info, "phone": user_id},
        answers=dict(answers),
        report=report.to_document(),
    )
    logger.info(f"Saved result {result_id} for {mask_phone(user_id)} (global={report.global_result.mean:.2f})")
    return result_id, report


def get_latest_result(user_id: str, repository: AssessmentRepository) -> Tuple[str, dict, Optional[dict]]:
    user_id = normalize_phone_number(user_id)
    latest = repository.get_latest_result(user_id)
    if latest is None:
        raise NotFoundError("검사 결과를 찾을 수 없습니다.")
    result_id, data = latest
    return result_id, data, repository.get_user(user_id)


def get_result_history(result_id: str, user_id: Optional[str], repository: AssessmentRepository) -> Tuple[dict, Optional[dict]]:
    """
    Look a stored result up by owner, or in the legacy collection when the
    owner is unknown. Returns (result, user_info).
    """
    if user_id:
        user_id = normalize_phone_number(user_id)
        data = repository.get_user_result(user_id, result_id)
    else:
        data = repository.get_legacy_result(result_id)

    if data is None:
        raise NotFoundError("검사 결과를 찾을 수 없습니다.")

    user_info = data.get("userInfo")
    if user_id and not user_info:
        user_info = repository.get_user(user_id)
    return data, user_info


def get_legacy_result(result_id: str, repository: AssessmentRepository) -> dict:
    data = repository.get_legacy_result(result_id)
    if data is None:
        raise NotFoundError("결과를 찾을 수 없습니다.")
    return data


def list_user_history(user_id: str, repository: AssessmentRepository, limit: int = 10) -> List[dict]:
    user_id = normalize_phone_number(user_id)
    return [
        {"id": rid, "timestamp": data.get("createdAt"), "globalResult": data.get("globalResult")}
        for rid, data in repository.list_user_results(user_id, limit)
    ]
