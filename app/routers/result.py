from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.dependencies import get_catalog, get_config, get_repository
from app.models.report_models import Question
from app.models.request_models import ResultRequest
from app.models.response_models import ResultHistoryResponse, ResultResponse, UserHistoryResponse
from app.services import result_service
from app.utils.errors import NotFoundError
from app.utils.scoring import ReportConfig

router = APIRouter()


def _report_fields(data: dict) -> dict:
    return {
        "categoryResults": data.get("categoryResults") or {},
        "globalResult": data.get("globalResult"),
        "baiResult": data.get("baiResult"),
    }


@router.post("", response_model=ResultResponse, response_model_exclude_none=True)
def submit_result(
    payload: ResultRequest,
    questions: List[Question] = Depends(get_catalog),
    config: ReportConfig = Depends(get_config),
    repository=Depends(get_repository),
):
    if payload.userInfo is None or not payload.userInfo.phone:
        raise HTTPException(status_code=400, detail="사용자 정보가 유효하지 않습니다.")

    result_id, report = result_service.submit_result(
        payload.answers,
        payload.userInfo.model_dump(exclude_none=True),
        questions,
        config,
        repository,
    )
    return ResultResponse(resultId=result_id, **report.to_document())


@router.get("", response_model=ResultResponse, response_model_exclude_none=True)
def latest_result(userId: str = Query(...), repository=Depends(get_repository)):
    try:
        result_id, data, user_info = result_service.get_latest_result(userId, repository)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ResultResponse(
        resultId=result_id,
        userInfo=user_info,
        createdAt=data.get("createdAt"),
        **_report_fields(data),
    )


@router.get("/history", response_model=ResultHistoryResponse, response_model_exclude_none=True)
def result_history(
    resultId: str = Query(...),
    userId: Optional[str] = Query(None),
    repository=Depends(get_repository),
):
    try:
        data, user_info = result_service.get_result_history(resultId, userId, repository)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ResultHistoryResponse(
        resultId=resultId,
        userInfo=user_info,
        answers=data.get("answers", {}),
        createdAt=data.get("createdAt"),
        **_report_fields(data),
    )


@router.get("/user-history", response_model=UserHistoryResponse)
def user_history(
    userId: str = Query(...),
    limit: int = Query(10, ge=1, le=100),
    repository=Depends(get_repository),
):
    return UserHistoryResponse(results=result_service.list_user_history(userId, repository, limit))


@router.get("/{result_id}", response_model=ResultResponse, response_model_exclude_none=True)
def legacy_result(result_id: str, repository=Depends(get_repository)):
    try:
        data = result_service.get_legacy_result(result_id, repository)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ResultResponse(resultId=result_id, createdAt=data.get("createdAt"), **_report_fields(data))
