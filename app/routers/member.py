from fastapi import APIRouter, Depends, HTTPException, Query

from app.dependencies import get_repository
from app.models.request_models import MemberRequest
from app.models.response_models import MemberCheckResponse, MemberResponse
from app.services.member_service import check_member, register_member

router = APIRouter()


@router.post("", response_model=MemberResponse)
def create_member(payload: MemberRequest, repository=Depends(get_repository)):
    if payload.missing_required():
        raise HTTPException(status_code=400, detail="필수 입력 항목이 누락되었습니다.")

    register_member(payload.model_dump(exclude_none=True), repository)
    return MemberResponse()


@router.get("/check", response_model=MemberCheckResponse)
def member_check(userId: str = Query(...), repository=Depends(get_repository)):
    user = check_member(userId, repository)
    if user is None:
        return MemberCheckResponse(userData=None, message="사용자 정보가 없습니다.")
    return MemberCheckResponse(userData=user, message="사용자 정보를 찾았습니다.")
