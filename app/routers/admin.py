from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.config import Settings, get_settings
from app.dependencies import get_repository
from app.models.response_models import AdminResponse
from app.services import admin_service
from app.utils.errors import AdminAuthError

router = APIRouter()


def require_admin(key: Optional[str] = Query(None), settings: Settings = Depends(get_settings)):
    try:
        admin_service.check_admin_key(key, settings.ADMIN_API_KEY)
    except AdminAuthError as e:
        raise HTTPException(status_code=401, detail=str(e))


@router.get("/add-created-at", response_model=AdminResponse, dependencies=[Depends(require_admin)])
def add_created_at(repository=Depends(get_repository)):
    updated, skipped = admin_service.add_created_at(repository)
    return AdminResponse(
        message=f"{updated}명의 사용자에게 createdAt 필드를 추가했습니다.",
        usersUpdated=updated,
        usersSkipped=skipped,
    )


@router.get("/update-consents", response_model=AdminResponse, dependencies=[Depends(require_admin)])
def update_consents(repository=Depends(get_repository)):
    updated = admin_service.update_consents(repository)
    return AdminResponse(message=f"{updated}명의 사용자 동의 항목을 업데이트했습니다.", usersUpdated=updated)
