from fastapi import APIRouter, Depends, HTTPException

from app.config import Settings, get_settings
from app.dependencies import get_repository
from app.models.request_models import ShareRequest
from app.models.response_models import SharedResultResponse, ShareResponse
from app.services.share_service import create_share, get_share
from app.utils.errors import NotFoundError, ShareExpiredError

router = APIRouter()


@router.post("", response_model=ShareResponse)
def share_result(
    payload: ShareRequest,
    repository=Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    share_id, share_url = create_share(payload.model_dump(), repository, settings.SHARE_TTL_DAYS)
    return ShareResponse(shareId=share_id, shareUrl=share_url)


@router.get("/{share_id}", response_model=SharedResultResponse)
def shared_result(share_id: str, repository=Depends(get_repository)):
    try:
        result = get_share(share_id, repository)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ShareExpiredError as e:
        raise HTTPException(status_code=410, detail=str(e))

    return SharedResultResponse(result=result)
