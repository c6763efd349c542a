from fastapi import APIRouter, Depends, HTTPException

from app.config import Settings, get_settings
from app.dependencies import get_sms_client, get_verification_store
from app.models.request_models import SendSmsRequest, VerifySmsRequest
from app.models.response_models import SendSmsResponse, VerifySmsResponse
from app.services.verification_service import send_verification_code, verify_code
from app.utils.errors import InvalidPhoneNumberError, SmsConfigurationError, SmsDeliveryError

router = APIRouter()


@router.post("/send-sms", response_model=SendSmsResponse, response_model_exclude_none=True)
def send_sms(
    payload: SendSmsRequest,
    store=Depends(get_verification_store),
    sms_client=Depends(get_sms_client),
    settings: Settings = Depends(get_settings),
):
    if not payload.phoneNumber:
        raise HTTPException(status_code=400, detail="전화번호가 필요합니다.")

    try:
        outcome = send_verification_code(payload.phoneNumber, store, sms_client, settings)
    except InvalidPhoneNumberError:
        raise HTTPException(status_code=400, detail="유효하지 않은 전화번호입니다.")
    except SmsConfigurationError:
        raise HTTPException(status_code=500, detail="SMS 서비스 설정이 누락되었습니다.")
    except SmsDeliveryError:
        raise HTTPException(status_code=502, detail="인증번호 발송에 실패했습니다. 잠시 후 다시 시도해주세요.")

    return SendSmsResponse(success=True, message=outcome.message, code=outcome.code)


@router.post("/verify-sms", response_model=VerifySmsResponse)
def verify_sms(
    payload: VerifySmsRequest,
    store=Depends(get_verification_store),
    settings: Settings = Depends(get_settings),
):
    if not payload.phone or not payload.code:
        raise HTTPException(status_code=400, detail="전화번호와 인증번호가 필요합니다.")

    outcome = verify_code(payload.phone, payload.code, store, settings)
    return VerifySmsResponse(success=outcome.verified, verified=outcome.verified, message=outcome.message)
