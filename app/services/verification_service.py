import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.config import Settings
from app.repositories.base import VerificationStore
from app.utils.errors import SmsConfigurationError
from app.utils.logger import logger, mask_phone
from app.utils.phone import normalize_phone_number, validate_phone_number

MSG_SENT = "인증번호가 발송되었습니다."
MSG_NOT_ISSUED = "인증번호가 발급되지 않았거나 만료되었습니다. 다시 요청해주세요."
MSG_EXPIRED = "인증번호가 만료되었습니다. 다시 요청해주세요."
MSG_TOO_MANY = "인증 시도 횟수를 초과했습니다. 인증번호를 다시 요청해주세요."
MSG_MISMATCH = "인증번호가 일치하지 않습니다."
MSG_VERIFIED = "인증이 완료되었습니다."


@dataclass
class SendOutcome:
    phone: str
    message: str
    # only populated in development
    code: Optional[str] = None


@dataclass
class VerificationOutcome:
    verified: bool
    message: str


def generate_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def _codes_match(given: str, expected: str) -> bool:
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def send_verification_code(phone_number, store: VerificationStore, sms_client, settings: Settings, now=None) -> SendOutcome:
    phone = validate_phone_number(phone_number)
    now = now or datetime.now(timezone.utc)
    expires_at = now + timedelta(seconds=settings.OTP_TTL_SECONDS)

    if settings.is_development:
        code = settings.DEV_VERIFICATION_CODE
        store.set_code(phone, code, expires_at)
        logger.info(f"[DEV] Verification code for {mask_phone(phone)} stored, SMS skipped")
        return SendOutcome(phone=phone, message=MSG_SENT, code=code)

    if sms_client is None:
        logger.error("SMS gateway credentials are not configured")
        raise SmsConfigurationError("SMS gateway credentials are not configured")

    code = generate_code()
    store.set_code(phone, code, expires_at)
    logger.info(f"Verification code issued for {mask_phone(phone)}, expires {expires_at.isoformat()}")

    sms_client.send(phone, f"{settings.SMS_BRAND} 인증번호는 [{code}] 입니다.")
    return SendOutcome(phone=phone, message=MSG_SENT)


def verify_code(phone_number, code: str, store: VerificationStore, settings: Settings, now=None) -> VerificationOutcome:
    phone = normalize_phone_number(phone_number)
    now = now or datetime.now(timezone.utc)

    attempts = store.increment_attempts(phone)
    if attempts is None:
        return VerificationOutcome(False, MSG_NOT_ISSUED)

    record = store.get_code(phone)
    if record is None:
        return VerificationOutcome(False, MSG_NOT_ISSUED)

    if now > record.expires_at:
        logger.warning(f"Expired verification code used for {mask_phone(phone)}")
        store.delete_code(phone)
        return VerificationOutcome(False, MSG_EXPIRED)

    if attempts > settings.OTP_MAX_ATTEMPTS:
        logger.warning(f"Too many verification attempts for {mask_phone(phone)}")
        store.delete_code(phone)
        return VerificationOutcome(False, MSG_TOO_MANY)

    accepted = _codes_match(code, record.code) or (
        settings.is_development and _codes_match(code, settings.DEV_VERIFICATION_CODE)
    )
    if not accepted:
        logger.warning(f"Verification code mismatch for {mask_phone(phone)} (attempt {attempts})")
        return VerificationOutcome(False, MSG_MISMATCH)

    store.delete_code(phone)
    logger.info(f"Phone {mask_phone(phone)} verified")
    return VerificationOutcome(True, MSG_VERIFIED)
