import re

from app.utils.errors import InvalidPhoneNumberError

E164_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")


def normalize_phone_number(phone: str) -> str:
    """Keep a leading '+' (international form) and digits only."""
    phone = (phone or "").strip()
    if phone.startswith("+"):
        return "+" + re.sub(r"[^0-9]", "", phone[1:])
    return re.sub(r"[^0-9]", "", phone)


def validate_phone_number(phone: str) -> str:
    normalized = normalize_phone_number(phone)
    if not E164_PATTERN.match(normalized):
        raise InvalidPhoneNumberError(f"Invalid phone number: {phone!r}")
    return normalized
