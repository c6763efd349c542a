import hashlib
import hmac
import secrets
import string
from datetime import datetime, timezone

import httpx

from app.utils.errors import SmsDeliveryError
from app.utils.logger import logger, mask_phone

SEND_PATH = "/messages/v4/send"


def solapi_signature(api_secret: str, date: str, salt: str) -> str:
    """HMAC-SHA256 over date + salt, hex encoded."""
    return hmac.new(api_secret.encode(), (date + salt).encode(), hashlib.sha256).hexdigest()


class SolapiClient:
    """Minimal SOLAPI messaging client."""

    def __init__(self, api_key: str, api_secret: str, sender: str, base_url: str = "https://api.solapi.com", timeout: float = 10.0, transport=None):
        self.api_key = api_key
        self.api_secret = api_secret
        self.sender = sender
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _authorization(self) -> str:
        date = datetime.now(timezone.utc).isoformat()
        salt = "".join(secrets.choice(string.ascii_lowercase + string.digits) for _ in range(8))
        signature = solapi_signature(self.api_secret, date, salt)
        return f"HMAC-SHA256 apiKey={self.api_key}, date={date}, salt={salt}, signature={signature}"

    def send(self, to: str, text: str) -> dict:
        body = {"message": {"to": to, "from": self.sender, "text": text}}
        headers = {"Content-Type": "application/json", "Authorization": self._authorization()}

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(f"{self.base_url}{SEND_PATH}", json=body, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"SMS request to {mask_phone(to)} failed: {e}")
            raise SmsDeliveryError("SMS gateway unreachable") from e

        try:
            result = response.json()
        except ValueError:
            result = {}

        if response.status_code >= 400 or result.get("errorCode"):
            logger.error(
                f"SMS rejected for {mask_phone(to)}: status={response.status_code} "
                f"errorCode={result.get('errorCode')} errorMessage={result.get('errorMessage')}"
            )
            raise SmsDeliveryError(result.get("errorMessage") or f"SMS gateway returned {response.status_code}")

        logger.info(f"SMS sent to {mask_phone(to)}")
        return result
