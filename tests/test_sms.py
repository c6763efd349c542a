import hashlib
import hmac
import json
import re

import httpx
import pytest

from app.utils.errors import SmsDeliveryError
from app.utils.sms import SolapiClient, solapi_signature

AUTH_PATTERN = re.compile(r"HMAC-SHA256 apiKey=(\S+), date=(\S+), salt=(\S+), signature=([0-9a-f]{64})")


def _client(handler):
    return SolapiClient("key", "secret", "0212345678", transport=httpx.MockTransport(handler))


def test_signature_matches_hmac() -> None:
    expected = hmac.new(b"secret", b"2026-01-01T00:00:00Zabc", hashlib.sha256).hexdigest()
    assert solapi_signature("secret", "2026-01-01T00:00:00Z", "abc") == expected


def test_send_signs_and_posts_message() -> None:
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"status": "success"})

    _client(handler).send("+821012345678", "hello")

    assert seen["url"] == "https://api.solapi.com/messages/v4/send"
    assert seen["body"] == {"message": {"to": "+821012345678", "from": "0212345678", "text": "hello"}}
    api_key, date, salt, signature = AUTH_PATTERN.match(seen["auth"]).groups()
    assert api_key == "key"
    assert signature == solapi_signature("secret", date, salt)


def test_gateway_error_code() -> None:
    def handler(request):
        return httpx.Response(200, json={"errorCode": "InvalidApiKey", "errorMessage": "bad key"})

    with pytest.raises(SmsDeliveryError, match="bad key"):
        _client(handler).send("+821012345678", "hello")


def test_http_error_status() -> None:
    with pytest.raises(SmsDeliveryError):
        _client(lambda request: httpx.Response(500, text="oops")).send("+821012345678", "hello")


def test_unreachable_gateway() -> None:
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(SmsDeliveryError, match="unreachable"):
        _client(handler).send("+821012345678", "hello")
