"""Tuya cloud API client.

Fetches the status of a single device through the Tuya OpenAPI. Every
request is signed with HMAC-SHA256 over the client id, the access token
(for business calls), a millisecond timestamp and a canonical form of the
request.
"""

import asyncio
import hashlib
import hmac
import json
import time
import urllib.error
import urllib.request
from typing import Any, cast

from climate.lib.config import TuyaSettings, get_settings
from climate.lib.exceptions import SourceUnavailableError
from climate.logging import get_logger
from climate.source import StatusItem

logger = get_logger("source.tuya")

_TOKEN_PATH = "/v1.0/token?grant_type=1"
_STATUS_PATH = "/v1.0/devices/{device_id}/status"
_EMPTY_BODY_HASH = hashlib.sha256(b"").hexdigest()


def sign(secret: str, payload: str) -> str:
    """Return the uppercase hex HMAC-SHA256 of payload."""
    return (
        hmac.new(secret.encode(), payload.encode(), hashlib.sha256)
        .hexdigest()
        .upper()
    )


def string_to_sign(method: str, path: str) -> str:
    """Canonical request string for a body-less request."""
    return f"{method}\n{_EMPTY_BODY_HASH}\n\n{path}"


def _timestamp_ms() -> str:
    return str(int(time.time() * 1000))


class TuyaCloudSource:
    """Reading source backed by the Tuya cloud device status endpoint."""

    def __init__(
        self,
        settings: TuyaSettings | None = None,
        timeout_sec: float | None = None,
    ) -> None:
        app_settings = get_settings()
        self._cfg = settings or app_settings.tuya
        self._timeout_sec = timeout_sec or app_settings.polling.source_timeout_sec

    def _headers(self, path: str, token: str = "") -> dict[str, str]:
        t = _timestamp_ms()
        secret = self._cfg.secret_key.get_secret_value()
        payload = self._cfg.access_key + token + t + string_to_sign("GET", path)
        headers = {
            "client_id": self._cfg.access_key,
            "t": t,
            "sign_method": "HMAC-SHA256",
            "sign": sign(secret, payload),
        }
        if token:
            headers["access_token"] = token
            headers["Content-Type"] = "application/json"
        return headers

    def _get(self, path: str, headers: dict[str, str]) -> Any:
        """Perform a signed GET and return the ``result`` of the envelope."""
        req = urllib.request.Request(
            f"{self._cfg.host}{path}", headers=headers, method="GET"
        )
        try:
            with urllib.request.urlopen(req, timeout=self._timeout_sec) as resp:
                body = json.loads(resp.read().decode())
        except (urllib.error.URLError, OSError) as err:
            raise SourceUnavailableError(f"Tuya request failed: {err}") from err
        except (UnicodeDecodeError, json.JSONDecodeError) as err:
            raise SourceUnavailableError(f"Tuya returned invalid JSON: {err}") from err

        if not isinstance(body, dict) or not body.get("success"):
            msg = body.get("msg") if isinstance(body, dict) else body
            raise SourceUnavailableError(f"Tuya request rejected: {msg}")
        return body.get("result")

    def _get_token(self) -> str:
        result = self._get(_TOKEN_PATH, self._headers(_TOKEN_PATH))
        token = result.get("access_token") if isinstance(result, dict) else None
        if not token:
            raise SourceUnavailableError("Tuya token response has no access_token")
        return cast(str, token)

    def _get_status(self) -> list[StatusItem]:
        token = self._get_token()
        path = _STATUS_PATH.format(device_id=self._cfg.device_id)
        result = self._get(path, self._headers(path, token))
        if not isinstance(result, list):
            raise SourceUnavailableError("Tuya status response is not a list")
        return cast(list[StatusItem], result)

    async def fetch_status(self) -> list[StatusItem]:
        """Fetch the device status (token request then status request)."""
        status = await asyncio.to_thread(self._get_status)
        logger.debug("Fetched %d status items", len(status))
        return status
