"""Xiaomi push provider adapter.

Mental model refresher:
- This module is an outbound adapter.
- One `XiaomiSender` per app secret is a long-lived handle: create it once,
  reuse it for every batch, close it on shutdown.
- Application code only sees the `send_batch` callable and a plain result dict.
- Transport errors, read timeouts and connection resets included, are retried
  here and nowhere else. Provider error codes are returned, not raised; HTTP
  error statuses raise `RuntimeError`.
"""

from __future__ import annotations

import json
import time
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Mapping, Sequence

from ..types import SendResult
from .config import XIAOMI_OFFICIAL_BASE_URL

REGID_MESSAGE_PATH = "/v3/message/regid"
DEFAULT_RETRIES = 3


class XiaomiSender:
    def __init__(
        self,
        app_secret: str,
        *,
        restricted_package_name: str | None = None,
        base_url: str = XIAOMI_OFFICIAL_BASE_URL,
        timeout_seconds: float = 10.0,
        retries: int = DEFAULT_RETRIES,
        backoff_seconds: float = 1.0,
    ) -> None:
        if not app_secret or not app_secret.strip():
            raise RuntimeError("Xiaomi app secret must not be empty")
        self._app_secret = app_secret.strip()
        self._restricted_package_name = restricted_package_name
        self._endpoint = f"{base_url.rstrip('/')}{REGID_MESSAGE_PATH}"
        self._timeout_seconds = timeout_seconds
        self._retries = retries
        self._backoff_seconds = backoff_seconds
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def send_batch(
        self,
        *,
        message: Mapping[str, str],
        registration_ids: Sequence[str],
    ) -> SendResult:
        return self.send(message, registration_ids, retries=self._retries)

    def send(
        self,
        message: Mapping[str, str],
        registration_ids: Sequence[str],
        retries: int = DEFAULT_RETRIES,
    ) -> SendResult:
        """Send one message to a list of registration ids via the regid endpoint."""
        if self._closed:
            raise RuntimeError("Xiaomi sender is closed")
        if not registration_ids:
            raise ValueError("registration_ids must not be empty")

        fields = dict(message)
        fields["registration_id"] = ",".join(registration_ids)
        if self._restricted_package_name:
            fields["restricted_package_name"] = self._restricted_package_name
        payload = urllib.parse.urlencode(fields).encode("utf-8")

        attempt = 0
        while True:
            try:
                return self._post(payload)
            except urllib.error.HTTPError as exc:
                details = exc.read().decode("utf-8", errors="replace")
                raise RuntimeError(
                    f"Xiaomi push send failed HTTP {exc.code}: {details[:300]}"
                ) from exc
            except (urllib.error.URLError, TimeoutError, ConnectionError) as exc:
                if attempt >= retries:
                    reason = getattr(exc, "reason", None) or exc
                    raise RuntimeError(f"Xiaomi push send failed: {reason}") from exc
                time.sleep(self._backoff_seconds * (2**attempt))
                attempt += 1

    def _post(self, payload: bytes) -> SendResult:
        request = urllib.request.Request(self._endpoint, data=payload, method="POST")
        request.add_header("Authorization", f"key={self._app_secret}")
        request.add_header("Content-Type", "application/x-www-form-urlencoded;charset=UTF-8")

        with urllib.request.urlopen(request, timeout=self._timeout_seconds) as response:
            status = int(response.getcode())
            if status < 200 or status >= 300:
                raise RuntimeError(f"Xiaomi push send failed with status {status}")
            body = response.read()

        return parse_send_result(body)


def parse_send_result(body: bytes | str) -> SendResult:
    """Map a Xiaomi JSON response body onto the sender result shape."""
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    try:
        parsed: Any = json.loads(text)
    except ValueError as exc:
        raise RuntimeError(f"Xiaomi push returned non-JSON body: {text[:300]}") from exc
    if not isinstance(parsed, dict):
        raise RuntimeError("Xiaomi push response must be a JSON object")

    data = parsed.get("data") if isinstance(parsed.get("data"), dict) else {}
    return {
        "code": int(parsed.get("code") or 0),
        "result": parsed.get("result"),
        "reason": parsed.get("reason") or None,
        "description": parsed.get("description"),
        "message_id": data.get("id"),
        "trace_id": parsed.get("trace_id"),
    }
