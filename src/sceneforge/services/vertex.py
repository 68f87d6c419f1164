"""Authenticated REST access to Google Cloud generation APIs."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import google.auth
import google.auth.transport.requests
import requests
from google.auth.exceptions import GoogleAuthError

from ..errors import PermanentError, TransientError, error_from_response
from ..quota import QuotaTracker

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]
DEFAULT_TIMEOUT = 120.0


class GoogleRestClient:
    """Issues JSON requests with application-default credentials.

    Blocking HTTP runs in a worker thread so callers can await it. HTTP
    failures are raised as classified ``GenerationError``s.
    """

    def __init__(
        self,
        service: str,
        quota: Optional[QuotaTracker] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._service = service
        self._quota = quota
        self._timeout = timeout
        self._credentials = None

    def _token(self) -> str:
        if self._credentials is None:
            self._credentials, _ = google.auth.default(scopes=SCOPES)
        if not self._credentials.valid:
            self._credentials.refresh(google.auth.transport.requests.Request())
        return self._credentials.token

    def _send(self, method: str, url: str, body: Optional[dict]) -> dict[str, Any]:
        try:
            headers = {
                "Authorization": f"Bearer {self._token()}",
                "Content-Type": "application/json",
            }
        except GoogleAuthError as e:
            raise PermanentError(f"{self._service} credentials unavailable: {e}") from e

        try:
            response = requests.request(
                method, url, json=body, headers=headers, timeout=self._timeout
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            raise TransientError(f"{self._service} connection error: {e}") from e

        if response.status_code != 200:
            error = error_from_response(response.status_code, response.text, self._service)
            logger.error(f"{self._service} API error: {error}")
            raise error

        return response.json()

    async def request(
        self,
        method: str,
        url: str,
        body: Optional[dict] = None,
        model: Optional[str] = None,
    ) -> dict[str, Any]:
        """Send one request, counting it against ``model`` when tracked."""
        if self._quota is not None and model:
            await self._quota.increment(model)
        return await asyncio.to_thread(self._send, method, url, body)

    async def post(self, url: str, body: dict, model: Optional[str] = None) -> dict[str, Any]:
        return await self.request("POST", url, body, model=model)

    async def get(self, url: str) -> dict[str, Any]:
        return await self.request("GET", url)


def save_media(path: Path, data: bytes) -> None:
    """Write generated media bytes, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)
