"""
Shared httpx plumbing for the collaborator adapters.

Every call carries the service API key and a hard timeout. Failures are
translated into UpstreamUnavailable (retry is safe) or UpstreamRejected.
"""

import logging
from typing import Any, Optional, Sequence

import httpx

from src.app.services.upstream import UpstreamRejected, UpstreamUnavailable

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Service-API-Key"


class ServiceClient:
    """Base class for adapters talking to one collaborator service"""

    service = "upstream"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict] = None,
        accept: Sequence[int] = (),
    ) -> httpx.Response:
        """
        Send a request and return the response.

        Statuses listed in accept are returned to the caller instead of
        raising.

        Raises:
            UpstreamUnavailable: transport error, timeout or 5xx
            UpstreamRejected: any other 4xx
        """
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers={API_KEY_HEADER: self.api_key, "Accept": "application/json"},
                timeout=httpx.Timeout(self.timeout),
                transport=self.transport,
            ) as client:
                response = await client.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            logger.warning(f"{self.service} service {method} {path} failed: {exc!r}")
            raise UpstreamUnavailable(self.service, str(exc) or type(exc).__name__) from exc

        if response.status_code in accept or response.is_success:
            return response

        detail = _describe(response)
        if response.status_code >= 500:
            logger.warning(f"{self.service} service {method} {path}: {detail}")
            raise UpstreamUnavailable(self.service, detail)

        logger.warning(f"{self.service} service rejected {method} {path}: {detail}")
        raise UpstreamRejected(self.service, detail)


def _describe(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = response.text[:200]
    if isinstance(body, dict):
        body = body.get("detail") or body.get("message") or body.get("error") or body
    return f"HTTP {response.status_code}: {body}"


def read_json(service: str, response: httpx.Response) -> dict:
    """Decode a success body; an unreadable body means nothing was confirmed"""
    try:
        body = response.json()
    except ValueError as exc:
        raise UpstreamUnavailable(service, "response body is not JSON") from exc
    if not isinstance(body, dict):
        raise UpstreamUnavailable(service, "response body is not a JSON object")
    return body
