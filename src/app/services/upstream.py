"""
Upstream call handling shared by the onboarding saga.

Collaborator adapters raise UpstreamUnavailable for failures that are safe to
retry (timeouts, transport errors, 5xx) and UpstreamRejected when the
collaborator refuses the request outright.
"""

import asyncio
from typing import Awaitable, TypeVar

T = TypeVar("T")


class UpstreamError(Exception):
    """Base class for collaborator failures"""

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(f"{service}: {message}")


class UpstreamUnavailable(UpstreamError):
    """Collaborator failed or timed out; nothing was confirmed"""


class UpstreamRejected(UpstreamError):
    """Collaborator permanently refused the request"""


async def call_upstream(service: str, call: Awaitable[T], timeout: float) -> T:
    """
    Await a collaborator call with a hard deadline.

    Raises:
        UpstreamUnavailable: the call did not confirm within timeout
    """
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise UpstreamUnavailable(service, f"no response within {timeout}s") from exc
