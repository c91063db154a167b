import logging
from typing import Optional

import httpx

from ..config import settings
from ..steps.step import AsyncStep, AsyncStepFactory

logger = logging.getLogger("svc-harness.checks.http")


class HttpCheckError(Exception):
    """Raised when an HTTP readiness check gets a transport error or an unexpected status."""


def http_status_check(
    url: str,
    expected: Optional[int] = 200,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncStepFactory:
    """
    Build an async-step factory that GETs url and checks the status code.

    expected=None accepts any 2xx status. transport is passed to httpx.AsyncClient.
    """
    request_timeout = timeout if timeout is not None else settings.HTTP_CHECK_TIMEOUT

    async def check() -> int:
        try:
            async with httpx.AsyncClient(timeout=request_timeout, transport=transport) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            raise HttpCheckError(f"Failed to make API call to {url}: {e!r}") from e

        if expected is None:
            ok = response.is_success
        else:
            ok = response.status_code == expected
        if not ok:
            raise HttpCheckError(f"API call failed: Status code {response.status_code}")

        logger.info(f"GET {url} -> {response.status_code}")
        return response.status_code

    return check


def http_check_step(
    name: str,
    url: str,
    description: str = "",
    expected: Optional[int] = 200,
    timeout: Optional[float] = None,
) -> AsyncStep:
    if not description:
        want = "2xx" if expected is None else str(expected)
        description = f"Check GET {url} responds {want}"
    return AsyncStep(name=name, description=description, factory=http_status_check(url, expected, timeout))
