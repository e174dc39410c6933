import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Base class for failures fetching the upstream subscription."""


class UpstreamRequestError(UpstreamError):
    """The request never produced a response (DNS, connect, TLS, bad url...)."""


class UpstreamStatusError(UpstreamError):
    def __init__(self, status_code: int):
        super().__init__(f"HTTP Status: {status_code}")
        self.status_code = status_code


class UpstreamReadError(UpstreamError):
    """The response started but its body could not be read in full."""


async def fetch_subscription(
    url: str,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> bytes:
    """
    Issues a single GET to the upstream and returns the raw body.
    No retries and no custom headers; timeout=None waits forever.
    """
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True, transport=transport) as client:
        try:
            request = client.build_request("GET", url)
            response = await client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise UpstreamRequestError(str(e) or type(e).__name__) from e

        try:
            if response.status_code != httpx.codes.OK:
                raise UpstreamStatusError(response.status_code)
            try:
                data = await response.aread()
            except httpx.HTTPError as e:
                raise UpstreamReadError(str(e) or type(e).__name__) from e
        finally:
            await response.aclose()

    logger.debug(f"Fetched {len(data)} bytes from {url}")
    return data
