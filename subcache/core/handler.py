import logging
from typing import Optional

import httpx
from fastapi.concurrency import run_in_threadpool

from subcache.core.cache_store import CacheStore
from subcache.core.config import UpstreamConfig
from subcache.core.fetcher import (
    UpstreamReadError,
    UpstreamRequestError,
    UpstreamStatusError,
    fetch_subscription,
)
from subcache.models.subscription import SubscriptionError, validate_subscription

logger = logging.getLogger(__name__)


class SubscriptionHandler:
    """
    Serves the upstream subscription, falling back to the cache slot.

    handle() never raises for upstream or cache problems: a failed fetch,
    a non-200 status, an unreadable body or a payload that fails validation
    all degrade to the cached bytes (b"" when there is no cache yet).
    Cache I/O and validation run in the threadpool so a slow disk only
    holds up its own request.
    """

    def __init__(
        self,
        upstream: UpstreamConfig,
        cache: CacheStore,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.upstream = upstream
        self.cache = cache
        self.timeout = timeout
        self._transport = transport

    async def handle(self) -> bytes:
        try:
            data = await fetch_subscription(self.upstream.url, timeout=self.timeout, transport=self._transport)
        except UpstreamRequestError as e:
            logger.warning(f"Failed to request subscription, err: {e}")
            return await run_in_threadpool(self.cache.get)
        except UpstreamStatusError as e:
            logger.warning(f"Failed to request subscription, HTTP Status: {e.status_code}")
            return await run_in_threadpool(self.cache.get)
        except UpstreamReadError as e:
            logger.warning(f"Failed to read subscription body, err: {e}")
            return await run_in_threadpool(self.cache.get)

        try:
            await run_in_threadpool(validate_subscription, data)
        except SubscriptionError as e:
            logger.warning(f"Subscription failed validation, err: {e}")
            return await run_in_threadpool(self.cache.get)

        try:
            await run_in_threadpool(self.cache.set, data)
        except OSError as e:
            # A stale cache only matters on the next failure
            logger.error(f"Failed to write cache {self.cache.path}, err: {e}")

        return data
