import asyncio
import logging
from typing import Mapping, Optional

import httpx

from readonly_proxy import vars as settings
from readonly_proxy.models import UpstreamTarget
from readonly_proxy.proxy.errors import UpstreamFailureError, UpstreamTimeoutError
from readonly_proxy.utils.exception_logging import format_exception_message

logger = logging.getLogger("uvicorn.error")


class UpstreamDispatcher:
    """
    Sends one request upstream under a fixed deadline.

    A fresh AsyncClient is opened per dispatch and closed on every exit path,
    including cancellation by the deadline. `transport` lets tests plug in an
    httpx.MockTransport.
    """

    def __init__(
        self,
        timeout_ms: int = settings.UPSTREAM_TIMEOUT_MS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout_ms = timeout_ms
        self.transport = transport

    @property
    def timeout(self) -> float:
        return self.timeout_ms / 1000

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=False,
            transport=self.transport,
        )

    async def _send(
        self, method: str, target: UpstreamTarget, headers: Mapping[str, str]
    ) -> httpx.Response:
        async with self._client() as client:
            # request() buffers the whole body before returning
            return await client.request(method=method, url=target.url, headers=dict(headers))

    async def dispatch(
        self, method: str, target: UpstreamTarget, headers: Mapping[str, str]
    ) -> httpx.Response:
        logger.info(f"Fetching URL: {target.url}")
        try:
            response = await asyncio.wait_for(
                self._send(method, target, headers), timeout=self.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning(f"Upstream timeout after {self.timeout_ms} ms for {target.url}: {e!r}")
            raise UpstreamTimeoutError() from e
        except httpx.HTTPError as e:
            detail = format_exception_message(e)
            logger.error(f"Upstream request to {target.url} failed: {detail}")
            raise UpstreamFailureError(f"Upstream request failed: {detail}") from e

        logger.info(f"Response received from upstream: {response.status_code}")
        return response
