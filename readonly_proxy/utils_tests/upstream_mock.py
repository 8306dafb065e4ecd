import asyncio
from typing import Callable, List, Optional

import httpx


class RecordingUpstream:
    """
    Stand-in for the upstream API built on httpx.MockTransport.

    Records every request it receives and answers with `responder`, which
    defaults to a fixed JSON document.
    """

    def __init__(
        self,
        responder: Optional[Callable[[httpx.Request], httpx.Response]] = None,
        delay: float = 0.0,
    ):
        self.requests: List[httpx.Request] = []
        self.responder = responder or (
            lambda request: httpx.Response(200, json={"clientApiKey": "abc"})
        )
        self.delay = delay
        self.cancelled = False
        self.completed = False
        self.transport = httpx.MockTransport(self._handle)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        self.completed = True
        return self.responder(request)

    @property
    def called(self) -> bool:
        return bool(self.requests)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


def raising(exc: Exception) -> Callable[[httpx.Request], httpx.Response]:
    def _responder(request: httpx.Request) -> httpx.Response:
        raise exc

    return _responder
