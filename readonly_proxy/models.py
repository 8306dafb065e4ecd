from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from starlette.requests import Request
from starlette.responses import Response

from readonly_proxy import vars as settings


@dataclass(frozen=True)
class Notice:
    """Attribution injected as the leading fields of every JSON body."""

    text: str
    readme: str
    authors: str = ""

    def fields(self) -> Dict[str, str]:
        result = {"_comment": self.text, "_readme": self.readme}
        if self.authors:
            result["_authors"] = self.authors
        return result

    @classmethod
    def from_settings(cls) -> "Notice":
        return cls(
            text=settings.NOTICE_TEXT,
            readme=settings.README_URL,
            authors=settings.NOTICE_AUTHORS,
        )


@dataclass(frozen=True)
class InboundRequest:
    method: str
    path: str
    query: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    scheme: str = "http"

    @property
    def host(self) -> str:
        return self.headers.get("host", "")

    @property
    def origin(self) -> str:
        return f"{self.scheme}://{self.host}"

    @property
    def is_root(self) -> bool:
        return self.path == "/"

    @classmethod
    def from_request(cls, request: Request) -> "InboundRequest":
        """Snapshot a Starlette request. Duplicate header names keep the last value."""
        headers: Dict[str, str] = {}
        for name, value in request.headers.items():
            headers[name.lower()] = value

        raw_path = request.scope.get("raw_path")
        path = raw_path.decode("latin-1") if raw_path else request.url.path
        # raw_path carries the query string under some servers
        path = path.split("?", 1)[0] or "/"

        return cls(
            method=request.method,
            path=path,
            query=request.url.query,
            headers=headers,
            scheme=request.url.scheme,
        )


@dataclass(frozen=True)
class UpstreamTarget:
    scheme: str
    host: str
    port: int
    path: str
    query: str = ""

    @property
    def url(self) -> str:
        url = f"{self.scheme}://{self.host}:{self.port}{self.path}"
        if self.query:
            url = f"{url}?{self.query}"
        return url


@dataclass
class OutboundResponse:
    status_code: int
    body: bytes = b""
    headers: List[Tuple[str, str]] = field(default_factory=list)

    def header(self, name: str) -> Optional[str]:
        name = name.lower()
        for key, value in reversed(self.headers):
            if key.lower() == name:
                return value
        return None

    def to_response(self) -> Response:
        response = Response(content=self.body, status_code=self.status_code)
        for name, value in self.headers:
            response.headers.append(name, value)
        return response
