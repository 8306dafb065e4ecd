"""
Error taxonomy of the proxy and the mapping from errors to JSON responses.

Every stage of the pipeline signals failure by raising one of the ProxyError
subclasses below; the pipeline turns them into a response with
`error_response`, so nothing reaches the transport as an unhandled fault.
"""

import json
from typing import Optional

from readonly_proxy.models import Notice, OutboundResponse


class ProxyError(Exception):
    """Base class for every failure the pipeline renders as a response."""

    status_code = 500
    message = "Internal Server Error"
    comment = "An internal server error occurred."

    def __init__(self, comment: Optional[str] = None):
        if comment is not None:
            self.comment = comment
        super().__init__(self.comment)


class ClientError(ProxyError):
    """The caller sent a request the proxy refuses to forward."""

    status_code = 400
    message = "Bad Request"


class MethodNotAllowedError(ClientError):
    status_code = 405
    message = "Method Not Allowed"
    comment = "Only GET requests are allowed."


class BadRequestError(ClientError):
    pass


class BlockedClientError(BadRequestError):
    comment = "Requests with current user-agent will always fail."


class CredentialsForbiddenError(BadRequestError):
    comment = "Requests with credentials are not allowed."


class UpstreamTimeoutError(ProxyError):
    status_code = 504
    message = "Gateway Timeout"
    comment = "The request timed out."


class UpstreamFailureError(ProxyError):
    """Transport-level failure while contacting upstream."""


class MalformedUpstreamBodyError(ProxyError):
    """Upstream declared a JSON body that does not parse."""


def error_payload(exc: ProxyError, notice: Notice) -> dict:
    payload = dict(notice.fields())
    payload["error"] = {
        "_comment": exc.comment,
        "message": exc.message,
        "status_code": exc.status_code,
    }
    return payload


def error_response(exc: ProxyError, notice: Notice) -> OutboundResponse:
    body = json.dumps(error_payload(exc, notice), ensure_ascii=False).encode("utf-8")
    return OutboundResponse(
        status_code=exc.status_code,
        body=body,
        headers=[("content-type", "application/json")],
    )
