import logging
from typing import Dict, Mapping

from readonly_proxy.proxy.errors import (
    BlockedClientError,
    CredentialsForbiddenError,
    MethodNotAllowedError,
)

logger = logging.getLogger("uvicorn.error")

ALLOWED_METHOD = "get"
BLOCKED_USER_AGENT = "PostmanRuntime"
CREDENTIAL_HEADERS = ("authorization", "cookie")

# Hop-by-hop headers that should NOT be forwarded (RFC 2616)
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
}

# The inbound body is never forwarded, so its framing headers are dropped too.
# Accept-Encoding is left to httpx, which only advertises codecs it can decode.
# The upstream Host header comes from the target URL.
STRIPPED_HEADERS = {
    "referer",
    "host",
    "content-length",
    "accept-encoding",
} | HOP_BY_HOP_HEADERS


def strip_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Copy the inbound headers without the ones that must not reach upstream."""
    return {
        name: value
        for name, value in headers.items()
        if name.lower() not in STRIPPED_HEADERS
    }


def check_method(method: str) -> None:
    if (method or "").lower() != ALLOWED_METHOD:
        logger.info(f"Rejecting {method} request: only GET is allowed")
        raise MethodNotAllowedError()


def check_user_agent(headers: Mapping[str, str]) -> None:
    user_agent = headers.get("user-agent", "")
    if BLOCKED_USER_AGENT in user_agent:
        logger.info(f"Rejecting request from blocked user-agent: {user_agent}")
        raise BlockedClientError()


def check_credentials(headers: Mapping[str, str]) -> None:
    present = [name for name in CREDENTIAL_HEADERS if name in headers]
    if present:
        logger.info(f"Rejecting request carrying credentials: {', '.join(present)}")
        raise CredentialsForbiddenError()


def admit(method: str, headers: Mapping[str, str]) -> Dict[str, str]:
    """
    Validate a request and return the headers to forward upstream.

    Expects lower-cased header names. The checks run in order and the first
    failure raises; Referer, Host and the framing headers are dropped
    whatever the outcome.
    """
    forwarded = strip_headers(headers)
    check_method(method)
    check_user_agent(forwarded)
    check_credentials(forwarded)
    return forwarded
