"""
Builds the responses the proxy writes back to the caller: the metadata
document served on the root path and the relayed upstream responses.
"""

import json
import logging
from typing import Any, Dict, List, Tuple

import httpx

from readonly_proxy import vars as settings
from readonly_proxy.models import InboundRequest, Notice, OutboundResponse
from readonly_proxy.proxy.admission import HOP_BY_HOP_HEADERS
from readonly_proxy.proxy.errors import MalformedUpstreamBodyError

logger = logging.getLogger("uvicorn.error")

JSON_CONTENT_TYPE = "application/json"
DEFAULT_CONTENT_TYPE = "text/plain"

# Hop-by-hop headers plus the framing headers that stop describing the body
# once it has been decoded or rewritten.
EXCLUDED_RESPONSE_HEADERS = HOP_BY_HOP_HEADERS | {
    "content-length",
    "content-encoding",
    "content-type",
}


def root_response(inbound: InboundRequest, notice: Notice) -> OutboundResponse:
    payload = dict(notice.fields())
    payload["example"] = f"{inbound.origin}{settings.EXAMPLE_PATH}"
    return OutboundResponse(
        status_code=200,
        body=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
        headers=[("content-type", JSON_CONTENT_TYPE)],
    )


def is_json_content_type(content_type: str) -> bool:
    return (content_type or "").startswith(JSON_CONTENT_TYPE)


def annotate(data: Any, notice: Notice) -> Dict[str, Any]:
    """
    Merge the notice into a decoded JSON document.

    Notice fields come first and win over upstream keys with the same name.
    Arrays and scalars are kept under a "data" key.
    """
    merged: Dict[str, Any] = dict(notice.fields())
    if isinstance(data, dict):
        for key, value in data.items():
            if key not in merged:
                merged[key] = value
    else:
        merged["data"] = data
    return merged


def annotate_json_body(body: bytes, notice: Notice) -> bytes:
    try:
        data = json.loads(body)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedUpstreamBodyError(
            f"Upstream declared a JSON body that could not be parsed: {e}"
        ) from e
    return json.dumps(annotate(data, notice), indent=2, ensure_ascii=False).encode("utf-8")


def relay_headers(upstream: httpx.Response) -> List[Tuple[str, str]]:
    headers = []
    for name, value in upstream.headers.multi_items():
        if name.lower() in EXCLUDED_RESPONSE_HEADERS:
            continue
        headers.append((name, value))
    return headers


def proxied_response(upstream: httpx.Response, notice: Notice) -> OutboundResponse:
    content_type = upstream.headers.get("content-type")
    body = upstream.content

    if is_json_content_type(content_type) and body.strip():
        logger.info("Response is JSON, adding notice comment")
        body = annotate_json_body(body, notice)

    headers = relay_headers(upstream)
    headers.append(("content-type", content_type or DEFAULT_CONTENT_TYPE))
    return OutboundResponse(status_code=upstream.status_code, body=body, headers=headers)
