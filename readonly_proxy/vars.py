import os
from typing import Optional

SERVICE_NAME = os.getenv("SERVICE_NAME", "readonly-api-proxy")
LOG_LEVEL = os.getenv("LOG_LEVEL", "info").lower()
HOST = os.environ.get("HOST", "0.0.0.0")

DEFAULT_PORT = 3000
MAX_PORT = 65535


def _parse_positive_int(raw: str, default: int, maximum: Optional[int] = None) -> int:
    """Parse an integer setting, falling back to the default when invalid or out of range."""
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if value <= 0 or (maximum is not None and value > maximum):
        return default
    return value


PORT = _parse_positive_int(os.environ.get("PORT", ""), DEFAULT_PORT, MAX_PORT)

UPSTREAM_HOST = os.getenv("UPSTREAM_HOST", "api.vrchat.cloud")
UPSTREAM_PORT = _parse_positive_int(os.getenv("UPSTREAM_PORT", ""), 443, MAX_PORT)
UPSTREAM_SCHEME = os.getenv("UPSTREAM_SCHEME", "https")
UPSTREAM_API_PREFIX = "/" + os.getenv("UPSTREAM_API_PREFIX", "/api/1").strip("/")
UPSTREAM_TIMEOUT_MS = _parse_positive_int(os.getenv("UPSTREAM_TIMEOUT_MS", ""), 5000)

README_URL = os.getenv("README_URL", "https://github.com/ariesclark/vrchat-proxy")
NOTICE_AUTHORS = os.getenv("NOTICE_AUTHORS", "ariesclark.com")
NOTICE_TEXT = os.getenv(
    "NOTICE_TEXT",
    "This is a readonly proxy for the VRChat API. "
    "It is not affiliated with VRChat or VRChat Inc. "
    f"For more information, visit {README_URL}.",
)
EXAMPLE_PATH = os.getenv("EXAMPLE_PATH", "/1/config")

# Served locally, never proxied
METRICS_PATH = os.getenv("METRICS_PATH", "/_metrics")

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")
