import hashlib
from typing import Dict, Mapping, Optional

SENSITIVE_HEADERS = {"authorization", "cookie", "proxy-authorization"}


def mask_value(value: Optional[str]) -> str:
    """Provide a stable, low-leak identifier for a secret header value."""
    if not value:
        return "<empty>"
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]
    return f"len={len(value)} sha256={digest}"


def redact_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {
        name: mask_value(value) if name.lower() in SENSITIVE_HEADERS else value
        for name, value in headers.items()
    }
