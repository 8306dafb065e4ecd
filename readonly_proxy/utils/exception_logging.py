"""
Helpers for logging and describing exceptions raised while talking to upstream.
"""

import logging


def _safe_str(obj) -> str:
    """
    Convert an object to string, falling back to repr and then to the type name
    when __str__ or __repr__ themselves raise.
    """
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} object (string conversion failed)>"


def _describe(exception: BaseException) -> str:
    text = _safe_str(exception)
    name = type(exception).__name__
    return f"{name}: {text}" if text else name


def format_exception_message(exception: BaseException) -> str:
    """
    Format an exception together with its cause chain, e.g.
    "ConnectError: connection failed (caused by OSError: [Errno 111] refused)".

    httpx wraps the underlying socket and TLS errors, so the cause is usually
    the part that tells an operator what actually went wrong.
    """
    if exception is None:
        return "None"

    parts = [_describe(exception)]
    seen = {id(exception)}
    cause = exception.__cause__ or exception.__context__
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        parts.append(_describe(cause))
        cause = cause.__cause__ or cause.__context__

    if len(parts) == 1:
        return parts[0]
    causes = "; ".join(parts[1:])
    return f"{parts[0]} (caused by {causes})"


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: BaseException,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with its cause chain and traceback.

    Never raises: a failure while logging falls back to a minimal message.
    """
    message = f"{prefix} Exception: {format_exception_message(exception)}"
    try:
        logger.log(level, message, exc_info=exception)
    except Exception:
        try:
            logger.log(level, message)
        except Exception:
            pass
