from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from readonly_proxy.models import InboundRequest, Notice
from readonly_proxy.proxy.pipeline import RequestPipeline

router = APIRouter()

# Every method is routed here so the pipeline, not the router, answers
# non-GET requests with a structured 405.
PROXIED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"]

_default_pipeline = None


def get_pipeline() -> RequestPipeline:
    """Process-wide pipeline built from the environment on first use."""
    global _default_pipeline
    if _default_pipeline is None:
        _default_pipeline = RequestPipeline(notice=Notice.from_settings())
    return _default_pipeline


@router.api_route("/{path:path}", methods=PROXIED_METHODS, include_in_schema=False)
async def proxy_all(
    request: Request,
    path: str,
    pipeline: RequestPipeline = Depends(get_pipeline),
) -> Response:
    """Catch-all route that hands every request to the pipeline."""
    outbound = await pipeline.handle(InboundRequest.from_request(request))
    return outbound.to_response()
