import logging
from typing import Sequence

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import Response
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from prometheus_client import Info
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from readonly_proxy import vars as settings
from readonly_proxy.models import Notice
from readonly_proxy.proxy import router
from readonly_proxy.proxy.errors import (
    MethodNotAllowedError,
    ProxyError,
    error_response,
)
from readonly_proxy.utils.exception_logging import log_exception_with_details

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.SERVICE_NAME, docs_url=None, redoc_url=None, openapi_url=None)
instrumentator = Instrumentator()

instrumentator.instrument(app).expose(app, endpoint=settings.METRICS_PATH)


class FilteringSpanExporter(SpanExporter):
    """
    Wrapper exporter that drops the per-message ASGI send/receive spans, which
    add nothing for a buffered proxy and only clutter traces.
    """

    def __init__(self, exporter: SpanExporter):
        self.exporter = exporter

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        filtered_spans = [
            span
            for span in spans
            if not (
                span.attributes
                and span.attributes.get("asgi.event.type")
                in ("http.response.body", "http.response.start", "http.request")
            )
        ]
        if filtered_spans:
            return self.exporter.export(filtered_spans)
        return SpanExportResult.SUCCESS

    def shutdown(self):
        return self.exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000):
        return self.exporter.force_flush(timeout_millis)


trace.set_tracer_provider(
    TracerProvider(resource=Resource.create({"service.name": settings.SERVICE_NAME}))
)
tracer_provider = trace.get_tracer_provider()
if settings.OTLP_ENDPOINT:
    otlp_exporter = OTLPSpanExporter(
        endpoint=settings.OTLP_ENDPOINT,
        headers=settings.OTLP_HEADERS or None,
    )
    tracer_provider.add_span_processor(
        BatchSpanProcessor(FilteringSpanExporter(otlp_exporter))
    )

FastAPIInstrumentor.instrument_app(app, excluded_urls=settings.METRICS_PATH)

app_info = Info("fastapi_app_info", "Application Info")
app_info.info({"app_name": settings.SERVICE_NAME})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Render router-level rejections (e.g. unknown methods) like pipeline errors."""
    if exc.status_code == 405:
        error = MethodNotAllowedError()
    else:
        error = ProxyError(str(exc.detail))
        error.status_code = exc.status_code
        error.message = str(exc.detail)
    logger.info(f"{request.method} {request.url.path} rejected by router: {exc.status_code}")
    return error_response(error, Notice.from_settings()).to_response()


async def global_exception_handler(request: Request, exc: Exception) -> Response:
    """Catch-all for anything escaping a handler."""
    log_exception_with_details(logger, f"[{request.method} {request.url.path}]", exc)
    return error_response(ProxyError(), Notice.from_settings()).to_response()


app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.include_router(router)


def main() -> None:
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL)


if __name__ == "__main__":
    main()
