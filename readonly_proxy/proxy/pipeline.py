import logging
from typing import Optional

from opentelemetry import trace

from readonly_proxy import vars as settings
from readonly_proxy.models import InboundRequest, Notice, OutboundResponse
from readonly_proxy.proxy.admission import admit
from readonly_proxy.proxy.composer import proxied_response, root_response
from readonly_proxy.proxy.dispatcher import UpstreamDispatcher
from readonly_proxy.proxy.errors import ProxyError, error_response
from readonly_proxy.proxy.rewriter import rewrite_url
from readonly_proxy.utils import redact_headers
from readonly_proxy.utils.exception_logging import log_exception_with_details
from readonly_proxy.utils.traced_requests import traced_stage

logger = logging.getLogger("uvicorn.error")
tracer = trace.get_tracer(__name__)


class RequestPipeline:
    """
    Turns one inbound request into one outbound response.

    Stages run in order: root metadata, URL rewrite, admissibility checks,
    upstream dispatch, response composition. Any failure along the way is
    rendered as a structured JSON error that still carries the notice.
    """

    def __init__(
        self,
        notice: Notice,
        dispatcher: Optional[UpstreamDispatcher] = None,
        upstream_host: str = settings.UPSTREAM_HOST,
        upstream_port: int = settings.UPSTREAM_PORT,
        upstream_scheme: str = settings.UPSTREAM_SCHEME,
        api_prefix: str = settings.UPSTREAM_API_PREFIX,
    ):
        self.notice = notice
        self.dispatcher = dispatcher or UpstreamDispatcher()
        self.upstream_host = upstream_host
        self.upstream_port = upstream_port
        self.upstream_scheme = upstream_scheme
        self.api_prefix = api_prefix

    async def handle(self, inbound: InboundRequest) -> OutboundResponse:
        with traced_stage(
            tracer,
            "proxy_request",
            f"Received {inbound.method} {inbound.path}",
            extra_attrs={"proxy.method": inbound.method, "proxy.path": inbound.path},
        ) as span:
            try:
                response = await self._run(inbound, span)
            except ProxyError as e:
                logger.info(f"Returning {e.status_code} {e.message}: {e.comment}")
                span.set_attribute("proxy.error", type(e).__name__)
                response = error_response(e, self.notice)
            except Exception as e:
                log_exception_with_details(logger, "[Proxy]", e)
                span.set_attribute("proxy.error", type(e).__name__)
                response = error_response(ProxyError(), self.notice)

            span.set_attribute("proxy.status_code", response.status_code)
            return response

    async def _run(self, inbound: InboundRequest, span) -> OutboundResponse:
        if inbound.is_root:
            logger.info("Root path accessed, returning API information")
            return root_response(inbound, self.notice)

        target = rewrite_url(
            inbound,
            host=self.upstream_host,
            port=self.upstream_port,
            scheme=self.upstream_scheme,
            api_prefix=self.api_prefix,
        )
        span.set_attribute("proxy.target_url", target.url)
        logger.debug(f"Rewrote {inbound.path} -> {target.url}")
        logger.debug(f"Request headers: {redact_headers(inbound.headers)}")

        headers = admit(inbound.method, inbound.headers)

        upstream = await self.dispatcher.dispatch(inbound.method, target, headers)
        span.set_attribute("proxy.upstream_status_code", upstream.status_code)
        return proxied_response(upstream, self.notice)
