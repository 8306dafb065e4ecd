from readonly_proxy import vars as settings
from readonly_proxy.models import InboundRequest, UpstreamTarget


def rewrite_url(
    inbound: InboundRequest,
    host: str = settings.UPSTREAM_HOST,
    port: int = settings.UPSTREAM_PORT,
    scheme: str = settings.UPSTREAM_SCHEME,
    api_prefix: str = settings.UPSTREAM_API_PREFIX,
) -> UpstreamTarget:
    """
    Point an inbound request at the upstream API.

    Host, port and scheme are replaced outright; the path is prefixed with the
    API namespace and the query string is kept verbatim. The pipeline answers
    the root path locally and never asks for its target.
    """
    path = inbound.path if inbound.path.startswith("/") else f"/{inbound.path}"
    return UpstreamTarget(
        scheme=scheme,
        host=host,
        port=port,
        path=f"{api_prefix.rstrip('/')}{path}",
        query=inbound.query,
    )
