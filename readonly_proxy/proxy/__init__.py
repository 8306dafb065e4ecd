from .pipeline import RequestPipeline
from .dispatcher import UpstreamDispatcher
from .route import router, get_pipeline

__all__ = ["RequestPipeline", "UpstreamDispatcher", "router", "get_pipeline"]
