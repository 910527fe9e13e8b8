"""Linear API integration: query building, pagination, caching and ingestion."""

from .client import FetchResult, IngestionPipeline, create_pipeline
from .exceptions import UpstreamProtocolError

__all__ = [
    "FetchResult",
    "IngestionPipeline",
    "UpstreamProtocolError",
    "create_pipeline",
]
