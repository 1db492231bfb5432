"""Data access layer for the Data Streams feed."""

from .auth import HmacSigner
from .clients import ReportSource
from .datastreams_client import DataStreamsClient, StreamClientError
from .models import Report, StreamError, StreamEvent

__all__ = [
    "DataStreamsClient",
    "HmacSigner",
    "Report",
    "ReportSource",
    "StreamClientError",
    "StreamError",
    "StreamEvent",
]
