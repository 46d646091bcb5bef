"""
Monitoring utilities for logship.
"""

from logship.monitoring.metrics import (
    CONTENT_TYPE_LATEST,
    QUEUE_DEPTH,
    UPLOAD_DURATION,
    UPLOADED_BYTES,
    UPLOADS,
    generate_latest,
)

__all__ = [
    "UPLOADS",
    "UPLOADED_BYTES",
    "QUEUE_DEPTH",
    "UPLOAD_DURATION",
    "CONTENT_TYPE_LATEST",
    "generate_latest",
]
