"""Prometheus metrics for the logship uploader."""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Counters
UPLOADS = Counter(
    "logship_uploads_total",
    "Upload submissions by outcome",
    ["outcome"],
)
UPLOADED_BYTES = Counter(
    "logship_upload_bytes_total",
    "Total bytes uploaded",
)

# Gauges
QUEUE_DEPTH = Gauge(
    "logship_queue_depth",
    "Uploads queued or running",
)

# Histograms
UPLOAD_DURATION = Histogram(
    "logship_upload_duration_seconds",
    "Duration of a single put_object call",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 300.0),
)

__all__ = [
    "UPLOADS",
    "UPLOADED_BYTES",
    "QUEUE_DEPTH",
    "UPLOAD_DURATION",
    "CONTENT_TYPE_LATEST",
    "generate_latest",
]
