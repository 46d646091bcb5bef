"""
Logging handlers that upload rotated files.
"""

from .rotating import (
    InternalRecordFilter,
    S3RotatingFileHandler,
    S3TimedRotatingFileHandler,
)

__all__ = [
    "S3RotatingFileHandler",
    "S3TimedRotatingFileHandler",
    "InternalRecordFilter",
]
