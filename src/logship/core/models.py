"""Data models for the upload worker."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


class WorkerState(str, Enum):
    """Queue lifecycle of the uploader."""

    ACCEPTING = "accepting"
    DRAINING = "draining"
    STOPPED = "stopped"


@dataclass(frozen=True)
class UploadJob:
    """
    One queued upload.

    Attributes:
        file_path: Local file to upload
        bucket: Destination bucket
        key: Destination key, fixed at submission time
        timestamp: Time the key was rendered for
        size: File size in bytes at submission time
    """

    file_path: Path
    bucket: str
    key: str
    timestamp: datetime
    size: int

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


@dataclass
class UploaderStats:
    """Running counters for monitoring and tests."""

    submitted: int = 0
    skipped: int = 0
    rejected: int = 0
    uploaded: int = 0
    failed: int = 0
    cancelled: int = 0
    bytes_uploaded: int = 0

    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def incr(self, name: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + amount)

    def record_upload(self, size: int) -> None:
        with self._lock:
            self.uploaded += 1
            self.bytes_uploaded += size

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return {
                "submitted": self.submitted,
                "skipped": self.skipped,
                "rejected": self.rejected,
                "uploaded": self.uploaded,
                "failed": self.failed,
                "cancelled": self.cancelled,
                "bytes_uploaded": self.bytes_uploaded,
            }


__all__ = ["WorkerState", "UploadJob", "UploaderStats"]
