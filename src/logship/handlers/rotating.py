"""
Rotating file handlers that ship every rotated file to S3.

They hook ``rotate()`` of the stdlib rotating handlers, so custom
``namer`` callables keep working. Rotated files are handed to an
``S3Uploader``; the handler never blocks on the network.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, time as dt_time
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Optional

from logship.core.uploader import S3Uploader


class InternalRecordFilter(logging.Filter):
    """Drop records emitted by logship itself to avoid feedback loops."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not (record.name == "logship" or record.name.startswith("logship."))


class S3UploadMixin:
    """Shared rotate/close behaviour for the S3 rotating handlers."""

    uploader: S3Uploader
    upload_on_close: bool
    baseFilename: str
    stream: Optional[object]

    def _init_upload(self, uploader: S3Uploader, upload_on_close: bool) -> None:
        self.uploader = uploader
        self.upload_on_close = upload_on_close
        self._active_uploaded = False
        self.addFilter(InternalRecordFilter())  # type: ignore[attr-defined]

    def rotate(self, source: str, dest: str) -> None:
        super().rotate(source, dest)  # type: ignore[misc]
        if os.path.exists(dest):
            self.uploader.submit(dest, datetime.now())

    def close(self) -> None:
        self.acquire()  # type: ignore[attr-defined]
        try:
            if self.upload_on_close and not self._active_uploaded:
                self._active_uploaded = True
                if self.stream is not None:
                    self.stream.flush()  # type: ignore[attr-defined]
                # Timestamp keeps the active file from clashing with a later rotation.
                self.uploader.submit(
                    self.baseFilename, datetime.now(), force_timestamp_prefix=True
                )
        finally:
            self.release()  # type: ignore[attr-defined]
        super().close()  # type: ignore[misc]


class S3RotatingFileHandler(S3UploadMixin, RotatingFileHandler):
    """Size based rotation; ``<file>.1`` is uploaded after each rollover."""

    def __init__(
        self,
        filename: str | os.PathLike[str],
        uploader: S3Uploader,
        mode: str = "a",
        maxBytes: int = 0,
        backupCount: int = 1,
        encoding: Optional[str] = None,
        delay: bool = False,
        errors: Optional[str] = None,
        *,
        upload_on_close: bool = False,
    ) -> None:
        if backupCount < 1:
            raise ValueError("backupCount must be >= 1 so rotated files can be uploaded")
        RotatingFileHandler.__init__(
            self, filename, mode, maxBytes, backupCount, encoding, delay, errors
        )
        self._init_upload(uploader, upload_on_close)


class S3TimedRotatingFileHandler(S3UploadMixin, TimedRotatingFileHandler):
    """Time based rotation; each dated file is uploaded after rollover."""

    def __init__(
        self,
        filename: str | os.PathLike[str],
        uploader: S3Uploader,
        when: str = "h",
        interval: int = 1,
        backupCount: int = 0,
        encoding: Optional[str] = None,
        delay: bool = False,
        utc: bool = False,
        atTime: Optional[dt_time] = None,
        errors: Optional[str] = None,
        *,
        upload_on_close: bool = False,
    ) -> None:
        TimedRotatingFileHandler.__init__(
            self,
            filename,
            when,
            interval,
            backupCount,
            encoding,
            delay,
            utc,
            atTime,
            errors,
        )
        self._init_upload(uploader, upload_on_close)


__all__ = [
    "InternalRecordFilter",
    "S3RotatingFileHandler",
    "S3TimedRotatingFileHandler",
]
