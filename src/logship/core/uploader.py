"""
Single-thread S3 upload worker.

Files are handed to a one-worker executor and uploaded in submission
order. ``shutdown()`` drains the queue within a bounded time, and
``stop()`` is the signal-safe way to ask for a stop from a handler.
"""

from __future__ import annotations

import stat
import threading
import time
from concurrent import futures
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from logship.config import UploaderConfig
from logship.core.client import ClientFactory, LazyClient
from logship.core.constants import (
    BUCKET_OWNER_FULL_CONTROL,
    SHUTDOWN_POLL_INTERVAL_SECONDS,
)
from logship.core.folder import FolderOverride
from logship.core.folder import extra_folder as default_folder_override
from logship.core.key_formatter import format_key
from logship.core.models import UploaderStats, UploadJob, WorkerState
from logship.monitoring.metrics import (
    QUEUE_DEPTH,
    UPLOAD_DURATION,
    UPLOADED_BYTES,
    UPLOADS,
)
from logship.utils.identifier import get_identifier
from logship.utils.logging import get_logger

FailureCallback = Callable[[UploadJob, BaseException], None]


class S3Uploader:
    """
    Background uploader for closed log files.

    - One worker thread, uploads run strictly in submission order
    - Client created lazily on the first upload
    - Failed uploads are logged and reported, never retried
    - ``shutdown()`` drains the queue for at most the configured ceiling

    Submitting after shutdown has started (or after ``stop()``) is
    rejected: the call logs a warning and returns ``None`` instead of
    raising.
    """

    def __init__(
        self,
        config: UploaderConfig,
        *,
        identifier: Optional[str] = None,
        folder_override: Optional[FolderOverride] = None,
        client_factory: Optional[ClientFactory] = None,
        on_failure: Optional[FailureCallback] = None,
    ) -> None:
        self.config = config
        self.identifier = (
            (identifier or get_identifier()) if config.prefix_identifier else None
        )
        self.stats = UploaderStats()
        self.logger = get_logger(__name__)

        self._folder_override = (
            folder_override
            if folder_override is not None
            else default_folder_override
        )
        self._client = LazyClient(config, client_factory)
        self._on_failure = on_failure

        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="logship-upload"
        )
        self._lock = threading.Lock()
        self._state = WorkerState.ACCEPTING
        self._pending: set[Future[bool]] = set()
        self._abandon = threading.Event()
        self._drained: Optional[bool] = None
        # Plain flags: stop() runs inside signal handlers and must not lock.
        self._stop_requested = False
        self._interrupted = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> WorkerState:
        with self._lock:
            return self._state

    @property
    def client_initialized(self) -> bool:
        return self._client.initialized

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def ensure_client(self) -> Any:
        """Return the S3 client, creating it on first call."""
        return self._client.get()

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def build_job(
        self,
        file_path: str | Path,
        timestamp: Optional[datetime] = None,
        force_timestamp_prefix: bool = False,
        extra_folder: Optional[str] = None,
    ) -> Optional[UploadJob]:
        """
        Describe the upload for ``file_path``, or None if there is nothing to send.

        ``extra_folder`` wins over the runtime folder override slot.
        """
        path = Path(file_path)
        try:
            st = path.stat()
        except OSError:
            return None
        if not stat.S_ISREG(st.st_mode) or st.st_size == 0:
            return None

        ts = timestamp or datetime.now()
        folder_segment = (
            extra_folder if extra_folder is not None else self._folder_override.get()
        )
        key = format_key(
            path.name,
            ts,
            folder=self.config.folder,
            extra_folder=folder_segment,
            prefix_timestamp=force_timestamp_prefix or self.config.prefix_timestamp,
            identifier=self.identifier,
        )
        return UploadJob(
            file_path=path,
            bucket=self.config.bucket,
            key=key,
            timestamp=ts,
            size=st.st_size,
        )

    def submit(
        self,
        file_path: str | Path,
        timestamp: Optional[datetime] = None,
        force_timestamp_prefix: bool = False,
        extra_folder: Optional[str] = None,
    ) -> Optional[Future[bool]]:
        """
        Queue ``file_path`` for upload.

        Returns:
            Future resolving to True/False for the upload outcome, or None
            when the file is missing/empty or the uploader is shutting down.
        """
        job = self.build_job(file_path, timestamp, force_timestamp_prefix, extra_folder)
        if job is None:
            self.stats.incr("skipped")
            UPLOADS.labels(outcome="skipped").inc()
            self.logger.debug("upload_skipped", file=str(file_path))
            return None
        return self.enqueue(job)

    def enqueue(self, job: UploadJob) -> Optional[Future[bool]]:
        """
        Queue an already built job.

        Lets callers keep the exact job (and key) that gets uploaded.
        Returns None when the uploader no longer accepts work.
        """
        with self._lock:
            if self._state is not WorkerState.ACCEPTING:
                self._reject(job, reason=self._state.value)
                return None
            if self._stop_requested:
                self._reject(job, reason="stop_requested")
                return None
            try:
                future = self._executor.submit(self._run, job)
            except RuntimeError as exc:
                # Executor refuses work once the interpreter is exiting.
                self._reject(job, reason=str(exc))
                return None
            self._pending.add(future)
            QUEUE_DEPTH.inc()

        self.stats.incr("submitted")
        future.add_done_callback(self._on_done)
        self.logger.debug("upload_queued", file=str(job.file_path), uri=job.uri)
        return future

    def _reject(self, job: UploadJob, reason: str) -> None:
        self.stats.incr("rejected")
        UPLOADS.labels(outcome="rejected").inc()
        self.logger.warning(
            "upload_rejected", file=str(job.file_path), uri=job.uri, reason=reason
        )

    def _on_done(self, future: Future[bool]) -> None:
        with self._lock:
            self._pending.discard(future)
        QUEUE_DEPTH.dec()
        if future.cancelled():
            self.stats.incr("cancelled")
            UPLOADS.labels(outcome="cancelled").inc()

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------

    def _run(self, job: UploadJob) -> bool:
        if self._abandon.is_set():
            self.stats.incr("cancelled")
            UPLOADS.labels(outcome="cancelled").inc()
            self.logger.warning("upload_abandoned", uri=job.uri)
            return False

        start = time.perf_counter()
        try:
            client = self.ensure_client()
            with open(job.file_path, "rb") as body:
                client.put_object(
                    Bucket=job.bucket,
                    Key=job.key,
                    Body=body,
                    ACL=BUCKET_OWNER_FULL_CONTROL,
                )
        except Exception as exc:  # noqa: BLE001
            self.stats.incr("failed")
            UPLOADS.labels(outcome="failed").inc()
            self.logger.exception(
                "upload_failed",
                file=str(job.file_path),
                uri=job.uri,
                error_type=type(exc).__name__,
            )
            self._report_failure(job, exc)
            return False

        duration = time.perf_counter() - start
        UPLOAD_DURATION.observe(duration)
        UPLOADED_BYTES.inc(job.size)
        UPLOADS.labels(outcome="uploaded").inc()
        self.stats.record_upload(job.size)
        self.logger.info(
            "upload_completed",
            file=str(job.file_path),
            uri=job.uri,
            size=job.size,
            duration_ms=round(duration * 1000, 2),
        )
        return True

    def _report_failure(self, job: UploadJob, exc: BaseException) -> None:
        if self._on_failure is None:
            return
        try:
            self._on_failure(job, exc)
        except Exception as cb_exc:  # noqa: BLE001
            self.logger.error(
                "failure_callback_error", uri=job.uri, error=str(cb_exc)
            )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for currently queued uploads without stopping the uploader."""
        with self._lock:
            pending = list(self._pending)
        _, not_done = futures.wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Stop accepting uploads and wait for queued ones to finish.

        Waits at most ``timeout`` seconds (default: the configured ceiling).
        If the wait times out or is interrupted (``KeyboardInterrupt`` or a
        ``stop()`` call while draining), queued uploads are cancelled and
        the interruption is not propagated.

        Returns:
            True if every queued upload finished, False otherwise.
        """
        with self._lock:
            if self._state is not WorkerState.ACCEPTING:
                return bool(self._drained)
            self._state = WorkerState.DRAINING
            pending = list(self._pending)

        self._executor.shutdown(wait=False)
        limit = self.config.shutdown_timeout_seconds if timeout is None else timeout
        self.logger.info(
            "uploader_draining", pending=len(pending), timeout_seconds=limit
        )

        drained = False
        try:
            drained = self._wait_drained(pending, limit)
        except KeyboardInterrupt:
            self.logger.warning("uploader_shutdown_interrupted", pending=len(pending))

        if not drained:
            self._force_stop()

        with self._lock:
            self._state = WorkerState.STOPPED
            self._drained = drained
        self.logger.info("uploader_stopped", drained=drained, **self.stats.snapshot())
        return drained

    def _wait_drained(self, pending: list[Future[bool]], limit: float) -> bool:
        deadline = time.monotonic() + limit
        while not self._interrupted:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            _, not_done = futures.wait(
                pending, timeout=min(remaining, SHUTDOWN_POLL_INTERVAL_SECONDS)
            )
            if not not_done:
                return True
            pending = list(not_done)
        self.logger.warning("uploader_shutdown_interrupted", pending=len(pending))
        return False

    def stop(self) -> None:
        """
        Request a stop without blocking or taking locks.

        Safe to call from a signal handler. While accepting, further
        submissions are rejected and the next ``shutdown()`` drains as
        usual. While a drain is in progress, the drain is cut short and
        queued uploads are cancelled. The caller still owns ``shutdown()``.
        """
        if self._state is WorkerState.ACCEPTING and not self._stop_requested:
            self._stop_requested = True
        else:
            self._interrupted = True

    def _force_stop(self) -> None:
        self._abandon.set()
        self._executor.shutdown(wait=False, cancel_futures=True)
        with self._lock:
            in_flight = sum(1 for f in self._pending if f.running())
        self.logger.warning("uploader_shutdown_timeout", in_flight=in_flight)

    def __enter__(self) -> "S3Uploader":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()


__all__ = ["S3Uploader", "FailureCallback"]
