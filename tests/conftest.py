from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Iterator, Optional

import boto3
import pytest
from moto import mock_aws

from logship.config import UploaderConfig
from logship.utils.identifier import get_identifier

TEST_BUCKET = "test-logs"


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast unit tests")
    config.addinivalue_line(
        "markers",
        "integration: tests that require external services or are slower (S3 etc.)",
    )
    config.addinivalue_line("markers", "s3: tests that interact with S3 or moto S3")
    config.addinivalue_line("markers", "slow: slow-running tests")


class RecordingClient:
    """
    Stand-in for a boto3 S3 client.

    Records every put_object call. ``gate`` holds uploads until set,
    ``fail_keys`` makes matching uploads raise.
    """

    def __init__(
        self,
        gate: Optional[threading.Event] = None,
        fail_keys: Optional[set[str]] = None,
    ) -> None:
        self.gate = gate
        self.fail_keys = fail_keys or set()
        self.started = threading.Event()
        self.calls: list[dict] = []
        self._lock = threading.Lock()

    def put_object(self, *, Bucket: str, Key: str, Body, ACL: str) -> dict:  # noqa: N803
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=10)
        if Key in self.fail_keys:
            raise RuntimeError(f"upload of {Key} failed")
        with self._lock:
            self.calls.append(
                {"Bucket": Bucket, "Key": Key, "Body": Body.read(), "ACL": ACL}
            )
        return {"ETag": '"etag"'}

    @property
    def keys(self) -> list[str]:
        with self._lock:
            return [call["Key"] for call in self.calls]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep LOGSHIP_* variables and the cached identifier out of tests."""
    for name in (
        "BUCKET",
        "ACCESS_KEY",
        "SECRET_KEY",
        "REGION",
        "FOLDER",
        "ENDPOINT",
        "PREFIX_TIMESTAMP",
        "PREFIX_IDENTIFIER",
        "SHUTDOWN_TIMEOUT_SECONDS",
        "IDENTIFIER",
    ):
        monkeypatch.delenv(f"LOGSHIP_{name}", raising=False)
    get_identifier.cache_clear()
    yield
    get_identifier.cache_clear()


@pytest.fixture
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fake credentials so nothing can reach a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def s3_client(aws_credentials: None) -> Iterator:
    """moto-backed S3 client with the test bucket created."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=TEST_BUCKET)
        yield client


@pytest.fixture
def uploader_config() -> UploaderConfig:
    return UploaderConfig(
        bucket=TEST_BUCKET,
        region="us-east-1",
        shutdown_timeout_seconds=5,
    )


@pytest.fixture
def make_log_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a log file under tmp_path."""

    def _make(name: str = "app.log", content: bytes = b"line 1\nline 2\n") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    return _make


@pytest.fixture
def recording_client() -> RecordingClient:
    return RecordingClient()
