"""S3 client construction."""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional

import boto3
from botocore.config import Config as BotoConfig

from logship.config import UploaderConfig
from logship.utils.logging import get_logger

logger = get_logger(__name__)

ClientFactory = Callable[[UploaderConfig], Any]


def build_s3_client(config: UploaderConfig) -> Any:
    """
    Create a boto3 S3 client for ``config``.

    With a non-blank access key the static key/secret pair and the
    configured region are used. Otherwise boto3's default credential
    chain applies (env, shared files, container and instance metadata)
    and the region is only set when configured. A custom endpoint
    switches the client to path-style addressing.
    """
    if config.has_static_credentials:
        session = boto3.session.Session(
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region or None,
        )
        credential_source = "static"
    else:
        session = boto3.session.Session(region_name=config.region or None)
        credential_source = "default_chain"

    kwargs: dict[str, Any] = {}
    endpoint_url = config.endpoint_url
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
        kwargs["config"] = BotoConfig(s3={"addressing_style": "path"})

    client = session.client("s3", **kwargs)
    logger.info(
        "s3_client_created",
        bucket=config.bucket,
        region=session.region_name,
        endpoint=endpoint_url,
        credentials=credential_source,
    )
    return client


class LazyClient:
    """Create the client on first use, exactly once, from any thread."""

    def __init__(
        self, config: UploaderConfig, factory: Optional[ClientFactory] = None
    ) -> None:
        self._config = config
        self._factory = factory or build_s3_client
        self._client: Any = None
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._client is not None

    def get(self) -> Any:
        client = self._client
        if client is not None:
            return client
        with self._lock:
            if self._client is None:
                self._client = self._factory(self._config)
            return self._client


__all__ = ["ClientFactory", "LazyClient", "build_s3_client"]
