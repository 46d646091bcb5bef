"""Uploader configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from logship.core.constants import (
    DEFAULT_SHUTDOWN_TIMEOUT_SECONDS,
    ENV_PREFIX,
    S3_ENDPOINT_IS_UNDEFINED,
)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env(name: str) -> Optional[str]:
    raw = os.getenv(f"{ENV_PREFIX}{name}")
    if raw is None or raw.strip() == "":
        return None
    return raw.strip()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in _TRUE_VALUES


class UploaderConfig(BaseModel):
    """Connection, bucket and key settings. Immutable once built."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    bucket: str = Field(..., min_length=1, description="Destination bucket name")
    access_key: Optional[str] = Field(
        None,
        description="Static access key; blank means use the ambient credential chain",
    )
    secret_key: Optional[str] = Field(
        None,
        repr=False,
        description="Static secret key, used together with access_key",
    )
    region: Optional[str] = Field(None, description="Region for the S3 client")
    folder: Optional[str] = Field(
        None,
        description="Key folder template, supports %d{pattern} placeholders",
        examples=["logs/%d{yyyy/MM/dd}"],
    )
    endpoint: Optional[str] = Field(
        S3_ENDPOINT_IS_UNDEFINED,
        description=f"Custom endpoint URL; {S3_ENDPOINT_IS_UNDEFINED} means none",
    )
    prefix_timestamp: bool = Field(
        False,
        description="Prefix file names with yyyyMMdd_HHmmss_",
    )
    prefix_identifier: bool = Field(
        False,
        description="Prefix file names with a stable per-process identifier",
    )
    shutdown_timeout_seconds: float = Field(
        DEFAULT_SHUTDOWN_TIMEOUT_SECONDS,
        gt=0,
        description="Maximum time shutdown waits for queued uploads",
    )

    @property
    def has_static_credentials(self) -> bool:
        return bool(self.access_key and self.access_key.strip())

    @property
    def endpoint_url(self) -> Optional[str]:
        """Custom endpoint, or None when unset or the sentinel."""
        if not self.endpoint or self.endpoint == S3_ENDPOINT_IS_UNDEFINED:
            return None
        return self.endpoint

    def with_overrides(self, **overrides: Any) -> "UploaderConfig":
        """Return a validated copy with non-None ``overrides`` applied."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return type(self).model_validate(data)

    @classmethod
    def from_env(cls) -> "UploaderConfig":
        bucket = _env("BUCKET")
        if not bucket:
            raise ValueError(f"{ENV_PREFIX}BUCKET must be set")

        timeout = _env("SHUTDOWN_TIMEOUT_SECONDS")
        return cls(
            bucket=bucket,
            access_key=_env("ACCESS_KEY"),
            secret_key=_env("SECRET_KEY"),
            region=_env("REGION"),
            folder=_env("FOLDER"),
            endpoint=_env("ENDPOINT") or S3_ENDPOINT_IS_UNDEFINED,
            prefix_timestamp=_env_bool("PREFIX_TIMESTAMP"),
            prefix_identifier=_env_bool("PREFIX_IDENTIFIER"),
            shutdown_timeout_seconds=(
                float(timeout) if timeout else DEFAULT_SHUTDOWN_TIMEOUT_SECONDS
            ),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "UploaderConfig":
        """
        Load config from a YAML file.

        The mapping may sit at the top level or under a ``logship`` key.
        """
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        section = data.get("logship", data)
        if not isinstance(section, dict):
            raise ValueError(f"'logship' section in {path} must be a mapping")
        return cls.model_validate(section)


__all__ = ["UploaderConfig"]
