"""Stable per-process identifier used as an optional key prefix."""

from __future__ import annotations

import os
import re
import socket
import uuid
from functools import lru_cache

from logship.core.constants import ENV_PREFIX

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9._-]")


def _sanitize(value: str) -> str:
    return _UNSAFE_RE.sub("-", value.strip()).strip("-")


def _hostname() -> str:
    try:
        return socket.gethostname()
    except OSError:
        return ""


@lru_cache(maxsize=1)
def get_identifier() -> str:
    """
    Return the identifier for this process.

    Resolution order: the ``LOGSHIP_IDENTIFIER`` env var, the host name,
    a random 12 character hex id. Computed once and cached.
    """
    for candidate in (os.getenv(f"{ENV_PREFIX}IDENTIFIER", ""), _hostname()):
        cleaned = _sanitize(candidate)
        if cleaned:
            return cleaned
    return uuid.uuid4().hex[:12]


__all__ = ["get_identifier"]
