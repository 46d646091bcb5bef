"""Runtime folder override shared across the process."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional


class FolderOverride:
    """
    Holder for an extra key folder set by unrelated code at runtime.

    The uploader reads the value when a file is submitted, so whatever is
    set at that moment decides the key.
    """

    def __init__(self, value: Optional[str] = None) -> None:
        self._lock = threading.Lock()
        self._value = value or None

    def get(self) -> Optional[str]:
        with self._lock:
            return self._value

    def set(self, value: Optional[str]) -> None:
        with self._lock:
            self._value = value or None

    def clear(self) -> None:
        self.set(None)

    @contextmanager
    def override(self, value: Optional[str]) -> Iterator[None]:
        """Set ``value`` for the duration of a block, then restore."""
        with self._lock:
            previous = self._value
            self._value = value or None
        try:
            yield
        finally:
            self.set(previous)


# Process-wide default slot
extra_folder = FolderOverride()

__all__ = ["FolderOverride", "extra_folder"]
