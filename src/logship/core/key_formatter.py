"""Object key rendering for uploaded log files."""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import PurePath
from typing import Optional

from logship.core.constants import KEY_SEPARATOR, TIMESTAMP_PREFIX_PATTERN
from logship.core.date_pattern import UnsupportedPatternError, format_date
from logship.utils.logging import get_logger

logger = get_logger(__name__)

_PLACEHOLDER_RE = re.compile(r"%d\{(.*?)\}")


def render_folder(template: str, timestamp: datetime) -> str:
    """
    Replace every ``%d{PATTERN}`` in ``template`` with ``timestamp``.

    Placeholders whose pattern cannot be rendered are kept as-is, and so
    is an unterminated ``%d{``.
    """

    def _replace(match: re.Match[str]) -> str:
        try:
            return format_date(match.group(1), timestamp)
        except (UnsupportedPatternError, ValueError) as exc:
            logger.debug(
                "folder_placeholder_kept",
                placeholder=match.group(0),
                error=str(exc),
            )
            return match.group(0)

    return _PLACEHOLDER_RE.sub(_replace, template)


def format_key(
    file_name: str,
    timestamp: datetime,
    *,
    folder: Optional[str] = None,
    extra_folder: Optional[str] = None,
    prefix_timestamp: bool = False,
    identifier: Optional[str] = None,
) -> str:
    """
    Build the destination key for ``file_name``.

    Layout: ``[folder/][extra_folder/][yyyyMMdd_HHmmss_][identifier_]basename``

    Args:
        file_name: Local path of the file; only its base name is used.
        timestamp: Time used for ``%d{...}`` placeholders and the prefix.
        folder: Folder template, may contain ``%d{PATTERN}`` placeholders.
        extra_folder: Runtime folder segment appended after ``folder``.
        prefix_timestamp: Prepend the compact timestamp to the file name.
        identifier: Stable identifier prepended to the file name.
    """
    parts: list[str] = []

    if folder:
        rendered = render_folder(folder, timestamp).rstrip(KEY_SEPARATOR)
        if rendered:
            parts.append(rendered + KEY_SEPARATOR)

    extra = (extra_folder or "").rstrip(KEY_SEPARATOR)
    if extra:
        parts.append(extra + KEY_SEPARATOR)

    if prefix_timestamp:
        parts.append(format_date(TIMESTAMP_PREFIX_PATTERN, timestamp) + "_")

    if identifier:
        parts.append(identifier + "_")

    parts.append(PurePath(file_name).name)
    return "".join(parts)


__all__ = ["format_key", "render_folder"]
