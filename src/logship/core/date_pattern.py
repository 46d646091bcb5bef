"""
Date pattern rendering for key templates.

Patterns use the letter-repetition style found in most log tooling
(``yyyy/MM/dd``, ``yyyyMMdd_HHmmss``) rather than ``strftime`` codes.
A pattern containing ``%`` is handed to ``strftime`` unchanged.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Callable

_TOKEN_RE = re.compile(r"'(?:[^']|'')*'|([A-Za-z])\1*|[^A-Za-z']+|'")


class UnsupportedPatternError(ValueError):
    """Raised when a date pattern cannot be rendered."""


def _pad(value: int, width: int) -> str:
    return f"{value:0{width}d}"


def _local(ts: datetime) -> datetime:
    # Naive datetimes are treated as local time when an offset is needed.
    return ts if ts.tzinfo is not None else ts.astimezone()


def _offset(ts: datetime) -> timedelta:
    return _local(ts).utcoffset() or timedelta(0)


def _format_offset(delta: timedelta, *, colon: bool, minutes: bool = True) -> str:
    total = int(delta.total_seconds()) // 60
    sign = "-" if total < 0 else "+"
    hours, mins = divmod(abs(total), 60)
    if not minutes:
        return f"{sign}{hours:02d}"
    sep = ":" if colon else ""
    return f"{sign}{hours:02d}{sep}{mins:02d}"


def _year(ts: datetime, count: int) -> str:
    if count == 2:
        return _pad(ts.year % 100, 2)
    return _pad(ts.year, count)


def _month(ts: datetime, count: int) -> str:
    if count >= 4:
        return ts.strftime("%B")
    if count == 3:
        return ts.strftime("%b")
    return _pad(ts.month, count)


def _weekday(ts: datetime, count: int) -> str:
    return ts.strftime("%A" if count >= 4 else "%a")


def _hour_1_12(ts: datetime, count: int) -> str:
    return _pad(ts.hour % 12 or 12, count)


def _hour_1_24(ts: datetime, count: int) -> str:
    return _pad(ts.hour or 24, count)


def _zone_name(ts: datetime, count: int) -> str:
    return _local(ts).tzname() or ""


def _rfc822_zone(ts: datetime, count: int) -> str:
    return _format_offset(_offset(ts), colon=False)


def _iso_zone(ts: datetime, count: int) -> str:
    delta = _offset(ts)
    if not delta:
        return "Z"
    if count == 1:
        return _format_offset(delta, colon=False, minutes=False)
    return _format_offset(delta, colon=count >= 3)


_FIELDS: dict[str, Callable[[datetime, int], str]] = {
    "G": lambda ts, n: "AD",
    "y": _year,
    "M": _month,
    "L": _month,
    "d": lambda ts, n: _pad(ts.day, n),
    "D": lambda ts, n: _pad(ts.timetuple().tm_yday, n),
    "E": _weekday,
    "u": lambda ts, n: _pad(ts.isoweekday(), n),
    "a": lambda ts, n: ts.strftime("%p"),
    "H": lambda ts, n: _pad(ts.hour, n),
    "k": _hour_1_24,
    "K": lambda ts, n: _pad(ts.hour % 12, n),
    "h": _hour_1_12,
    "m": lambda ts, n: _pad(ts.minute, n),
    "s": lambda ts, n: _pad(ts.second, n),
    "S": lambda ts, n: _pad(ts.microsecond // 1000, n),
    "z": _zone_name,
    "Z": _rfc822_zone,
    "X": _iso_zone,
}


@lru_cache(maxsize=128)
def _compile(pattern: str) -> tuple[tuple[str, str | int], ...]:
    """
    Split a pattern into ``(kind, value)`` parts.

    kind is ``"lit"`` (value = literal text) or a pattern letter
    (value = repetition count).
    """
    parts: list[tuple[str, str | int]] = []
    for match in _TOKEN_RE.finditer(pattern):
        token = match.group(0)
        letter = match.group(1)
        if letter:
            if letter not in _FIELDS:
                raise UnsupportedPatternError(
                    f"Unsupported pattern letter {letter!r} in {pattern!r}"
                )
            parts.append((letter, len(token)))
        elif token == "'":
            raise UnsupportedPatternError(f"Unterminated quote in {pattern!r}")
        elif token.startswith("'"):
            inner = token[1:-1]
            parts.append(("lit", inner.replace("''", "'") if inner else "'"))
        else:
            parts.append(("lit", token))
    return tuple(parts)


def format_date(pattern: str, timestamp: datetime) -> str:
    """
    Render ``timestamp`` using ``pattern``.

    Raises:
        UnsupportedPatternError: unknown pattern letter or unterminated quote.
    """
    if "%" in pattern:
        return timestamp.strftime(pattern)

    out: list[str] = []
    for kind, value in _compile(pattern):
        if kind == "lit":
            out.append(str(value))
        else:
            out.append(_FIELDS[kind](timestamp, int(value)))
    return "".join(out)


def validate_pattern(pattern: str) -> None:
    """Raise UnsupportedPatternError if ``pattern`` cannot be rendered."""
    if "%" not in pattern:
        _compile(pattern)


__all__ = ["UnsupportedPatternError", "format_date", "validate_pattern"]
