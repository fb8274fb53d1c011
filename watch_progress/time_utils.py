"""Utility helpers for working with playback timestamps."""

from __future__ import annotations

import math
import re
from typing import Union


class TimestampParseError(ValueError):
    """Raised when a timestamp cannot be parsed."""


_CLOCK_PATTERN = re.compile(r"(?:(\d{1,2}):)?([0-5]?\d):([0-5]\d(?:\.\d+)?)")


def parse_timestamp(timestamp: Union[str, int, float]) -> float:
    """Convert a timestamp to seconds.

    Args:
        timestamp: A value representing the timestamp. Accepts:
            - int or float: already in seconds.
            - str: either seconds (``"12.5"``) or formatted as HH:MM:SS / MM:SS.

    Returns:
        The timestamp expressed in (possibly fractional) seconds.

    Raises:
        TimestampParseError: If the input cannot be parsed.
    """

    if isinstance(timestamp, bool):
        raise TimestampParseError(f"Unsupported timestamp format: {timestamp!r}")

    if isinstance(timestamp, (int, float)):
        if not math.isfinite(timestamp):
            raise TimestampParseError("Timestamp must be a finite number.")
        if timestamp < 0:
            raise TimestampParseError("Timestamp cannot be negative.")
        return float(timestamp)

    if isinstance(timestamp, str):
        token = timestamp.strip()
        if not token:
            raise TimestampParseError("Timestamp string is empty.")

        if re.fullmatch(r"\d+(?:\.\d+)?", token):
            return parse_timestamp(float(token))

        match = _CLOCK_PATTERN.fullmatch(token)
        if match:
            hours, minutes, seconds = match.groups()
            return int(hours or 0) * 3600 + int(minutes) * 60 + float(seconds)

    raise TimestampParseError(f"Unsupported timestamp format: {timestamp!r}")


def format_seconds(seconds: float) -> str:
    """Format seconds into HH:MM:SS."""

    if seconds < 0:
        raise ValueError("Seconds cannot be negative.")
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_clock(seconds: float) -> str:
    """Format seconds as M:SS, the way the player shows elapsed time."""

    if seconds < 0:
        raise ValueError("Seconds cannot be negative.")
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"
