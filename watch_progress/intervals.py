"""Pure helpers for merging and measuring watched time ranges."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Mapping


class InvalidIntervalError(ValueError):
    """Raised when an interval has negative, non-finite or inverted bounds."""


@dataclass(frozen=True)
class Interval:
    """A contiguous span of playback time, in seconds."""

    start: float
    end: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.start) and math.isfinite(self.end)):
            raise InvalidIntervalError(f"Interval bounds must be finite: {self.start!r}, {self.end!r}")
        if self.start < 0:
            raise InvalidIntervalError(f"Interval start cannot be negative: {self.start!r}")
        if self.end < self.start:
            raise InvalidIntervalError(f"Interval end ({self.end!r}) is before start ({self.start!r})")

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict[str, float]:
        return {"start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "Interval":
        bounds = []
        for key in ("start", "end"):
            value = data.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidIntervalError(f"Malformed interval {key}: {data!r}")
            bounds.append(float(value))
        return cls(start=bounds[0], end=bounds[1])


def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Return a sorted, non-overlapping copy of ``intervals``.

    Overlapping and touching spans are fused, so ``[0, 5]`` and ``[5, 10]``
    become ``[0, 10]``. The input is never modified.
    """

    ordered = sorted(intervals, key=lambda interval: interval.start)
    if not ordered:
        return []

    merged: List[Interval] = [ordered[0]]
    for current in ordered[1:]:
        tail = merged[-1]
        if current.start <= tail.end:
            if current.end > tail.end:
                merged[-1] = Interval(tail.start, current.end)
        else:
            merged.append(current)
    return merged


def total_watched(intervals: Iterable[Interval]) -> float:
    """Unique seconds covered by ``intervals``; re-watched spans count once."""
    return sum(interval.duration for interval in merge_intervals(intervals))


def progress_percentage(intervals: Iterable[Interval], total_duration: float) -> float:
    """Share of ``total_duration`` that has been watched, clamped to 0-100."""

    if total_duration <= 0:
        return 0.0
    return min(100.0, 100.0 * total_watched(intervals) / total_duration)


def add_interval(existing: Iterable[Interval], candidate: Interval) -> List[Interval]:
    """Fold ``candidate`` into ``existing`` and return the merged set."""
    return merge_intervals([*existing, candidate])


def is_watched(intervals: Iterable[Interval], instant: float) -> bool:
    """Return True if ``instant`` falls inside a watched span.

    Spans are half-open: the end instant of a span is not itself covered.
    """

    return any(interval.start <= instant < interval.end for interval in merge_intervals(intervals))


def unwatched_gaps(intervals: Iterable[Interval], total_duration: float) -> List[Interval]:
    """Complement of the watched spans within ``[0, total_duration]``."""

    gaps: List[Interval] = []
    cursor = 0.0
    for interval in merge_intervals(intervals):
        if interval.start >= total_duration:
            break
        if interval.start > cursor:
            gaps.append(Interval(cursor, interval.start))
        cursor = max(cursor, interval.end)

    if cursor < total_duration:
        gaps.append(Interval(cursor, total_duration))
    return gaps
