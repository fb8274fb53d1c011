"""Interval merging and measurement."""
from __future__ import annotations

import itertools
import math

import pytest

from watch_progress.intervals import (
    Interval,
    InvalidIntervalError,
    add_interval,
    is_watched,
    merge_intervals,
    progress_percentage,
    total_watched,
    unwatched_gaps,
)


def spans(*pairs: tuple[float, float]) -> list[Interval]:
    return [Interval(start, end) for start, end in pairs]


def test_merge_empty_input():
    assert merge_intervals([]) == []


def test_overlapping_spans_are_not_double_counted():
    intervals = spans((0, 10), (5, 15))
    assert merge_intervals(intervals) == spans((0, 15))
    assert total_watched(intervals) == 15


def test_touching_spans_fuse():
    assert merge_intervals(spans((0, 5), (5, 10))) == spans((0, 10))


def test_disjoint_spans_stay_separate_and_sorted():
    merged = merge_intervals(spans((20, 30), (0, 5), (8, 9)))
    assert merged == spans((0, 5), (8, 9), (20, 30))
    for left, right in zip(merged, merged[1:]):
        assert left.end < right.start


def test_contained_span_does_not_shrink_tail():
    assert merge_intervals(spans((0, 20), (5, 10))) == spans((0, 20))


def test_merge_is_idempotent():
    intervals = spans((3, 7), (1, 2), (6, 12), (12, 13), (40, 41))
    once = merge_intervals(intervals)
    assert merge_intervals(once) == once


def test_merge_ignores_input_order():
    intervals = spans((0, 4), (3, 8), (10, 12), (11.5, 20))
    expected = merge_intervals(intervals)
    for permutation in itertools.permutations(intervals):
        assert merge_intervals(permutation) == expected


def test_merge_does_not_mutate_input():
    intervals = spans((5, 10), (0, 6))
    merge_intervals(intervals)
    assert intervals == spans((5, 10), (0, 6))


def test_progress_percentage_basic():
    assert progress_percentage(spans((0, 25)), 100) == 25.0


def test_progress_percentage_without_duration():
    assert progress_percentage(spans((0, 25)), 0) == 0.0
    assert progress_percentage(spans((0, 25)), -5) == 0.0


def test_progress_percentage_is_clamped():
    assert progress_percentage(spans((0, 100.0000001)), 100) == 100.0
    assert progress_percentage(spans((0, 150)), 100) == 100.0


def test_add_interval_returns_merged_set():
    existing = spans((0, 5), (10, 15))
    assert add_interval(existing, Interval(4, 11)) == spans((0, 15))
    assert existing == spans((0, 5), (10, 15))


def test_is_watched_is_half_open():
    intervals = spans((10, 20))
    assert is_watched(intervals, 10)
    assert is_watched(intervals, 19.99)
    assert not is_watched(intervals, 20)
    assert not is_watched(intervals, 9.5)


def test_unwatched_gaps():
    gaps = unwatched_gaps(spans((10, 20), (30, 40)), 60)
    assert gaps == spans((0, 10), (20, 30), (40, 60))


def test_unwatched_gaps_when_nothing_watched():
    assert unwatched_gaps([], 30) == spans((0, 30))


def test_unwatched_gaps_when_fully_watched():
    assert unwatched_gaps(spans((0, 30)), 30) == []


@pytest.mark.parametrize(
    "intervals, duration",
    [
        (spans((0, 10), (5, 15), (40, 50)), 60),
        (spans((2, 3)), 3),
        (spans((7, 9), (1, 2), (2, 4)), 12.5),
    ],
)
def test_gaps_and_watched_cover_the_timeline(intervals, duration):
    pieces = sorted(merge_intervals(intervals) + unwatched_gaps(intervals, duration), key=lambda i: i.start)
    assert pieces[0].start == 0
    assert pieces[-1].end == duration
    for left, right in zip(pieces, pieces[1:]):
        assert left.end == right.start
    assert math.isclose(sum(piece.duration for piece in pieces), duration)


def test_gaps_stay_inside_duration():
    assert unwatched_gaps(spans((50, 60)), 40) == spans((0, 40))


@pytest.mark.parametrize("start, end", [(-1, 5), (5, 4), (0, math.inf), (math.nan, 1)])
def test_invalid_interval_is_rejected(start, end):
    with pytest.raises(InvalidIntervalError):
        Interval(start, end)


def test_interval_from_dict():
    assert Interval.from_dict({"start": 1, "end": 2.5}) == Interval(1.0, 2.5)


@pytest.mark.parametrize(
    "raw",
    [{"start": 1}, {"start": 1, "end": "2.5"}, {"start": True, "end": 2}, {"start": None, "end": 2}],
)
def test_interval_from_dict_requires_numbers(raw):
    with pytest.raises(InvalidIntervalError):
        Interval.from_dict(raw)
