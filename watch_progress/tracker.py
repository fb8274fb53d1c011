"""Turn playback events into watched intervals for a single video."""

from __future__ import annotations

import logging
import math
from typing import List, Optional

from .config import TrackerSettings
from .intervals import (
    Interval,
    add_interval,
    is_watched,
    merge_intervals,
    progress_percentage,
    total_watched,
    unwatched_gaps,
)
from .store import ProgressStore, Snapshot, SnapshotFormatError


logger = logging.getLogger(__name__)


def _valid_time(value: float) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value) and value >= 0


class ProgressTracker:
    """Session state machine for one video.

    The tracker is either idle or tracking. While tracking it holds an open
    segment starting at ``segment_start``; ``last_seen_time`` follows the time
    updates. Segments are only committed on pause and seek boundaries, and only
    when they last at least ``settings.min_segment_seconds``.

    Event methods return True when the event was applied and False when it was
    dropped because its time was negative or not a finite number.
    """

    def __init__(
        self,
        video_id: str,
        store: ProgressStore,
        settings: Optional[TrackerSettings] = None,
    ) -> None:
        self.video_id = video_id
        self.store = store
        self.settings = settings or TrackerSettings()

        self._intervals: List[Interval] = []
        self.last_position = 0.0
        self.total_duration = 0.0
        self.is_tracking = False
        self.segment_start: Optional[float] = None
        self.last_seen_time = 0.0

        self._restore()

    # Internal helpers -------------------------------------------------
    def _restore(self) -> None:
        try:
            snapshot = self.store.load(self.video_id)
        except SnapshotFormatError as exc:
            logger.warning("Discarding malformed snapshot for %s: %s", self.video_id, exc)
            snapshot = Snapshot.empty()
        if snapshot is None:
            return

        self._intervals = merge_intervals(snapshot.intervals)
        self.last_position = snapshot.last_position
        self.total_duration = snapshot.total_duration
        logger.debug(
            "Restored %s: %d intervals, last position %.2f",
            self.video_id,
            len(self._intervals),
            self.last_position,
        )

    def _reject(self, event: str, value: float) -> bool:
        logger.warning("Dropping %s event for %s with invalid time %r", event, self.video_id, value)
        return False

    def _close_segment(self, end: float) -> bool:
        """Commit ``[segment_start, end]`` when it is long enough."""

        start = self.segment_start
        self.segment_start = None
        if start is None:
            return False
        if end < start:
            logger.warning("Ignoring segment for %s that ends (%.2f) before it starts (%.2f)", self.video_id, end, start)
            return False
        if end - start < self.settings.min_segment_seconds:
            return False

        self._intervals = add_interval(self._intervals, Interval(start, end))
        logger.debug("Committed %.2f-%.2f for %s", start, end, self.video_id)
        return True

    def _persist(self) -> None:
        snapshot = self.snapshot()
        try:
            saved = self.store.save(self.video_id, snapshot)
        except OSError:
            logger.error("Progress store raised while saving %s", self.video_id, exc_info=True)
            return
        if not saved:
            logger.warning("Progress for %s was not saved; keeping it in memory", self.video_id)

    # Playback events --------------------------------------------------
    def play(self, time: float) -> bool:
        """Start a segment at ``time`` unless one is already open."""

        if not _valid_time(time):
            return self._reject("play", time)
        if self.is_tracking:
            return True
        self.is_tracking = True
        self.segment_start = time
        self.last_seen_time = time
        return True

    def pause(self, time: float) -> bool:
        """Stop tracking and commit the open segment up to ``time``."""

        if not _valid_time(time):
            return self._reject("pause", time)
        self.last_position = time
        if self.is_tracking:
            self.is_tracking = False
            if self._close_segment(time):
                self._persist()
        return True

    def seek(self, time: float) -> bool:
        """Close the open segment where playback last was and reopen it at ``time``.

        The span between the old position and ``time`` is not credited.
        """

        if not _valid_time(time):
            return self._reject("seek", time)
        self.last_position = time
        if self.is_tracking:
            committed = self._close_segment(self.last_seen_time)
            self.segment_start = time
            if committed:
                self._persist()
        self.last_seen_time = time
        return True

    def time_update(self, time: float) -> bool:
        """Follow a periodic time update; large jumps are handled as seeks."""

        if not _valid_time(time):
            return self._reject("time update", time)
        delta = time - self.last_seen_time
        if delta > self.settings.forward_jump_seconds or delta < -self.settings.backward_jump_seconds:
            logger.debug("Jump of %.2fs on %s treated as seek", delta, self.video_id)
            return self.seek(time)
        self.last_seen_time = time
        return True

    tick = time_update

    def set_duration(self, duration: float) -> bool:
        if not _valid_time(duration):
            return self._reject("duration", duration)
        self.total_duration = float(duration)
        return True

    def reset(self) -> None:
        """Forget everything watched for this video, including the stored snapshot."""

        self._intervals = []
        self.last_position = 0.0
        self.is_tracking = False
        self.segment_start = None
        self.last_seen_time = 0.0
        try:
            self.store.delete(self.video_id)
        except OSError:
            logger.error("Progress store raised while deleting %s", self.video_id, exc_info=True)
        logger.info("Reset progress for %s", self.video_id)

    # Derived reads ----------------------------------------------------
    @property
    def intervals(self) -> List[Interval]:
        return merge_intervals(self._intervals)

    @property
    def total_watched_seconds(self) -> float:
        return total_watched(self._intervals)

    @property
    def progress_percentage(self) -> float:
        return progress_percentage(self._intervals, self.total_duration)

    @property
    def is_complete(self) -> bool:
        return self.progress_percentage >= 100.0

    @property
    def resume_position(self) -> float:
        """Where a player should start; a finished video starts over."""

        if 0 < self.last_position < self.total_duration:
            return self.last_position
        return 0.0

    @property
    def segment_count(self) -> int:
        return len(self.intervals)

    def unwatched_gaps(self) -> List[Interval]:
        return unwatched_gaps(self._intervals, self.total_duration)

    def is_watched(self, instant: float) -> bool:
        return is_watched(self._intervals, instant)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            intervals=self.intervals,
            last_position=self.last_position,
            total_duration=self.total_duration,
        )
