from __future__ import annotations

import pytest

from watch_progress.store import MemoryProgressStore
from watch_progress.tracker import ProgressTracker


@pytest.fixture
def store() -> MemoryProgressStore:
    return MemoryProgressStore()


@pytest.fixture
def tracker(store: MemoryProgressStore) -> ProgressTracker:
    tracker = ProgressTracker("lecture-1", store)
    tracker.set_duration(100)
    return tracker
