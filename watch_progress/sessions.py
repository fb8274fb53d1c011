"""Keep one progress tracker per video identifier."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .config import TrackerSettings
from .store import ProgressStore
from .tracker import ProgressTracker


logger = logging.getLogger(__name__)


class SessionManager:
    """Hands out independent trackers that share only the backing store."""

    def __init__(self, store: ProgressStore, settings: Optional[TrackerSettings] = None) -> None:
        self.store = store
        self.settings = settings or TrackerSettings()
        self._trackers: Dict[str, ProgressTracker] = {}

    def get(self, video_id: str) -> ProgressTracker:
        tracker = self._trackers.get(video_id)
        if tracker is None:
            tracker = ProgressTracker(video_id, self.store, self.settings)
            self._trackers[video_id] = tracker
            logger.debug("Opened session for %s", video_id)
        return tracker

    def reset(self, video_id: str) -> ProgressTracker:
        tracker = self.get(video_id)
        tracker.reset()
        return tracker

    def active_ids(self) -> List[str]:
        return sorted(self._trackers)
