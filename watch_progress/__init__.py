"""Track which parts of a video a viewer has actually watched."""

from .config import ServerConfig, TrackerSettings
from .intervals import (
    Interval,
    InvalidIntervalError,
    add_interval,
    is_watched,
    merge_intervals,
    progress_percentage,
    total_watched,
    unwatched_gaps,
)
from .sessions import SessionManager
from .store import JsonProgressStore, MemoryProgressStore, ProgressStore, Snapshot, SnapshotFormatError
from .tracker import ProgressTracker

__all__ = [
    "Interval",
    "InvalidIntervalError",
    "JsonProgressStore",
    "MemoryProgressStore",
    "ProgressStore",
    "ProgressTracker",
    "ServerConfig",
    "SessionManager",
    "Snapshot",
    "SnapshotFormatError",
    "TrackerSettings",
    "add_interval",
    "is_watched",
    "merge_intervals",
    "progress_percentage",
    "total_watched",
    "unwatched_gaps",
]

__version__ = "0.1.0"
