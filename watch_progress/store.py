"""Snapshot persistence for watch progress sessions."""

from __future__ import annotations

import copy
import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol

from .intervals import Interval, InvalidIntervalError


logger = logging.getLogger(__name__)


class SnapshotFormatError(ValueError):
    """Raised when a stored snapshot is missing fields or holds bad values."""


def _number(data: Mapping[str, Any], key: str) -> float:
    if key not in data:
        raise SnapshotFormatError(f"Snapshot is missing field {key!r}")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SnapshotFormatError(f"Snapshot field {key!r} must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise SnapshotFormatError(f"Snapshot field {key!r} is out of range: {value!r}")
    return float(value)


@dataclass
class Snapshot:
    """Persisted part of a session, addressed by a video identifier."""

    intervals: List[Interval] = field(default_factory=list)
    last_position: float = 0.0
    total_duration: float = 0.0

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intervals": [interval.to_dict() for interval in self.intervals],
            "lastPosition": self.last_position,
            "totalDuration": self.total_duration,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Snapshot":
        if not isinstance(data, Mapping):
            raise SnapshotFormatError(f"Snapshot must be an object, got {type(data).__name__}")

        if "intervals" not in data:
            raise SnapshotFormatError("Snapshot is missing field 'intervals'")
        raw_intervals = data["intervals"]
        if not isinstance(raw_intervals, list):
            raise SnapshotFormatError("Snapshot field 'intervals' must be a list")
        intervals: List[Interval] = []
        for raw in raw_intervals:
            if not isinstance(raw, Mapping):
                raise SnapshotFormatError(f"Malformed interval entry: {raw!r}")
            try:
                intervals.append(Interval.from_dict(raw))
            except InvalidIntervalError as exc:
                raise SnapshotFormatError(str(exc)) from exc

        return cls(
            intervals=intervals,
            last_position=_number(data, "lastPosition"),
            total_duration=_number(data, "totalDuration"),
        )


class ProgressStore(Protocol):
    """Storage contract the tracker depends on."""

    def load(self, video_id: str) -> Optional[Snapshot]:
        """Return the stored snapshot, or None when nothing was saved yet."""
        ...

    def save(self, video_id: str, snapshot: Snapshot) -> bool:
        """Persist ``snapshot``; return False instead of raising on failure."""
        ...

    def delete(self, video_id: str) -> None:
        """Forget the snapshot for ``video_id`` if there is one."""
        ...


class MemoryProgressStore:
    """Keeps serialized snapshots in a dict. Handy for tests and embedding."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}

    def load(self, video_id: str) -> Optional[Snapshot]:
        raw = self._data.get(video_id)
        if raw is None:
            return None
        return Snapshot.from_dict(copy.deepcopy(raw))

    def save(self, video_id: str, snapshot: Snapshot) -> bool:
        self._data[video_id] = snapshot.to_dict()
        return True

    def delete(self, video_id: str) -> None:
        self._data.pop(video_id, None)

    def __contains__(self, video_id: object) -> bool:
        return video_id in self._data


class JsonProgressStore:
    """JSON-backed store holding every session snapshot in one document."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._data = self._load()

    # Internal helpers -------------------------------------------------
    def _load(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {"sessions": {}}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, UnicodeDecodeError):
            # Start clean when the file is corrupted.
            logger.warning("Ignoring unreadable progress file %s", self.path)
            data = {"sessions": {}}
        if not isinstance(data, dict) or not isinstance(data.get("sessions"), dict):
            logger.warning("Progress file %s has no sessions table, starting empty", self.path)
            data = {"sessions": {}}
        return data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(self._data, handle, indent=2)
        tmp.replace(self.path)

    # Public API -------------------------------------------------------
    def load(self, video_id: str) -> Optional[Snapshot]:
        raw = self._data["sessions"].get(video_id)
        if raw is None:
            return None
        return Snapshot.from_dict(raw)

    def save(self, video_id: str, snapshot: Snapshot) -> bool:
        self._data["sessions"][video_id] = snapshot.to_dict()
        try:
            self._save()
        except OSError:
            logger.error("Failed to write progress for %s to %s", video_id, self.path, exc_info=True)
            return False
        return True

    def delete(self, video_id: str) -> None:
        if self._data["sessions"].pop(video_id, None) is None:
            return
        try:
            self._save()
        except OSError:
            logger.error("Failed to remove progress for %s from %s", video_id, self.path, exc_info=True)
