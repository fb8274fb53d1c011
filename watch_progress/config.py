"""Runtime configuration for the tracker and the HTTP server."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parents[1]


class ConfigurationError(RuntimeError):
    """Raised when a configuration value cannot be used."""


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationError(f"{name} cannot be negative, got {raw!r}")
    return value


@dataclass(frozen=True)
class TrackerSettings:
    """Thresholds separating real watching from control noise and skips.

    Segments shorter than ``min_segment_seconds`` are discarded. A time update
    that moves more than ``forward_jump_seconds`` ahead or more than
    ``backward_jump_seconds`` back is handled as a seek.
    """

    min_segment_seconds: float = 0.5
    forward_jump_seconds: float = 2.0
    backward_jump_seconds: float = 0.5

    def __post_init__(self) -> None:
        for name in ("min_segment_seconds", "forward_jump_seconds", "backward_jump_seconds"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(f"{name} must be a finite, non-negative number, got {value!r}")

    @classmethod
    def from_env(cls) -> "TrackerSettings":
        defaults = cls()
        return cls(
            min_segment_seconds=_env_float("WATCH_MIN_SEGMENT_SECONDS", defaults.min_segment_seconds),
            forward_jump_seconds=_env_float("WATCH_FORWARD_JUMP_SECONDS", defaults.forward_jump_seconds),
            backward_jump_seconds=_env_float("WATCH_BACKWARD_JUMP_SECONDS", defaults.backward_jump_seconds),
        )


@dataclass
class ServerConfig:
    """Settings for the web service."""

    data_dir: Path = BASE_DIR / "data"
    store_filename: str = "watch_progress.json"
    port: int = 8000
    tracker: TrackerSettings = field(default_factory=TrackerSettings)

    @property
    def store_path(self) -> Path:
        return self.data_dir / self.store_filename

    @classmethod
    def from_env(cls) -> "ServerConfig":
        data_dir = os.getenv("WATCH_PROGRESS_DATA_DIR")
        port_raw = os.getenv("PORT", "8000")
        try:
            port = int(port_raw)
        except ValueError as exc:
            raise ConfigurationError(f"PORT must be an integer, got {port_raw!r}") from exc
        return cls(
            data_dir=Path(data_dir) if data_dir else BASE_DIR / "data",
            port=port,
            tracker=TrackerSettings.from_env(),
        )
