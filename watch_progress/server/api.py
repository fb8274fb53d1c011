"""FastAPI application exposing watch progress tracking to a web player."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from watch_progress.config import ServerConfig
from watch_progress.sessions import SessionManager
from watch_progress.store import JsonProgressStore, ProgressStore
from watch_progress.time_utils import TimestampParseError, format_clock, format_seconds, parse_timestamp
from watch_progress.tracker import ProgressTracker


logger = logging.getLogger(__name__)


class PlaybackEvent(BaseModel):
    time: float | str = Field(..., description="Playback position (seconds or HH:MM:SS).")


class DurationUpdate(BaseModel):
    duration: float = Field(..., ge=0, description="Total media duration in seconds.")


class IntervalModel(BaseModel):
    start: float
    end: float


class ProgressSummary(BaseModel):
    video_id: str
    intervals: list[IntervalModel]
    progress_percentage: float
    total_watched_seconds: float
    total_duration: float
    last_position: float
    resume_position: float
    is_tracking: bool
    is_complete: bool
    segment_count: int
    watched_display: str
    duration_display: str
    position_timestamp: str


class EventResult(BaseModel):
    accepted: bool
    progress: ProgressSummary


def _summarize(tracker: ProgressTracker) -> ProgressSummary:
    watched = tracker.total_watched_seconds
    return ProgressSummary(
        video_id=tracker.video_id,
        intervals=[IntervalModel(**interval.to_dict()) for interval in tracker.intervals],
        progress_percentage=tracker.progress_percentage,
        total_watched_seconds=watched,
        total_duration=tracker.total_duration,
        last_position=tracker.last_position,
        resume_position=tracker.resume_position,
        is_tracking=tracker.is_tracking,
        is_complete=tracker.is_complete,
        segment_count=tracker.segment_count,
        watched_display=format_clock(watched),
        duration_display=format_clock(tracker.total_duration),
        position_timestamp=format_seconds(tracker.last_position),
    )


def _seconds(value: float | str) -> float:
    try:
        return parse_timestamp(value)
    except TimestampParseError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def create_app(config: Optional[ServerConfig] = None, store: Optional[ProgressStore] = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    config = config or ServerConfig()
    if store is None:
        config.data_dir.mkdir(parents=True, exist_ok=True)
        store = JsonProgressStore(config.store_path)
    sessions = SessionManager(store, config.tracker)

    app = FastAPI(title="Watch Progress", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Dependency to access sessions within endpoints -----------------
    def get_sessions() -> SessionManager:
        return sessions

    # Routes ---------------------------------------------------------
    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/sessions/{video_id}", response_model=ProgressSummary)
    async def get_progress(video_id: str, mgr: SessionManager = Depends(get_sessions)) -> ProgressSummary:
        return _summarize(mgr.get(video_id))

    @app.post("/sessions/{video_id}/play", response_model=EventResult)
    async def play(
        video_id: str,
        payload: PlaybackEvent = Body(...),
        mgr: SessionManager = Depends(get_sessions),
    ) -> EventResult:
        tracker = mgr.get(video_id)
        accepted = tracker.play(_seconds(payload.time))
        return EventResult(accepted=accepted, progress=_summarize(tracker))

    @app.post("/sessions/{video_id}/pause", response_model=EventResult)
    async def pause(
        video_id: str,
        payload: PlaybackEvent = Body(...),
        mgr: SessionManager = Depends(get_sessions),
    ) -> EventResult:
        tracker = mgr.get(video_id)
        accepted = tracker.pause(_seconds(payload.time))
        return EventResult(accepted=accepted, progress=_summarize(tracker))

    @app.post("/sessions/{video_id}/seek", response_model=EventResult)
    async def seek(
        video_id: str,
        payload: PlaybackEvent = Body(...),
        mgr: SessionManager = Depends(get_sessions),
    ) -> EventResult:
        tracker = mgr.get(video_id)
        accepted = tracker.seek(_seconds(payload.time))
        return EventResult(accepted=accepted, progress=_summarize(tracker))

    @app.post("/sessions/{video_id}/time-update", response_model=EventResult)
    async def time_update(
        video_id: str,
        payload: PlaybackEvent = Body(...),
        mgr: SessionManager = Depends(get_sessions),
    ) -> EventResult:
        tracker = mgr.get(video_id)
        accepted = tracker.time_update(_seconds(payload.time))
        return EventResult(accepted=accepted, progress=_summarize(tracker))

    @app.post("/sessions/{video_id}/duration", response_model=EventResult)
    async def set_duration(
        video_id: str,
        payload: DurationUpdate = Body(...),
        mgr: SessionManager = Depends(get_sessions),
    ) -> EventResult:
        tracker = mgr.get(video_id)
        accepted = tracker.set_duration(payload.duration)
        return EventResult(accepted=accepted, progress=_summarize(tracker))

    @app.get("/sessions/{video_id}/gaps", response_model=list[IntervalModel])
    async def get_gaps(video_id: str, mgr: SessionManager = Depends(get_sessions)) -> list[IntervalModel]:
        tracker = mgr.get(video_id)
        return [IntervalModel(**gap.to_dict()) for gap in tracker.unwatched_gaps()]

    @app.get("/sessions/{video_id}/watched")
    async def get_watched(
        video_id: str,
        at: str = Query(..., description="Instant to check (seconds or HH:MM:SS)."),
        mgr: SessionManager = Depends(get_sessions),
    ) -> dict:
        seconds = _seconds(at)
        return {"at": seconds, "watched": mgr.get(video_id).is_watched(seconds)}

    @app.delete("/sessions/{video_id}", status_code=204)
    async def reset_progress(video_id: str, mgr: SessionManager = Depends(get_sessions)) -> Response:
        mgr.reset(video_id)
        return Response(status_code=204)

    return app
