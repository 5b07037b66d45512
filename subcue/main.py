"""FastAPI session server feeding subtitle cues to display clients"""

import argparse
import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Callable, Dict, List, Literal, Optional, Set, Union

import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from . import config
from .cue_store import CueStore
from .discovery import find_subtitle_file, format_hint_for, is_video_file, read_subtitle_file
from .errors import EmptyInput, UnsupportedFormat
from .playback import PlaybackSession
from .subtitle_parser import Cue


class HttpPlaybackSource:
    """PlaybackSource driven by the session's HTTP endpoints"""

    def __init__(self):
        self._time_callbacks: List[Callable[[float], None]] = []
        self._play_callbacks: List[Callable[[], None]] = []
        self._pause_callbacks: List[Callable[[], None]] = []
        self._ended_callbacks: List[Callable[[], None]] = []

    def on_time_update(self, callback: Callable[[float], None]) -> None:
        self._time_callbacks.append(callback)

    def on_play(self, callback: Callable[[], None]) -> None:
        self._play_callbacks.append(callback)

    def on_pause(self, callback: Callable[[], None]) -> None:
        self._pause_callbacks.append(callback)

    def on_ended(self, callback: Callable[[], None]) -> None:
        self._ended_callbacks.append(callback)

    def time_update(self, seconds: float) -> None:
        for callback in self._time_callbacks:
            callback(seconds)

    def play(self) -> None:
        for callback in self._play_callbacks:
            callback()

    def pause(self) -> None:
        for callback in self._pause_callbacks:
            callback()

    def ended(self) -> None:
        for callback in self._ended_callbacks:
            callback()


class QueuedDisplay:
    """DisplaySurface that queues messages until they are sent to WebSocket clients"""

    def __init__(self):
        self.pending: List[dict] = []

    def show(self, cue: Cue) -> None:
        self.pending.append(subtitle_update_message(cue))

    def hide(self) -> None:
        self.pending.append(subtitle_update_message(None))

    def notify(self, message: str) -> None:
        self.pending.append({"type": "notification", "message": message})

    def drain(self) -> List[dict]:
        messages, self.pending = self.pending, []
        return messages


# Session state for multi-player support
@dataclass
class Session:
    """Represents a single player instance"""

    session_id: str
    playback: PlaybackSession = field(default_factory=PlaybackSession)
    source: HttpPlaybackSource = field(default_factory=HttpPlaybackSource)
    display: QueuedDisplay = field(default_factory=QueuedDisplay)
    last_activity: float = field(default_factory=time.time)
    created_at: float = field(default_factory=time.time)
    connected_clients: Set[WebSocket] = field(default_factory=set)

    def __post_init__(self):
        self.playback.attach(self.source, self.display)

    def touch(self) -> None:
        self.last_activity = time.time()

    def summary(self) -> dict:
        store = self.playback.store
        return {
            "session_id": self.session_id,
            "title": self.playback.title,
            "cues_loaded": len(store) if store is not None else 0,
            "playing": self.playback.playing,
            "visible": self.playback.visible,
            "time_offset": self.playback.time_offset,
            "last_activity": self.last_activity,
            "created_at": self.created_at,
            "connected_clients": len(self.connected_clients),
        }


# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    logger.info("subcue server starting up")

    app.state.sessions: Dict[str, Session] = {}
    app.state.cleanup_task = asyncio.create_task(session_cleanup_task(app))

    yield

    logger.info("Shutting down server...")

    app.state.cleanup_task.cancel()
    try:
        await app.state.cleanup_task
    except asyncio.CancelledError:
        pass

    for session in list(app.state.sessions.values()):
        for client in list(session.connected_clients):
            try:
                await client.close()
            except Exception as e:
                logger.error(f"Error closing session client connection: {e}")
        session.connected_clients.clear()

    logger.info("Server shutdown complete")


app = FastAPI(title="subcue", lifespan=lifespan)


class LoadRequest(BaseModel):
    text: str
    format: Optional[str] = None  # srt | ass | ssa | vtt, detected when omitted
    title: str = ""


class OpenRequest(BaseModel):
    video_path: str


class TimeUpdate(BaseModel):
    time: float  # seconds


class OffsetRequest(BaseModel):
    offset: float  # seconds


class VisibilityRequest(BaseModel):
    visible: bool


# Commands display clients may send over the WebSocket
class SetVisibleCommand(BaseModel):
    type: Literal["setVisible"]
    visible: bool


class SetOffsetCommand(BaseModel):
    type: Literal["setOffset"]
    offset: float  # seconds


display_command_adapter = TypeAdapter(
    Annotated[Union[SetVisibleCommand, SetOffsetCommand], Field(discriminator="type")]
)


def subtitle_update_message(cue: Optional[Cue]) -> dict:
    return {
        "type": "subtitle-update",
        "text": cue.text if cue is not None else "",
        "visible": cue is not None,
        "timestamp": time.time(),
    }


def create_session_id() -> str:
    """Generate a unique session ID"""
    return str(uuid.uuid4())


def get_session(session_id: str) -> Optional[Session]:
    """Get a session by ID"""
    return app.state.sessions.get(session_id)


def session_not_found() -> JSONResponse:
    return JSONResponse({"status": "session_not_found"}, status_code=404)


async def flush_display(session: Session):
    """Send queued display messages to all clients of a session"""
    messages = session.display.drain()
    if not messages or not session.connected_clients:
        return

    disconnected = []
    for client in list(session.connected_clients):
        try:
            for message in messages:
                await client.send_json(message)
        except Exception as e:
            logger.error(f"Error sending display update to session client: {e}")
            disconnected.append(client)

    for client in disconnected:
        session.connected_clients.discard(client)


async def close_session(session_id: str):
    """Close a session and notify all clients"""
    session = app.state.sessions.pop(session_id, None)
    if session is None:
        return

    logger.info(f"Closing session {session_id} ({session.playback.title})")

    for client in list(session.connected_clients):
        try:
            await client.send_json({"type": "session_closed"})
            await client.close()
        except Exception as e:
            logger.error(f"Error closing session client: {e}")


async def load_into_session(
    session: Session, text: str, fmt: Optional[str], title: str
) -> JSONResponse:
    """Load subtitle text into a session and report the outcome"""
    session.touch()
    try:
        result = session.playback.load(text, fmt, title=title)
    except EmptyInput as e:
        logger.warning(f"Session {session.session_id}: {e}")
        session.display.notify("Subtitle file is empty")
        await flush_display(session)
        return JSONResponse({"status": "empty_input", "error": str(e)}, status_code=400)
    except UnsupportedFormat as e:
        logger.warning(f"Session {session.session_id}: {e}")
        await flush_display(session)
        return JSONResponse(
            {"status": "unsupported_format", "error": str(e)}, status_code=400
        )

    await flush_display(session)

    if not isinstance(result, CueStore):
        return JSONResponse(
            {"status": "load_failed", "reason": result.reason, "format": result.fmt}
        )

    return JSONResponse(
        {
            "status": "ok",
            "cues_loaded": len(result),
            "first_start": result.first_start,
            "last_end": result.last_end,
        }
    )


# Background tasks


async def session_cleanup_task(app: FastAPI):
    """Background task to clean up stale sessions"""
    logger.info("Session cleanup task started")
    try:
        while True:
            await asyncio.sleep(config.SESSION_CLEANUP_INTERVAL)

            current_time = time.time()
            stale_sessions = [
                session_id
                for session_id, session in app.state.sessions.items()
                if current_time - session.last_activity > config.SESSION_TIMEOUT_SECONDS
            ]

            for session_id in stale_sessions:
                logger.info(f"Session {session_id} is stale, closing")
                await close_session(session_id)

    except asyncio.CancelledError:
        logger.info("Session cleanup task cancelled")
        raise


@app.get("/health")
async def health_check():
    """Health check endpoint for verifying server is ready"""
    return JSONResponse(
        {
            "status": "ok",
            "active_sessions": len(app.state.sessions),
            "total_clients": sum(len(s.connected_clients) for s in app.state.sessions.values()),
        }
    )


@app.post("/session/create")
async def create_session():
    """Create a new session for a player instance"""
    session_id = create_session_id()
    app.state.sessions[session_id] = Session(session_id=session_id)

    logger.info(f"Created session {session_id}")
    return JSONResponse({"status": "ok", "session_id": session_id})


@app.get("/sessions")
async def list_sessions():
    """List all active sessions"""
    sessions_data = [session.summary() for session in app.state.sessions.values()]
    return JSONResponse({"status": "ok", "sessions": sessions_data})


@app.get("/session/{session_id}/health")
async def session_health(session_id: str):
    """Check if a specific session exists"""
    session = get_session(session_id)
    if not session:
        return JSONResponse({"status": "not_found"}, status_code=404)

    return JSONResponse({"status": "ok", "session": session.summary()})


@app.post("/session/{session_id}/load")
async def session_load(session_id: str, req: LoadRequest):
    """Load subtitle text supplied by the host"""
    session = get_session(session_id)
    if not session:
        return session_not_found()

    logger.info(f"Loading subtitles into session {session_id} (format: {req.format or 'auto'})")
    return await load_into_session(session, req.text, req.format, req.title)


@app.post("/session/{session_id}/open")
async def session_open(session_id: str, req: OpenRequest):
    """Find, read and load the subtitle file next to a video"""
    session = get_session(session_id)
    if not session:
        return session_not_found()

    video_path = Path(req.video_path)
    if not is_video_file(video_path):
        logger.info(f"Not a video file: {video_path.name}")
        return JSONResponse({"status": "not_a_video"}, status_code=400)

    subtitle_path = find_subtitle_file(video_path)
    if subtitle_path is None:
        session.playback.reset()
        session.display.notify("No subtitle file found")
        await flush_display(session)
        return JSONResponse({"status": "subtitle_not_found"}, status_code=404)

    try:
        text = read_subtitle_file(subtitle_path)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading {subtitle_path}: {e}", exc_info=True)
        session.display.notify("Could not read subtitle file")
        await flush_display(session)
        return JSONResponse({"status": "read_failed", "error": str(e)}, status_code=500)

    logger.info(f"Opening {subtitle_path.name} for {video_path.name}")
    return await load_into_session(
        session, text, format_hint_for(subtitle_path), video_path.name
    )


@app.post("/session/{session_id}/time")
async def session_time_update(session_id: str, req: TimeUpdate):
    """Update current playback time and return the active cue"""
    session = get_session(session_id)
    if not session:
        return session_not_found()

    session.touch()
    session.source.time_update(req.time)
    await flush_display(session)

    cue = session.playback.current_cue
    return JSONResponse(
        {
            "status": "ok",
            "cue": cue.to_dict() if cue is not None else None,
            "visible": session.playback.visible,
        }
    )


@app.post("/session/{session_id}/play")
async def session_play(session_id: str):
    session = get_session(session_id)
    if not session:
        return session_not_found()

    session.touch()
    session.source.play()
    return JSONResponse({"status": "ok", "playing": session.playback.playing})


@app.post("/session/{session_id}/pause")
async def session_pause(session_id: str):
    session = get_session(session_id)
    if not session:
        return session_not_found()

    session.touch()
    session.source.pause()
    return JSONResponse({"status": "ok", "playing": session.playback.playing})


@app.post("/session/{session_id}/ended")
async def session_ended(session_id: str):
    session = get_session(session_id)
    if not session:
        return session_not_found()

    session.touch()
    session.source.ended()
    await flush_display(session)
    return JSONResponse({"status": "ok", "playing": session.playback.playing})


@app.post("/session/{session_id}/offset")
async def session_offset(session_id: str, req: OffsetRequest):
    """Shift subtitle timing relative to playback time"""
    session = get_session(session_id)
    if not session:
        return session_not_found()

    session.touch()
    session.playback.set_offset(req.offset)
    logger.info(f"Session {session_id} time offset set to {req.offset}s")
    return JSONResponse({"status": "ok", "time_offset": session.playback.time_offset})


@app.post("/session/{session_id}/visibility")
async def session_visibility(session_id: str, req: VisibilityRequest):
    """Show or hide subtitles for a session"""
    session = get_session(session_id)
    if not session:
        return session_not_found()

    session.touch()
    session.playback.set_visible(req.visible)
    await flush_display(session)
    return JSONResponse({"status": "ok", "visible": session.playback.visible})


@app.delete("/session/{session_id}")
async def delete_session(session_id: str):
    """Delete a session"""
    logger.info(f"Delete requested for session {session_id}")
    await close_session(session_id)
    return JSONResponse({"status": "ok"})


@app.websocket("/ws/{session_id}")
async def session_websocket_endpoint(websocket: WebSocket, session_id: str):
    """WebSocket endpoint delivering subtitle updates for one session"""
    await websocket.accept()

    session = get_session(session_id)
    if not session:
        logger.warning(f"WebSocket connection attempted for non-existent session {session_id}")
        await websocket.close(code=1008, reason="Session not found")
        return

    total_clients = sum(len(s.connected_clients) for s in app.state.sessions.values())
    if total_clients >= config.WS_MAX_CLIENTS:
        logger.warning("WebSocket client limit reached")
        await websocket.close(code=1008, reason="Server at capacity")
        return

    session.connected_clients.add(websocket)
    client_id = id(websocket)
    logger.info(
        f"WebSocket client connected to {session_id} (id={client_id}), "
        f"session clients: {len(session.connected_clients)}"
    )

    try:
        await websocket.send_json({"type": "session", **session.summary()})
        if session.playback.visible:
            await websocket.send_json(subtitle_update_message(session.playback.current_cue))

        while True:
            raw_message = await websocket.receive_text()
            try:
                command = display_command_adapter.validate_json(raw_message)
            except ValidationError as e:
                logger.warning(
                    f"Ignoring invalid message from client {client_id}: "
                    f"{e.error_count()} validation error(s)"
                )
                continue

            session.touch()
            if isinstance(command, SetVisibleCommand):
                session.playback.set_visible(command.visible)
                await flush_display(session)
            else:
                session.playback.set_offset(command.offset)

    except WebSocketDisconnect:
        logger.info(f"WebSocket client disconnected from {session_id} (id={client_id})")
    except Exception as e:
        logger.error(f"WebSocket error for client {client_id}: {e}", exc_info=True)
    finally:
        session.connected_clients.discard(websocket)


def parse_args():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description="subcue subtitle session server")
    parser.add_argument(
        "--host",
        default=config.DEFAULT_HOST,
        help=f"Host to bind to (default: {config.DEFAULT_HOST})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=config.DEFAULT_PORT,
        help=f"Port to bind to (default: {config.DEFAULT_PORT})",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default=config.LOG_LEVEL,
        help=f"Log level (default: {config.LOG_LEVEL})",
    )
    return parser.parse_args()


def run():
    """Entry point for the subcue-server command"""
    args = parse_args()

    logging.getLogger().setLevel(args.log_level.upper())

    logger.info(f"Starting server on {args.host}:{args.port}")

    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        access_log=args.log_level == "debug",
    )


if __name__ == "__main__":
    run()
