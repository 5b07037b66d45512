"""Playback session state and the host collaborator interfaces"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from .cue_store import CueStore
from .service import LoadResult, SubtitleService
from .subtitle_parser import Cue

logger = logging.getLogger(__name__)


class PlaybackSource(Protocol):
    """Player capabilities a host adapter provides"""

    def on_time_update(self, callback: Callable[[float], None]) -> None: ...

    def on_play(self, callback: Callable[[], None]) -> None: ...

    def on_pause(self, callback: Callable[[], None]) -> None: ...

    def on_ended(self, callback: Callable[[], None]) -> None: ...


class DisplaySurface(Protocol):
    """Receives show/hide signals and user-facing notices"""

    def show(self, cue: Cue) -> None: ...

    def hide(self) -> None: ...

    def notify(self, message: str) -> None: ...


@dataclass
class PlaybackSession:
    """
    Subtitle state for one playback target.

    Replaces the plugin-wide globals of a single active video: every caller
    owns its own session, so tests and concurrent players never share state.
    """

    service: SubtitleService = field(default_factory=SubtitleService)
    title: str = ""
    store: Optional[CueStore] = None
    time_offset: float = 0.0
    visible: bool = True
    playing: bool = False
    current_time: float = 0.0
    current_cue: Optional[Cue] = None
    _hint: Optional[int] = field(default=None, repr=False)
    _display: Optional[DisplaySurface] = field(default=None, repr=False)

    def load(self, raw_text: str, format_hint: Optional[str] = None, title: str = "") -> LoadResult:
        """
        Discard the current cues and load new subtitle text.

        EmptyInput and UnsupportedFormat propagate; the session is left
        without subtitles in that case.
        """
        if self.current_cue is not None:
            self._hide()
        self.clear()
        self.title = title
        result = self.service.load(raw_text, format_hint)

        if isinstance(result, CueStore):
            self.store = result
            self._notify(f"Loaded {len(result)} subtitles")
        else:
            self._notify("Subtitle parsing failed")
        return result

    def clear(self) -> None:
        """Drop the loaded cues, keeping offset and visibility"""
        self.store = None
        self.current_cue = None
        self._hint = None

    def reset(self) -> None:
        """Return to the initial state for a new playback target"""
        self.clear()
        self.title = ""
        self.time_offset = 0.0
        self.playing = False
        self.current_time = 0.0
        self._hide()

    def tick(self, time: float) -> Optional[Cue]:
        """Record a playback time update and return the cue active at time + offset"""
        self.current_time = time
        if self.store is None:
            self.current_cue = None
            return None

        position = self.store.locate(time + self.time_offset, self._hint)
        if position is None:
            self.current_cue = None
        else:
            self._hint = position
            self.current_cue = self.store[position]
        return self.current_cue

    def play(self) -> None:
        self.playing = True
        logger.debug("Playback started")

    def pause(self) -> None:
        self.playing = False
        logger.debug("Playback paused")

    def end(self) -> None:
        self.playing = False
        self.current_cue = None
        self._hint = None
        self._hide()
        logger.debug("Playback ended")

    def set_offset(self, offset: float) -> None:
        self.time_offset = offset
        self._hint = None

    def set_visible(self, visible: bool) -> None:
        self.visible = visible
        if not visible:
            self._hide()
        elif self.current_cue is not None and self._display is not None:
            self._display.show(self.current_cue)

    def attach(self, source: PlaybackSource, display: DisplaySurface) -> None:
        """Wire a player's events to this session and its output to a display"""
        self._display = display

        def handle_time(time: float) -> None:
            previous = self.current_cue
            cue = self.tick(time)
            if not self.visible or cue is previous:
                return
            if cue is None:
                display.hide()
            else:
                display.show(cue)

        source.on_time_update(handle_time)
        source.on_play(self.play)
        source.on_pause(self.pause)
        source.on_ended(self.end)

    def _hide(self) -> None:
        if self._display is not None:
            self._display.hide()

    def _notify(self, message: str) -> None:
        logger.info(message)
        if self._display is not None:
            self._display.notify(message)
