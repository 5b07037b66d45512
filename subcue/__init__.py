"""subcue - subtitle timeline engine

Parses SRT, ASS/SSA and WebVTT subtitles into a time-ordered cue list and
answers "which cue is active at time T" during playback.
"""

__version__ = "0.1.0"
__author__ = "subcue contributors"

# Export main components
from . import config
from .cue_store import CueStore
from .errors import EmptyInput, MalformedTimeCode, NoCuesFound, SubtitleError, UnsupportedFormat
from .playback import DisplaySurface, PlaybackSession, PlaybackSource
from .service import LoadFailure, SubtitleService
from .subtitle_parser import Cue, detect_format, parse_subtitles
from .timecode import format_time, parse_time

__all__ = [
    "Cue",
    "CueStore",
    "SubtitleService",
    "LoadFailure",
    "PlaybackSession",
    "PlaybackSource",
    "DisplaySurface",
    "parse_subtitles",
    "detect_format",
    "parse_time",
    "format_time",
    "SubtitleError",
    "EmptyInput",
    "UnsupportedFormat",
    "MalformedTimeCode",
    "NoCuesFound",
    "config",
    "__version__",
]
