"""Entry point for turning subtitle text into a CueStore"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from . import config
from .cue_store import CueStore
from .errors import NoCuesFound
from .subtitle_parser import detect_format, parse_subtitles

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadFailure:
    """Soft failure: the text parsed but held no usable cues"""

    reason: str
    message: str
    fmt: str


LoadResult = Union[CueStore, LoadFailure]


class SubtitleService:
    """Parses subtitle text of a given format into a CueStore. Performs no I/O."""

    def __init__(self, strict: Optional[bool] = None):
        self.strict = config.STRICT_TIMECODES if strict is None else strict

    def load(self, raw_text: str, format_hint: Optional[str] = None) -> LoadResult:
        """
        Parse raw_text as format_hint and build a CueStore.

        format_hint is the subtitle file extension (lowercase, no dot). When
        it is None the format is guessed from the text.

        Returns:
            CueStore, or LoadFailure if no cues were found

        Raises:
            EmptyInput: If raw_text is empty or not a string
            UnsupportedFormat: If format_hint is not srt, ass, ssa or vtt
        """
        fmt = format_hint.lower() if isinstance(format_hint, str) else format_hint
        if fmt is None and isinstance(raw_text, str) and raw_text:
            fmt = detect_format(raw_text)
            logger.debug(f"Detected subtitle format: {fmt}")

        cues = parse_subtitles(raw_text, fmt, strict=self.strict)

        try:
            store = CueStore.build(cues)
        except NoCuesFound as e:
            logger.warning(f"No usable cues in {fmt} input ({len(cues)} parsed)")
            return LoadFailure(reason="no_cues_found", message=str(e), fmt=fmt)

        logger.info(f"Loaded {len(store)} {fmt} cues")
        return store
