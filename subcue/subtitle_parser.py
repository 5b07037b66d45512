"""Subtitle parsers for SRT, ASS/SSA and WebVTT text"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .errors import EmptyInput, MalformedTimeCode, UnsupportedFormat
from .timecode import SRT_TIME, VTT_TIME, parse_time

logger = logging.getLogger(__name__)

_INDEX_LINE = re.compile(r"\d+")
_SRT_RANGE = re.compile(rf"({SRT_TIME})\s*-->\s*({SRT_TIME})")
_VTT_RANGE = re.compile(rf"({VTT_TIME})\s*-->\s*({VTT_TIME})")

DIALOGUE_PREFIX = "Dialogue:"
EVENTS_SECTION = "[Events]"
ASS_TEXT_FIELD = 9  # Layer,Start,End,Style,Name,MarginL,MarginR,MarginV,Effect,Text


@dataclass(frozen=True)
class Cue:
    """A single timed subtitle cue, times in seconds"""

    start_time: float
    end_time: float
    text: str
    index: Optional[int] = None

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def contains(self, time: float) -> bool:
        return self.start_time <= time <= self.end_time

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "text": self.text,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


def _split_lines(content: str) -> List[str]:
    if content.startswith("\ufeff"):
        content = content[1:]
    return content.splitlines()


def _parse_range(line: str, pattern: "re.Pattern[str]", fmt: str) -> Tuple[float, float]:
    match = pattern.search(line)
    if not match:
        raise MalformedTimeCode(line.strip(), fmt, "expected 'start --> end'")
    return parse_time(match.group(1), fmt), parse_time(match.group(2), fmt)


def _read_text(lines: List[str], pos: int) -> Tuple[str, int]:
    """Collect non-blank lines from pos; returns (right-trimmed text, position of the stop line)"""
    text_lines = []
    while pos < len(lines) and lines[pos].strip():
        text_lines.append(lines[pos])
        pos += 1
    return "\n".join(text_lines).rstrip(), pos


def parse_srt(content: str, strict: bool = False) -> List[Cue]:
    """
    Parse SRT subtitle content into a list of Cue objects.

    SRT format:
    1
    00:00:01,000 --> 00:00:03,000
    First subtitle line
    Can be multiple lines

    A line holding only an integer opens a cue and the line right after it is
    taken as the timing line. A timing line that does not parse gives the cue
    zero times, or drops the cue when strict is set.

    Returns:
        Cues in file order (not sorted)
    """
    lines = _split_lines(content)
    cues = []
    dropped = 0
    pos = 0

    while pos < len(lines):
        line = lines[pos].strip()
        if not _INDEX_LINE.fullmatch(line):
            pos += 1
            continue

        index = int(line)
        timing_line = lines[pos + 1] if pos + 1 < len(lines) else ""
        text, pos = _read_text(lines, pos + 2)

        try:
            start, end = _parse_range(timing_line, _SRT_RANGE, "srt")
        except MalformedTimeCode as e:
            if strict:
                logger.warning(f"SRT cue {index}: {e}, dropping")
                dropped += 1
                continue
            logger.warning(f"SRT cue {index}: {e}, defaulting times to 0")
            start = end = 0.0

        cues.append(Cue(start_time=start, end_time=end, text=text, index=index))

    logger.debug(f"Parsed {len(cues)} SRT cues ({dropped} dropped)")
    return cues


def parse_ass(content: str, strict: bool = False) -> List[Cue]:
    """
    Parse ASS/SSA content into a list of Cue objects.

    Only ``Dialogue:`` lines after the [Events] marker are read; later section
    headers do not stop the scan. Fields are positional
    (Layer,Start,End,Style,Name,MarginL,MarginR,MarginV,Effect,Text); commas
    inside the Text field are kept and ``\\N`` becomes a line break. Lines with
    fewer than 10 fields are skipped.
    """
    cues = []
    in_events = False
    dropped = 0

    for line_no, raw_line in enumerate(_split_lines(content), 1):
        line = raw_line.strip()

        if line == EVENTS_SECTION:
            in_events = True
            continue

        if not in_events or not line.startswith(DIALOGUE_PREFIX):
            continue

        fields = line[len(DIALOGUE_PREFIX):].split(",")
        if len(fields) <= ASS_TEXT_FIELD:
            logger.debug(f"ASS line {line_no} has only {len(fields)} fields, skipping")
            continue

        times = []
        for raw_time in fields[1:3]:
            try:
                times.append(parse_time(raw_time, "ass"))
            except MalformedTimeCode as e:
                if strict:
                    break
                logger.warning(f"ASS line {line_no}: {e}, defaulting to 0")
                times.append(0.0)

        if len(times) < 2:
            logger.warning(f"ASS line {line_no}: malformed time code, dropping")
            dropped += 1
            continue

        text = ",".join(fields[ASS_TEXT_FIELD:]).replace("\\N", "\n")
        cues.append(Cue(start_time=times[0], end_time=times[1], text=text))

    logger.debug(f"Parsed {len(cues)} ASS cues ({dropped} dropped)")
    return cues


def parse_vtt(content: str, strict: bool = False) -> List[Cue]:
    """
    Parse WebVTT content into a list of Cue objects.

    Everything before the first timing line (the WEBVTT header and metadata)
    is skipped. A numeric cue identifier right above a timing line becomes the
    cue index. Cue settings after the end time are ignored.
    """
    lines = _split_lines(content)
    cues = []
    dropped = 0
    pos = 0

    # Skip header
    while pos < len(lines) and "-->" not in lines[pos]:
        pos += 1

    while pos < len(lines):
        line = lines[pos].strip()
        if "-->" not in line:
            pos += 1
            continue

        identifier = lines[pos - 1].strip() if pos > 0 else ""
        index = int(identifier) if _INDEX_LINE.fullmatch(identifier) else None
        text, next_pos = _read_text(lines, pos + 1)

        try:
            start, end = _parse_range(line, _VTT_RANGE, "vtt")
        except MalformedTimeCode as e:
            if strict:
                logger.warning(f"VTT line {pos + 1}: {e}, dropping")
                dropped += 1
                pos = next_pos
                continue
            logger.warning(f"VTT line {pos + 1}: {e}, defaulting times to 0")
            start = end = 0.0

        cues.append(Cue(start_time=start, end_time=end, text=text, index=index))
        pos = next_pos

    logger.debug(f"Parsed {len(cues)} VTT cues ({dropped} dropped)")
    return cues


_PARSERS: Dict[str, Callable[..., List[Cue]]] = {
    "srt": parse_srt,
    "ass": parse_ass,
    "ssa": parse_ass,
    "vtt": parse_vtt,
}


def detect_format(content: str) -> str:
    """Guess the subtitle format from its text; falls back to srt."""
    head = _split_lines(content.lstrip()[:4096]) if isinstance(content, str) else []
    if head and head[0].startswith("WEBVTT"):
        return "vtt"
    if any(line.strip() in ("[Script Info]", EVENTS_SECTION) for line in head):
        return "ass"
    return "srt"


def parse_subtitles(content: str, fmt: str, strict: bool = False) -> List[Cue]:
    """
    Parse subtitle text of the given format.

    Args:
        content: Raw subtitle file text
        fmt: One of srt, ass, ssa, vtt (case-insensitive)
        strict: Drop cues with malformed time codes instead of zeroing them

    Returns:
        Cues in encounter order

    Raises:
        EmptyInput: If content is empty or not a string
        UnsupportedFormat: If fmt is not a supported format
    """
    if not isinstance(content, str) or not content:
        raise EmptyInput("Empty subtitle content")

    parser = _PARSERS.get(fmt.lower()) if isinstance(fmt, str) else None
    if parser is None:
        raise UnsupportedFormat(fmt)

    cues = parser(content, strict=strict)
    logger.info(f"Parsed {len(cues)} {fmt.lower()} cues")
    return cues
