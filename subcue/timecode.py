"""Conversion between subtitle timestamps and seconds"""

import re

from .errors import MalformedTimeCode, UnsupportedFormat

# fmt -> (pattern, sub-second divisor)
_TIME_PATTERNS = {
    "srt": (re.compile(r"(\d{2}):(\d{2}):(\d{2}),(\d{3})"), 1000),
    "ass": (re.compile(r"(\d{1,2}):(\d{2}):(\d{2})\.(\d{2})"), 100),
    "vtt": (re.compile(r"(\d{2}):(\d{2}):(\d{2})\.(\d{3})"), 1000),
}
_TIME_PATTERNS["ssa"] = _TIME_PATTERNS["ass"]

# Unanchored forms used when scanning timing lines
SRT_TIME = r"\d{2}:\d{2}:\d{2},\d{3}"
VTT_TIME = r"\d{2}:\d{2}:\d{2}\.\d{3}"


def _pattern_for(fmt: str):
    try:
        return _TIME_PATTERNS[fmt.lower()]
    except (KeyError, AttributeError):
        raise UnsupportedFormat(fmt) from None


def parse_time(text: str, fmt: str) -> float:
    """
    Parse a format-specific timestamp to seconds.

    srt: HH:MM:SS,mmm    00:01:23,456 -> 83.456
    ass: H:MM:SS.cc      0:01:23.45   -> 83.45
    vtt: HH:MM:SS.mmm    00:01:23.456 -> 83.456

    Raises:
        MalformedTimeCode: If the text does not match the format exactly
        UnsupportedFormat: If fmt is not a known subtitle format
    """
    pattern, divisor = _pattern_for(fmt)
    match = pattern.fullmatch(text.strip()) if isinstance(text, str) else None
    if not match:
        raise MalformedTimeCode(str(text), fmt)

    hours, minutes, seconds, fraction = map(int, match.groups())

    if minutes >= 60:
        raise MalformedTimeCode(text, fmt, f"minutes {minutes} >= 60")
    if seconds >= 60:
        raise MalformedTimeCode(text, fmt, f"seconds {seconds} >= 60")

    return hours * 3600 + minutes * 60 + seconds + fraction / divisor


def format_time(seconds: float, fmt: str) -> str:
    """Format seconds as a timestamp in the given subtitle format."""
    _, divisor = _pattern_for(fmt)
    if seconds < 0:
        raise ValueError(f"Cannot format negative time: {seconds}")

    units = int(round(seconds * divisor))
    whole, fraction = divmod(units, divisor)
    hours, rest = divmod(whole, 3600)
    minutes, secs = divmod(rest, 60)

    fmt = fmt.lower()
    if fmt == "srt":
        return f"{hours:02d}:{minutes:02d}:{secs:02d},{fraction:03d}"
    if fmt == "vtt":
        return f"{hours:02d}:{minutes:02d}:{secs:02d}.{fraction:03d}"
    return f"{hours:d}:{minutes:02d}:{secs:02d}.{fraction:02d}"
