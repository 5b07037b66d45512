"""Host-side lookup of subtitle files next to a video"""

import codecs
import logging
from pathlib import Path
from typing import Optional, Union

import chardet

from . import config

logger = logging.getLogger(__name__)

ENCODING_SUPERSETS = {
    "gb2312": "gb18030",
    "gbk": "gb18030",
    "big5": "big5hkscs",
    "iso-8859-1": "cp1252",
}

PathLike = Union[str, Path]


def is_video_file(path: PathLike) -> bool:
    return Path(path).suffix.lower().lstrip(".") in config.VIDEO_EXTENSIONS


def format_hint_for(path: PathLike) -> str:
    """Format hint for a subtitle path: its extension, lowercased, without the dot"""
    return Path(path).suffix.lower().lstrip(".")


def find_subtitle_file(video_path: PathLike) -> Optional[Path]:
    """
    Find a subtitle file sharing the video's base name.

    Extensions are tried in the order srt, ass, ssa, vtt; the first existing
    file wins.
    """
    video_path = Path(video_path)
    for ext in config.SUBTITLE_EXTENSIONS:
        candidate = video_path.with_suffix(f".{ext}")
        if candidate.is_file():
            logger.debug(f"Found subtitle file {candidate}")
            return candidate

    logger.info(f"No subtitle file found for {video_path.name}")
    return None


def read_subtitle_file(path: PathLike) -> str:
    """
    Read subtitle text in whatever encoding it was saved with.

    UTF-16 with a BOM and UTF-8 (with or without BOM) are decoded directly.
    Anything else goes through chardet; detected encodings are widened to
    their supersets (GB2312 -> GB18030, Latin-1 -> cp1252). If detection fails
    the text is decoded as cp1252 with replacement characters.

    Raises:
        OSError: If the file cannot be read
    """
    raw = Path(path).read_bytes()
    if raw.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return raw.decode("utf-16")

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass

    detection = chardet.detect(raw)
    detected = detection.get("encoding")
    logger.debug(f"Detected {detected} for {path} (confidence {detection.get('confidence')})")

    if detected:
        encoding = ENCODING_SUPERSETS.get(detected.lower(), detected)
        try:
            return raw.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            logger.warning(f"Detected encoding {encoding} failed for {path}: {e}")

    logger.warning(f"Falling back to {config.FALLBACK_ENCODING} with replacements for {path}")
    return raw.decode(config.FALLBACK_ENCODING, errors="replace")
