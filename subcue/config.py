"""Configuration for the subcue subtitle server"""

import os

# Server configuration
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = int(os.getenv("SUBCUE_PORT", "8769"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "info")

# WebSocket configuration
WS_MAX_CLIENTS = 100

# Subtitle formats, in the order adjacent files are searched
SUBTITLE_EXTENSIONS = ("srt", "ass", "ssa", "vtt")
SUPPORTED_FORMATS = frozenset(SUBTITLE_EXTENSIONS)
VIDEO_EXTENSIONS = ("mp4", "avi", "mkv", "mov", "wmv", "flv", "webm", "m4v", "3gp")

# Used when charset detection fails on a non-UTF-8 subtitle file
FALLBACK_ENCODING = "cp1252"

# Drop cues with malformed time codes instead of zero-substituting them
STRICT_TIMECODES = os.getenv("SUBCUE_STRICT_TIMECODES", "0").lower() in ("1", "true", "yes")

# Session management
SESSION_TIMEOUT_SECONDS = int(os.getenv("SESSION_TIMEOUT_SECONDS", "300"))  # 5 min
SESSION_CLEANUP_INTERVAL = 60  # Check for stale sessions every 60s
