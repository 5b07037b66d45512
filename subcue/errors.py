"""Error taxonomy for subtitle loading"""


class SubtitleError(Exception):
    """Base class for all subtitle loading errors"""

    pass


class EmptyInput(SubtitleError):
    """Raised when no subtitle text was supplied"""

    pass


class UnsupportedFormat(SubtitleError):
    """Raised when a format name is outside the supported set"""

    def __init__(self, fmt):
        self.fmt = fmt
        super().__init__(f"Unsupported subtitle format: {fmt!r}")


class MalformedTimeCode(SubtitleError, ValueError):
    """Raised when a single timestamp does not match its format's pattern"""

    def __init__(self, text: str, fmt: str, reason: str = ""):
        self.text = text
        self.fmt = fmt
        message = f"Invalid {fmt} timestamp: '{text}'"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class NoCuesFound(SubtitleError):
    """Raised when parsing succeeded but produced zero usable cues"""

    pass
