class TrimmerError(Exception):
    """Base class for failures surfaced by the trimming engine."""


class DecodeError(TrimmerError):
    """Input audio is unreadable or corrupt."""


class EncodeError(TrimmerError):
    """The trimmed buffer could not be encoded."""
