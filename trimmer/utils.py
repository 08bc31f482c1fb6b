import os

# Supported formats
SUPPORTED_INPUT_FORMATS: set[str] = {".mp3", ".wav", ".flac", ".ogg", ".aac", ".m4a", ".webm"}
SUPPORTED_OUTPUT_FORMATS: set[str] = {".mp3", ".wav", ".flac", ".ogg", ".m4a"}

# Inputs libsndfile reads directly; everything else goes through ffmpeg
SOUNDFILE_INPUT_FORMATS: set[str] = {".wav", ".flac", ".ogg"}
SOUNDFILE_OUTPUT_FORMATS: set[str] = {".wav", ".flac", ".ogg"}

# Deterministic mapping from extension to encoder format tag
FORMAT_EXPORT_MAP: dict[str, str] = {
    ".mp3": "mp3",
    ".wav": "wav",
    ".flac": "flac",
    ".ogg": "ogg",
    ".m4a": "mp4",
}

ALLOWED_BITRATES: tuple[int, ...] = (32, 48, 64, 96, 128, 160, 192, 256, 320)

# (min, max) for every tunable parameter
PARAM_RANGES: dict[str, tuple[float, float]] = {
    "threshold_db": (-100.0, 0.0),
    "min_silence_duration": (0.0, 30.0),
    "silence_margin": (0.0, 10.0),
    "resolution_ms": (10.0, 2000.0),
}


def _env_float(name: str, default: float) -> float:
    """Read a float override from the environment, ignoring malformed values."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# Default parameters (overridable per environment)
DEFAULT_PARAMS: dict[str, float] = {
    "threshold": _env_float("TRIMMER_THRESHOLD_DB", -40.0),
    "min_silence": _env_float("TRIMMER_MIN_SILENCE", 0.6),
    "margin": _env_float("TRIMMER_MARGIN", 0.2),
    "resolution": _env_float("TRIMMER_RESOLUTION_MS", 200.0),
    "bitrate": _env_float("TRIMMER_BITRATE_KBPS", 128.0),
}


# Validation helpers
def validate_input_file(path: str) -> None:
    """Raise FileNotFoundError / ValueError if the input path is invalid."""
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"Input file not found: '{path}'.\n" f"    → Check the path and try again."
        )
    if not os.path.isfile(path):
        raise ValueError(
            f"Input path is not a file: '{path}'.\n"
            f"    → Provide a path to an audio file, not a directory."
        )

    ext: str = os.path.splitext(path)[1].lower()
    if ext not in SUPPORTED_INPUT_FORMATS:
        raise ValueError(
            f"Unsupported input format: '{ext}'.\n"
            f"    Supported: {', '.join(sorted(SUPPORTED_INPUT_FORMATS))}\n"
            f"    → Example: python main.py memo.webm memo_trimmed.mp3"
        )


def validate_output_path(path: str) -> None:
    """Raise ValueError / FileNotFoundError if the output path is invalid."""
    ext: str = os.path.splitext(path)[1].lower()
    if ext not in SUPPORTED_OUTPUT_FORMATS:
        raise ValueError(
            f"Unsupported output format: '{ext}'.\n"
            f"    Supported: {', '.join(sorted(SUPPORTED_OUTPUT_FORMATS))}\n"
            f"    → Example: python main.py memo.wav memo_trimmed.mp3"
        )

    output_dir: str = os.path.dirname(os.path.abspath(path))
    if not os.path.exists(output_dir):
        raise FileNotFoundError(
            f"Output directory does not exist: '{output_dir}'.\n"
            f"    → Create the directory first, or choose an existing path."
        )


def validate_param_range(
    value: float, name: str, min_val: float, max_val: float
) -> None:
    """Raise ValueError if a float parameter is out of its valid range."""
    if not (min_val <= value <= max_val):
        raise ValueError(
            f"Parameter '{name}' must be between {min_val} and {max_val}. Got: {value}.\n"
            f"    → Adjust the value to be within the valid range."
        )


def validate_bitrate(bitrate_kbps: int) -> None:
    if bitrate_kbps not in ALLOWED_BITRATES:
        raise ValueError(
            f"Bitrate {bitrate_kbps} kbps is not supported.\n"
            f"    Supported: {', '.join(str(b) for b in ALLOWED_BITRATES)}"
        )


# Path helpers

def get_output_path(
    input_path: str, suffix: str = "_trimmed", output_ext: str = ".mp3"
) -> str:
    """
    Auto-generate an output path from an input path.

    Example: memo.webm, suffix='_trimmed', output_ext='.mp3'  →  memo_trimmed.mp3
    """
    base: str
    base, _ = os.path.splitext(input_path)
    return f"{base}{suffix}{output_ext}"


def get_export_format(path: str) -> str:
    """Return the encoder format tag for the given output path."""
    ext: str = os.path.splitext(path)[1].lower()
    return FORMAT_EXPORT_MAP.get(ext, "wav")


# Duration formatting

def _hms(seconds: float) -> str:
    total: int = int(max(0.0, seconds))
    hours: int = total // 3600
    minutes: int = (total % 3600) // 60
    secs: int = total % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_time(seconds: float) -> str:
    """Format a duration as HH:MM:SS (fractions are truncated)."""
    return _hms(seconds)


def format_timestamp(seconds: float) -> str:
    """Format a position as [HH:MM:SS]."""
    return f"[{_hms(seconds)}]"
