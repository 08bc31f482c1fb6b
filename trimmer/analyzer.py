"""
Waveform analysis: split decoded PCM into fixed-width loudness segments.

Only the first channel is measured. Stereo recordings are analyzed as if
the left channel were the whole signal; the renderer still copies every
channel when trimming.
"""

import logging
import math

import numpy as np

from application.dto.trim_dto import Segment, WaveformData
from application.ports.audio_decoder_port import IAudioDecoder
from trimmer.levels import rms_to_db

logger = logging.getLogger(__name__)

DEFAULT_RESOLUTION_MS = 200

# Reported when no segment has a finite level (empty or digitally silent input)
FALLBACK_MAX_DB = 0.0
FALLBACK_MIN_DB = -60.0


def samples_per_segment(resolution_ms: float, sample_rate: int) -> int:
    """Window length in samples for one segment (never less than 1)."""
    return max(1, int(math.floor((resolution_ms / 1000.0) * sample_rate)))


def analyze_samples(
    samples: np.ndarray,
    sample_rate: int,
    resolution_ms: float = DEFAULT_RESOLUTION_MS,
) -> WaveformData:
    """
    Measure the RMS level of consecutive windows of an in-memory buffer.

    Args:
        samples:       (num_frames,) or (num_frames, channels) float array.
        sample_rate:   Sample rate in Hz.
        resolution_ms: Segment width in milliseconds.

    Returns:
        WaveformData whose segments partition [0, duration). The last
        segment is shorter when the length is not a whole number of windows.
    """
    if resolution_ms <= 0:
        raise ValueError(f"resolution_ms must be positive. Got: {resolution_ms}.")
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive. Got: {sample_rate}.")

    channel: np.ndarray = np.asarray(samples)
    if channel.ndim > 1:
        channel = channel[:, 0]

    num_frames: int = len(channel)
    duration: float = num_frames / sample_rate

    if num_frames == 0:
        return WaveformData(
            segments=(),
            duration=0.0,
            max_db=FALLBACK_MAX_DB,
            min_db=FALLBACK_MIN_DB,
            resolution=resolution_ms,
        )

    window: int = samples_per_segment(resolution_ms, sample_rate)
    starts: np.ndarray = np.arange(0, num_frames, window)

    # Sum of squares per window in one vectorized pass
    squared: np.ndarray = np.square(channel.astype(np.float64))
    sums: np.ndarray = np.add.reduceat(squared, starts)
    counts: np.ndarray = np.minimum(starts + window, num_frames) - starts
    rms_values: np.ndarray = np.sqrt(sums / counts)

    segments = []
    max_db = float("-inf")
    min_db = float("inf")

    for start, rms in zip(starts.tolist(), rms_values.tolist()):
        avg_db = rms_to_db(rms)
        if math.isfinite(avg_db):
            max_db = max(max_db, avg_db)
            min_db = min(min_db, avg_db)
        segments.append(
            Segment(
                start_time=start / sample_rate,
                end_time=min((start + window) / sample_rate, duration),
                is_silence=False,
                avg_db=avg_db,
            )
        )

    if not math.isfinite(max_db):
        max_db = FALLBACK_MAX_DB
    if not math.isfinite(min_db):
        min_db = FALLBACK_MIN_DB

    logger.debug(
        "Analyzed %.2fs into %d segments (%.0fms, %.1f..%.1f dB)",
        duration, len(segments), resolution_ms, min_db, max_db,
    )

    return WaveformData(
        segments=tuple(segments),
        duration=duration,
        max_db=max_db,
        min_db=min_db,
        resolution=resolution_ms,
    )


def analyze_waveform(
    audio: bytes,
    decoder: IAudioDecoder,
    resolution_ms: float = DEFAULT_RESOLUTION_MS,
) -> WaveformData:
    """Decode *audio* with *decoder* and analyze it. DecodeError propagates."""
    decoded = decoder.decode(audio)
    return analyze_samples(decoded.samples, decoded.sample_rate, resolution_ms)
