"""
Trim rendering: splice the kept ranges of a recording into a new buffer,
encode it, and summarize what was removed.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from application.dto.trim_dto import (
    DecodedAudio,
    KeepRange,
    Segment,
    TrimResult,
    TrimStats,
)
from application.ports.audio_decoder_port import IAudioDecoder
from application.ports.audio_encoder_port import IAudioEncoder
from application.ports.audio_trimmer_port import IAudioTrimmer

logger = logging.getLogger(__name__)

# Segments whose boundaries differ by less than this are treated as touching
CONTIGUITY_EPSILON = 0.001
DEFAULT_BITRATE_KBPS = 128


def build_keep_ranges(
    segments: Sequence[Segment],
    epsilon: float = CONTIGUITY_EPSILON,
) -> Tuple[KeepRange, ...]:
    """Merge consecutive non-silence segments into contiguous ranges."""
    ranges: List[KeepRange] = []
    current: Optional[KeepRange] = None

    for segment in segments:
        if segment.is_silence:
            if current is not None:
                ranges.append(current)
                current = None
            continue
        if current is not None and current.end >= segment.start_time - epsilon:
            current = KeepRange(start=current.start, end=segment.end_time)
        else:
            if current is not None:
                ranges.append(current)
            current = KeepRange(start=segment.start_time, end=segment.end_time)

    if current is not None:
        ranges.append(current)
    return tuple(ranges)


def count_silence_runs(segments: Sequence[Segment]) -> int:
    """Number of maximal runs of consecutive silence segments."""
    runs = 0
    in_silence = False
    for segment in segments:
        if segment.is_silence and not in_silence:
            runs += 1
        in_silence = segment.is_silence
    return runs


def calculate_trim_stats(
    segments: Sequence[Segment],
    original_duration: float,
) -> TrimStats:
    """Durations and silence-run count for trimming *segments*."""
    trimmed_duration = sum(s.duration for s in segments if not s.is_silence)
    removed_duration = original_duration - trimmed_duration
    removed_percentage = (
        (removed_duration / original_duration) * 100.0
        if original_duration > 0
        else 0.0
    )
    return TrimStats(
        trimmed_duration=trimmed_duration,
        removed_duration=removed_duration,
        removed_percentage=removed_percentage,
        removed_segments=count_silence_runs(segments),
    )


def render_trimmed(
    decoded: DecodedAudio,
    segments: Sequence[Segment],
    encoder: IAudioEncoder,
    splicer: IAudioTrimmer,
    bitrate_kbps: int = DEFAULT_BITRATE_KBPS,
) -> TrimResult:
    """
    Render the non-silence part of *decoded* and encode it.

    Statistics are measured against the decoded buffer's own duration,
    not a caller-supplied one.
    """
    keep_ranges = build_keep_ranges(segments)
    trimmed = splicer.trim(decoded.samples, decoded.sample_rate, keep_ranges)
    encoded: bytes = encoder.encode(trimmed, decoded.sample_rate, bitrate_kbps)

    original_duration = decoded.duration
    stats = calculate_trim_stats(segments, original_duration)

    logger.info(
        "Trimmed %.2fs -> %.2fs (%d silence runs, %.1f%% removed, %d bytes %s)",
        original_duration,
        stats.trimmed_duration,
        stats.removed_segments,
        stats.removed_percentage,
        len(encoded),
        encoder.format,
    )

    return TrimResult(
        original_duration=original_duration,
        trimmed_duration=stats.trimmed_duration,
        removed_duration=stats.removed_duration,
        removed_percentage=stats.removed_percentage,
        removed_segments=stats.removed_segments,
        trimmed_audio=encoded,
        format=encoder.format,
    )


def trim_audio(
    audio: bytes,
    segments: Sequence[Segment],
    decoder: IAudioDecoder,
    encoder: IAudioEncoder,
    splicer: IAudioTrimmer,
    bitrate_kbps: int = DEFAULT_BITRATE_KBPS,
) -> TrimResult:
    """Decode *audio* and render it. DecodeError / EncodeError propagate."""
    decoded = decoder.decode(audio)
    return render_trimmed(decoded, segments, encoder, splicer, bitrate_kbps)
