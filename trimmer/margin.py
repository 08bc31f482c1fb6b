"""
Margin expansion around speech.

Every speech segment protects up to N neighbouring segments on each side
from being trimmed. Neighbours are looked up in the input only and written
to a separate flag list, so a protected segment never protects its own
neighbours in turn.
"""

import dataclasses
from typing import Sequence, Tuple

from application.dto.trim_dto import Segment, TrimConfig, WaveformData
from trimmer.analyzer import DEFAULT_RESOLUTION_MS
from trimmer.classifier import calculate_silence_segments, segment_count


def apply_margin(
    segments: Sequence[Segment],
    margin_seconds: float,
    resolution_ms: float = DEFAULT_RESOLUTION_MS,
) -> Tuple[Segment, ...]:
    """Return a copy of *segments* with silence next to speech cleared."""
    margin_segments = segment_count(margin_seconds, resolution_ms)
    count = len(segments)
    flags = [s.is_silence for s in segments]

    if margin_segments > 0:
        for i, segment in enumerate(segments):
            if segment.is_silence:
                continue
            for j in range(max(0, i - margin_segments), i):
                flags[j] = False
            for j in range(i + 1, min(count, i + margin_segments + 1)):
                flags[j] = False

    return tuple(
        segment if segment.is_silence == flag else dataclasses.replace(segment, is_silence=flag)
        for segment, flag in zip(segments, flags)
    )


def calculate_trim_ranges(
    waveform: WaveformData,
    config: TrimConfig,
) -> Tuple[Segment, ...]:
    """Classify *waveform* and protect speech boundaries with config.silence_margin."""
    classified = calculate_silence_segments(waveform, config)
    return apply_margin(classified, config.silence_margin, waveform.resolution)
