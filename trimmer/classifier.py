"""
Silence classification with a minimum-duration filter.

A segment is raw silence when its level is at or below the threshold.
Runs of raw silence shorter than the configured minimum are pauses inside
speech and are reverted to speech, so only sustained silence is trimmed.
"""

import dataclasses
import logging
import math
from typing import List, Tuple

from application.dto.trim_dto import Segment, TrimConfig, WaveformData

logger = logging.getLogger(__name__)


def segment_count(seconds: float, resolution_ms: float) -> int:
    """
    Number of segments needed to cover *seconds* at *resolution_ms*.

    The quotient is rounded to 9 decimals before ceil so that float noise
    (1.1 / 0.1 == 11.000000000000002) does not add a whole segment.
    """
    if resolution_ms <= 0:
        raise ValueError(f"resolution_ms must be positive. Got: {resolution_ms}.")
    if seconds <= 0:
        return 0
    return int(math.ceil(round(seconds / (resolution_ms / 1000.0), 9)))


def is_raw_silence(segment: Segment, threshold_db: float) -> bool:
    return segment.avg_db == float("-inf") or segment.avg_db <= threshold_db


def calculate_silence_segments(
    waveform: WaveformData,
    config: TrimConfig,
) -> Tuple[Segment, ...]:
    """
    Recompute is_silence for every segment of *waveform*.

    Always derived from the waveform's own segments, so reclassifying with a
    new threshold never sees the result of an earlier pass.
    """
    min_silence_segments = segment_count(config.min_silence_duration, waveform.resolution)
    flags: List[bool] = [is_raw_silence(s, config.threshold_db) for s in waveform.segments]

    run_start = None
    # One index past the end closes a trailing run
    for i in range(len(flags) + 1):
        silent = i < len(flags) and flags[i]
        if silent and run_start is None:
            run_start = i
        elif not silent and run_start is not None:
            if i - run_start < min_silence_segments:
                flags[run_start:i] = [False] * (i - run_start)
            run_start = None

    logger.debug(
        "Classified %d/%d segments as silence (threshold %.1f dB, min run %d)",
        sum(flags), len(flags), config.threshold_db, min_silence_segments,
    )

    return tuple(
        dataclasses.replace(segment, is_silence=flag)
        for segment, flag in zip(waveform.segments, flags)
    )
