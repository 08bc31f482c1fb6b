import logging
import math

from application.dto.trim_dto import WaveformData

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_DB = -40.0
NOISE_FLOOR_FRACTION = 0.2
HEADROOM_DB = 6.0
MIN_THRESHOLD_DB = -60.0
MAX_THRESHOLD_DB = -20.0


def calculate_auto_threshold(waveform: WaveformData) -> float:
    """
    Suggest a silence threshold from the recording's own noise floor.

    The quietest fifth of the finite segment levels is averaged and
    HEADROOM_DB is added on top. The result is clamped to
    [MIN_THRESHOLD_DB, MAX_THRESHOLD_DB]. Without any finite level the
    default threshold is returned.
    """
    levels = sorted(s.avg_db for s in waveform.segments if math.isfinite(s.avg_db))
    if not levels:
        return DEFAULT_THRESHOLD_DB

    lower_count = max(1, int(len(levels) * NOISE_FLOOR_FRACTION))
    noise_floor = sum(levels[:lower_count]) / lower_count
    threshold = noise_floor + HEADROOM_DB

    clamped = max(MIN_THRESHOLD_DB, min(MAX_THRESHOLD_DB, threshold))
    logger.debug(
        "Auto threshold: noise floor %.1f dB over %d segments -> %.1f dB",
        noise_floor, lower_count, clamped,
    )
    return clamped
