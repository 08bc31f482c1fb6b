import math


def rms_to_db(rms: float) -> float:
    """Convert an RMS amplitude to decibels. Non-positive input is -inf."""
    if rms <= 0:
        return float("-inf")
    return 20.0 * math.log10(rms)


def db_to_rms(db: float) -> float:
    """
    Convert decibels back to an RMS amplitude.

    Inverse of rms_to_db for finite values only: -inf maps to 0.0, but
    rms_to_db never produces -inf from a positive amplitude.
    """
    return math.pow(10.0, db / 20.0)
