# infrastructure/audio/codecs/pcm.py
# Sample format helpers shared by the codec adapters.

import numpy as np


def as_frames(samples: np.ndarray) -> np.ndarray:
    """Return *samples* as a (num_frames, channels) array."""
    return samples.reshape(-1, 1) if samples.ndim == 1 else samples


def float_to_int16(samples: np.ndarray) -> np.ndarray:
    """
    Convert float samples in [-1.0, 1.0] to signed 16-bit PCM.

    Out-of-range values are clamped. Negative values scale by 0x8000 and
    positive values by 0x7FFF so both ends map exactly onto the int16 range.
    """
    clipped: np.ndarray = np.clip(samples.astype(np.float64), -1.0, 1.0)
    scaled: np.ndarray = np.where(clipped < 0, clipped * 0x8000, clipped * 0x7FFF)
    return scaled.astype(np.int16)
