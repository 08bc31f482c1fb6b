# application/ports/audio_trimmer_port.py
# Port interface for splicing kept ranges out of a PCM buffer.

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from application.dto.trim_dto import KeepRange


class IAudioTrimmer(ABC):
    """Abstract base class for audio trimming."""

    @abstractmethod
    def trim(
        self,
        samples: np.ndarray,
        sample_rate: int,
        keep_ranges: Sequence[KeepRange],
    ) -> np.ndarray:
        """
        Concatenate the given time ranges of the source into a new buffer.

        Args:
            samples:     Audio as (num_frames, channels) float32 array.
            sample_rate: Sample rate in Hz.
            keep_ranges: Ordered, non-overlapping ranges in seconds.

        Returns:
            New (num_frames, channels) array; the source is not modified.
        """
        ...
