# application/dto/trim_dto.py
# Value objects passed between the analysis, classification and render stages.
# All of them are frozen: every stage returns new instances.

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class Segment:
    """Fixed-width time slice with a loudness measurement and silence flag."""
    start_time: float
    end_time: float
    is_silence: bool = False
    avg_db: float = float("-inf")

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class WaveformData:
    """One analysis pass over a source recording. Never mutated."""
    segments: Tuple[Segment, ...] = ()
    duration: float = 0.0
    max_db: float = 0.0
    min_db: float = -60.0
    resolution: int = 200        # ms per segment


@dataclass(frozen=True)
class TrimConfig:
    """Silence detection settings."""
    threshold_db: float = -40.0
    min_silence_duration: float = 0.6   # seconds
    silence_margin: float = 0.2         # seconds


DEFAULT_TRIM_CONFIG: TrimConfig = TrimConfig()


@dataclass(frozen=True)
class KeepRange:
    """Contiguous interval of the source that survives trimming."""
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class TrimStats:
    trimmed_duration: float
    removed_duration: float
    removed_percentage: float
    removed_segments: int


@dataclass(frozen=True)
class TrimResult:
    """Summary of a render plus the encoded artifact."""
    original_duration: float
    trimmed_duration: float
    removed_duration: float
    removed_percentage: float
    removed_segments: int
    trimmed_audio: bytes = field(repr=False)
    format: str = "mp3"


@dataclass(frozen=True, eq=False)
class DecodedAudio:
    """
    PCM returned by a decoder.

    samples is a (num_frames, channels) float32 array in [-1.0, 1.0].
    """
    samples: np.ndarray = field(repr=False)
    sample_rate: int

    @property
    def channels(self) -> int:
        return 1 if self.samples.ndim == 1 else int(self.samples.shape[1])

    @property
    def length(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.length / self.sample_rate

    def channel(self, index: int) -> np.ndarray:
        if self.samples.ndim == 1:
            if index != 0:
                raise IndexError(f"Channel {index} out of range for mono audio.")
            return self.samples
        return self.samples[:, index]
