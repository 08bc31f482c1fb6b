# infrastructure/audio/numpy_audio_trimmer.py
# Implementation of IAudioTrimmer using NumPy array slicing.

import math
from typing import Sequence

import numpy as np
from application.dto.trim_dto import KeepRange
from application.ports.audio_trimmer_port import IAudioTrimmer


class NumpyAudioTrimmer(IAudioTrimmer):
    """Splice kept ranges with direct NumPy slicing (hard cuts, no crossfade)."""

    def trim(
        self,
        samples: np.ndarray,
        sample_rate: int,
        keep_ranges: Sequence[KeepRange],
    ) -> np.ndarray:
        source: np.ndarray = samples if samples.ndim == 2 else samples.reshape(-1, 1)
        num_frames: int = len(source)

        total_duration: float = sum(r.duration for r in keep_ranges)
        # Rounded first so float noise cannot add a trailing frame
        out_frames: int = int(math.ceil(round(total_duration * sample_rate, 6)))
        result: np.ndarray = np.zeros((out_frames, source.shape[1]), dtype=source.dtype)

        write_offset: int = 0
        for keep in keep_ranges:
            start_frame: int = max(0, int(math.floor(round(keep.start * sample_rate, 6))))
            end_frame: int = min(int(math.ceil(round(keep.end * sample_rate, 6))), num_frames)
            length: int = end_frame - start_frame
            if length <= 0:
                continue

            # Never write past the allocated buffer
            writable: int = min(length, out_frames - write_offset)
            if writable > 0:
                result[write_offset:write_offset + writable] = (
                    source[start_frame:start_frame + writable]
                )
            write_offset += length

        return result if samples.ndim == 2 else result[:, 0]
