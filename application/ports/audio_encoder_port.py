# application/ports/audio_encoder_port.py
# Port interface for rendering PCM back into a compressed artifact.

from abc import ABC, abstractmethod

import numpy as np


class IAudioEncoder(ABC):
    """Abstract base class for audio encoders."""

    @property
    @abstractmethod
    def format(self) -> str:
        """Container tag of the produced bytes (e.g., 'mp3', 'wav')."""
        ...

    @abstractmethod
    def encode(
        self,
        samples: np.ndarray,    # shape: (N, channels) float32
        sample_rate: int,
        bitrate_kbps: int = 128,
    ) -> bytes:
        """
        Encode PCM samples.

        Args:
            samples:      Audio as (num_frames, channels) float32 array.
            sample_rate:  Sample rate in Hz.
            bitrate_kbps: Target bitrate; ignored by lossless formats.

        Returns:
            Encoded file contents.

        Raises:
            EncodeError: If the encoder rejects the channel/rate combination
                         or fails while encoding.
        """
        ...
