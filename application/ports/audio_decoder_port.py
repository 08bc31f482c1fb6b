# application/ports/audio_decoder_port.py
# Port interface for turning encoded audio bytes into PCM.
# Domain layer: must not import infrastructure or adapter code.

from abc import ABC, abstractmethod

from application.dto.trim_dto import DecodedAudio


class IAudioDecoder(ABC):
    """Abstract base class for audio decoders."""

    @abstractmethod
    def decode(self, raw: bytes) -> DecodedAudio:
        """
        Decode an encoded audio file held in memory.

        Args:
            raw: Complete file contents (wav, mp3, webm, ...).

        Returns:
            DecodedAudio with (num_frames, channels) float32 samples.

        Raises:
            DecodeError: If the bytes cannot be decoded as audio.
        """
        ...
