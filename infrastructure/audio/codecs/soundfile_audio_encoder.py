# infrastructure/audio/codecs/soundfile_audio_encoder.py
# IAudioEncoder backed by libsndfile (wav, flac, ogg/vorbis).

import io
import logging

import numpy as np
import soundfile as sf

from application.ports.audio_encoder_port import IAudioEncoder
from infrastructure.audio.codecs.pcm import as_frames
from trimmer.errors import EncodeError

logger = logging.getLogger(__name__)

# Frames handed to libsndfile per write call (one MPEG audio frame)
FRAME_BLOCK: int = 1152

SUBTYPES: dict[str, str] = {
    "wav":  "PCM_16",
    "flac": "PCM_16",
    "ogg":  "VORBIS",
}


class SoundfileAudioEncoder(IAudioEncoder):
    """Encode PCM block by block into an in-memory soundfile container."""

    def __init__(self, format: str = "wav") -> None:
        fmt = format.lower().lstrip(".")
        if fmt not in SUBTYPES:
            raise ValueError(
                f"Unsupported soundfile format: '{format}'.\n"
                f"    Supported: {', '.join(sorted(SUBTYPES))}"
            )
        self._format: str = fmt

    @property
    def format(self) -> str:
        return self._format

    def encode(
        self,
        samples: np.ndarray,
        sample_rate: int,
        bitrate_kbps: int = 128,
    ) -> bytes:
        frames: np.ndarray = as_frames(samples)
        channels: int = frames.shape[1]
        if channels < 1 or sample_rate <= 0:
            raise EncodeError(
                f"Cannot open {self._format} encoder for {channels} channel(s) at {sample_rate} Hz."
            )

        buffer = io.BytesIO()
        try:
            with sf.SoundFile(
                buffer,
                mode="w",
                samplerate=sample_rate,
                channels=channels,
                format=self._format.upper(),
                subtype=SUBTYPES[self._format],
            ) as out:
                for start in range(0, len(frames), FRAME_BLOCK):
                    out.write(frames[start:start + FRAME_BLOCK])
                # Closing the file flushes the container header
        except (RuntimeError, ValueError, TypeError) as exc:
            logger.warning("soundfile could not encode %s: %s", self._format, exc)
            raise EncodeError(f"Could not encode {self._format}: {exc}") from exc

        return buffer.getvalue()
