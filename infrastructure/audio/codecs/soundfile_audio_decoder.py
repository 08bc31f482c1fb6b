# infrastructure/audio/codecs/soundfile_audio_decoder.py
# IAudioDecoder backed by libsndfile (wav, flac, ogg). No ffmpeg required.

import io
import logging

import numpy as np
import soundfile as sf

from application.dto.trim_dto import DecodedAudio
from application.ports.audio_decoder_port import IAudioDecoder
from trimmer.errors import DecodeError

logger = logging.getLogger(__name__)


class SoundfileAudioDecoder(IAudioDecoder):
    """Decode in-memory audio with soundfile."""

    def decode(self, raw: bytes) -> DecodedAudio:
        if not raw:
            raise DecodeError("Input audio is empty.")

        try:
            with sf.SoundFile(io.BytesIO(raw)) as audio_file:
                sample_rate: int = audio_file.samplerate
                samples: np.ndarray = audio_file.read(dtype="float32", always_2d=True)
        except (RuntimeError, ValueError, TypeError) as exc:
            # sf.LibsndfileError is a RuntimeError subclass
            logger.warning("soundfile could not decode %d bytes: %s", len(raw), exc)
            raise DecodeError(f"Could not decode audio: {exc}") from exc

        logger.debug(
            "Decoded %d frames x %d channels at %d Hz",
            samples.shape[0], samples.shape[1], sample_rate,
        )
        return DecodedAudio(samples=samples, sample_rate=sample_rate)
