# infrastructure/audio/codecs/pydub_audio_decoder.py
# IAudioDecoder for anything ffmpeg can read (mp3, m4a, aac, webm, ...).

import io
import logging
import os
import tempfile
from typing import Optional

import numpy as np
import soundfile as sf
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from application.dto.trim_dto import DecodedAudio
from application.ports.audio_decoder_port import IAudioDecoder
from trimmer.errors import DecodeError

logger = logging.getLogger(__name__)


class PydubAudioDecoder(IAudioDecoder):
    """
    Decode through pydub/ffmpeg, then read the PCM back with soundfile.

    Args:
        format: Optional container hint passed to ffmpeg (e.g., 'mp3', 'webm').
                None lets ffmpeg probe the input.
    """

    def __init__(self, format: Optional[str] = None) -> None:
        self._format: Optional[str] = format.lower().lstrip(".") if format else None

    def decode(self, raw: bytes) -> DecodedAudio:
        if not raw:
            raise DecodeError("Input audio is empty.")

        try:
            segment: AudioSegment = AudioSegment.from_file(io.BytesIO(raw), format=self._format)
        except (CouldntDecodeError, OSError, IndexError) as exc:
            logger.warning("ffmpeg could not decode %d bytes: %s", len(raw), exc)
            raise DecodeError(f"Could not decode audio: {exc}") from exc

        # Export to a temp WAV so soundfile can read it as numpy
        tmp_fd: int
        tmp_path: str
        tmp_fd, tmp_path = tempfile.mkstemp(suffix=".wav")
        os.close(tmp_fd)
        try:
            segment.export(tmp_path, format="wav")
            samples: np.ndarray
            sample_rate: int
            samples, sample_rate = sf.read(tmp_path, dtype="float32", always_2d=True)
        except (RuntimeError, OSError) as exc:
            raise DecodeError(f"Could not convert decoded audio to PCM: {exc}") from exc
        finally:
            os.unlink(tmp_path)

        logger.debug(
            "Decoded %d frames x %d channels at %d Hz via ffmpeg",
            samples.shape[0], samples.shape[1], sample_rate,
        )
        return DecodedAudio(samples=samples, sample_rate=sample_rate)
