# infrastructure/audio/codecs/pydub_audio_encoder.py
# IAudioEncoder for lossy formats exported through pydub/ffmpeg.

import io
import logging

import numpy as np
from pydub import AudioSegment
from pydub.exceptions import CouldntEncodeError

from application.ports.audio_encoder_port import IAudioEncoder
from infrastructure.audio.codecs.pcm import as_frames, float_to_int16
from trimmer.errors import EncodeError

logger = logging.getLogger(__name__)

# Sample rates an MPEG-1/2/2.5 layer III encoder accepts
MP3_SAMPLE_RATES: frozenset = frozenset(
    {8000, 11025, 12000, 16000, 22050, 24000, 32000, 44100, 48000}
)
MP3_MAX_CHANNELS: int = 2


class PydubAudioEncoder(IAudioEncoder):
    """
    Encode 16-bit PCM with ffmpeg through pydub.

    Args:
        format: pydub export format tag ('mp3', 'mp4', ...).
    """

    def __init__(self, format: str = "mp3") -> None:
        self._format: str = format.lower().lstrip(".")

    @property
    def format(self) -> str:
        return self._format

    def _check_supported(self, channels: int, sample_rate: int) -> None:
        if channels < 1 or sample_rate <= 0:
            raise EncodeError(
                f"Cannot open {self._format} encoder for {channels} channel(s) at {sample_rate} Hz."
            )
        if self._format != "mp3":
            return
        if channels > MP3_MAX_CHANNELS:
            raise EncodeError(
                f"MP3 supports at most {MP3_MAX_CHANNELS} channels. Got: {channels}.\n"
                f"    → Downmix to stereo or choose a wav/flac output."
            )
        if sample_rate not in MP3_SAMPLE_RATES:
            raise EncodeError(
                f"MP3 does not support a sample rate of {sample_rate} Hz.\n"
                f"    Supported: {', '.join(str(r) for r in sorted(MP3_SAMPLE_RATES))}"
            )

    def encode(
        self,
        samples: np.ndarray,
        sample_rate: int,
        bitrate_kbps: int = 128,
    ) -> bytes:
        frames: np.ndarray = as_frames(samples)
        channels: int = frames.shape[1]
        self._check_supported(channels, sample_rate)

        # C-ordered (frames, channels) int16 bytes are interleaved PCM
        pcm: bytes = np.ascontiguousarray(float_to_int16(frames)).tobytes()
        segment: AudioSegment = AudioSegment(
            data=pcm,
            sample_width=2,
            frame_rate=sample_rate,
            channels=channels,
        )

        buffer = io.BytesIO()
        try:
            segment.export(buffer, format=self._format, bitrate=f"{bitrate_kbps}k")
        except (CouldntEncodeError, OSError) as exc:
            logger.warning("ffmpeg could not encode %s: %s", self._format, exc)
            raise EncodeError(f"Could not encode {self._format}: {exc}") from exc

        return buffer.getvalue()
