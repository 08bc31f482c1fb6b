import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from application.dto.trim_dto import (
    DEFAULT_TRIM_CONFIG,
    Segment,
    TrimConfig,
    TrimResult,
    TrimStats,
    WaveformData,
)
from application.ports.audio_decoder_port import IAudioDecoder
from application.ports.audio_encoder_port import IAudioEncoder
from application.ports.audio_trimmer_port import IAudioTrimmer
from infrastructure.audio.codecs import (
    PydubAudioDecoder,
    PydubAudioEncoder,
    SoundfileAudioDecoder,
    SoundfileAudioEncoder,
)
from infrastructure.audio.numpy_audio_trimmer import NumpyAudioTrimmer
from trimmer import analyzer, classifier, margin, renderer, threshold
from trimmer.utils import (
    DEFAULT_PARAMS,
    PARAM_RANGES,
    SOUNDFILE_INPUT_FORMATS,
    SOUNDFILE_OUTPUT_FORMATS,
    get_export_format,
    validate_bitrate,
    validate_input_file,
    validate_output_path,
    validate_param_range,
)

logger = logging.getLogger(__name__)


class SilenceTrimmer:
    """
    Entry point for callers: analysis, classification and rendering with
    the decode/encode collaborators injected.

    Args:
        decoder:       IAudioDecoder for analyze_waveform / trim_audio.
        encoder:       IAudioEncoder for the trimmed artifact.
        splicer:       IAudioTrimmer that copies kept ranges.
        resolution_ms: Segment width used for analysis and margin math.
        bitrate_kbps:  Bitrate handed to the encoder.
    """

    def __init__(
        self,
        decoder: Optional[IAudioDecoder] = None,
        encoder: Optional[IAudioEncoder] = None,
        splicer: Optional[IAudioTrimmer] = None,
        resolution_ms: float = analyzer.DEFAULT_RESOLUTION_MS,
        bitrate_kbps: int = renderer.DEFAULT_BITRATE_KBPS,
    ) -> None:
        if resolution_ms <= 0:
            raise ValueError(f"resolution_ms must be positive. Got: {resolution_ms}.")
        self.decoder: IAudioDecoder = decoder or PydubAudioDecoder()
        self.encoder: IAudioEncoder = encoder or PydubAudioEncoder("mp3")
        self.splicer: IAudioTrimmer = splicer or NumpyAudioTrimmer()
        self.resolution_ms: float = resolution_ms
        self.bitrate_kbps: int = bitrate_kbps

    def analyze_waveform(self, audio: bytes) -> WaveformData:
        return analyzer.analyze_waveform(audio, self.decoder, self.resolution_ms)

    def calculate_auto_threshold(self, waveform: WaveformData) -> float:
        return threshold.calculate_auto_threshold(waveform)

    def calculate_silence_segments(
        self, waveform: WaveformData, config: TrimConfig = DEFAULT_TRIM_CONFIG
    ) -> Tuple[Segment, ...]:
        return classifier.calculate_silence_segments(waveform, config)

    def apply_margin(
        self, segments: Sequence[Segment], margin_seconds: float
    ) -> Tuple[Segment, ...]:
        return margin.apply_margin(segments, margin_seconds, self.resolution_ms)

    def calculate_trim_ranges(
        self, waveform: WaveformData, config: TrimConfig = DEFAULT_TRIM_CONFIG
    ) -> Tuple[Segment, ...]:
        return margin.calculate_trim_ranges(waveform, config)

    def calculate_trim_stats(
        self, segments: Sequence[Segment], original_duration: float
    ) -> TrimStats:
        return renderer.calculate_trim_stats(segments, original_duration)

    def trim_audio(self, audio: bytes, segments: Sequence[Segment]) -> TrimResult:
        return renderer.trim_audio(
            audio, segments, self.decoder, self.encoder, self.splicer, self.bitrate_kbps
        )


# ── Codec selection by file extension ───────────────────────────

def decoder_for(path: str) -> IAudioDecoder:
    """Pick a decoder for *path*; libsndfile formats skip ffmpeg."""
    ext: str = os.path.splitext(path)[1].lower()
    if ext in SOUNDFILE_INPUT_FORMATS:
        return SoundfileAudioDecoder()
    return PydubAudioDecoder(format=ext.lstrip(".") or None)


def encoder_for(path: str) -> IAudioEncoder:
    """Pick an encoder for the output extension of *path*."""
    ext: str = os.path.splitext(path)[1].lower()
    if ext in SOUNDFILE_OUTPUT_FORMATS:
        return SoundfileAudioEncoder(ext.lstrip("."))
    return PydubAudioEncoder(get_export_format(path))


# ── File pipeline ───────────────────────────────────────────────

@dataclass(frozen=True)
class AnalysisReport:
    """Outcome of analyze_file: what trimming would do, without rendering."""
    waveform: WaveformData
    threshold_db: float
    segments: Tuple[Segment, ...]
    stats: TrimStats


def _validate_trim_params(
    threshold_db: Optional[float],
    min_silence_duration: float,
    silence_margin: float,
    resolution_ms: float,
) -> None:
    if threshold_db is not None:
        validate_param_range(threshold_db, "threshold_db", *PARAM_RANGES["threshold_db"])
    validate_param_range(
        min_silence_duration, "min_silence_duration", *PARAM_RANGES["min_silence_duration"]
    )
    validate_param_range(silence_margin, "silence_margin", *PARAM_RANGES["silence_margin"])
    validate_param_range(resolution_ms, "resolution_ms", *PARAM_RANGES["resolution_ms"])


def analyze_file(
    input_path: str,
    threshold_db: Optional[float] = None,
    min_silence_duration: float = DEFAULT_PARAMS["min_silence"],
    silence_margin: float = DEFAULT_PARAMS["margin"],
    resolution_ms: float = DEFAULT_PARAMS["resolution"],
) -> AnalysisReport:
    """
    Analyze a file and compute its trim ranges and statistics.

    threshold_db=None derives the threshold from the recording itself.
    """
    validate_input_file(input_path)
    _validate_trim_params(threshold_db, min_silence_duration, silence_margin, resolution_ms)

    with open(input_path, "rb") as f:
        raw: bytes = f.read()

    waveform = analyzer.analyze_waveform(raw, decoder_for(input_path), resolution_ms)
    return _plan(waveform, threshold_db, min_silence_duration, silence_margin)


def _plan(
    waveform: WaveformData,
    threshold_db: Optional[float],
    min_silence_duration: float,
    silence_margin: float,
) -> AnalysisReport:
    if threshold_db is None:
        threshold_db = threshold.calculate_auto_threshold(waveform)
        logger.info("Using auto threshold %.1f dB", threshold_db)

    config = TrimConfig(
        threshold_db=threshold_db,
        min_silence_duration=min_silence_duration,
        silence_margin=silence_margin,
    )
    segments = margin.calculate_trim_ranges(waveform, config)
    stats = renderer.calculate_trim_stats(segments, waveform.duration)
    return AnalysisReport(
        waveform=waveform, threshold_db=threshold_db, segments=segments, stats=stats
    )


def trim_file(
    input_path  : str,
    output_path : str,
    threshold_db: Optional[float] = None,
    min_silence_duration: float = DEFAULT_PARAMS["min_silence"],
    silence_margin: float = DEFAULT_PARAMS["margin"],
    resolution_ms: float = DEFAULT_PARAMS["resolution"],
    bitrate_kbps: int = int(DEFAULT_PARAMS["bitrate"]),
    progress_callback: Optional[Callable[[int, int, str], None]] = None,
) -> TrimResult:
    """
    Full pipeline: load audio → analyze → classify → render → save.

    Args:
        input_path:           Source audio file (wav/flac/ogg/mp3/m4a/aac/webm).
        output_path:          Destination file (.mp3/.wav/.flac/.ogg/.m4a).
        threshold_db:         Silence threshold in dB; None = auto threshold.
        min_silence_duration: Shortest pause (s) that is trimmed.
        silence_margin:       Audio (s) kept on both sides of speech.
        resolution_ms:        Analysis segment width in milliseconds.
        bitrate_kbps:         Bitrate for lossy outputs.
        progress_callback:    Optional callback (step_idx, total_steps, step_name).

    Returns:
        TrimResult; its trimmed_audio has also been written to output_path.
    """
    # ── Validate inputs ──────────────────────────────────────────
    validate_input_file(input_path)
    validate_output_path(output_path)
    _validate_trim_params(threshold_db, min_silence_duration, silence_margin, resolution_ms)
    validate_bitrate(bitrate_kbps)

    steps = [
        "Loading audio file",
        "Analyzing waveform",
        "Detecting silence",
        "Rendering trimmed audio",
        "Saving output",
    ]
    total_steps = len(steps)

    def _report(step_idx: int) -> None:
        if progress_callback:
            progress_callback(step_idx, total_steps, steps[step_idx])

    start_time: float = time.time()

    # [1] Load audio
    _report(0)
    with open(input_path, "rb") as f:
        raw: bytes = f.read()
    decoded = decoder_for(input_path).decode(raw)

    # [2] Analyze
    _report(1)
    waveform = analyzer.analyze_samples(decoded.samples, decoded.sample_rate, resolution_ms)

    # [3] Classify + margins
    _report(2)
    plan = _plan(waveform, threshold_db, min_silence_duration, silence_margin)

    # [4] Render
    _report(3)
    result = renderer.render_trimmed(
        decoded, plan.segments, encoder_for(output_path), NumpyAudioTrimmer(), bitrate_kbps
    )

    # [5] Save
    _report(4)
    with open(output_path, "wb") as f:
        f.write(result.trimmed_audio)

    logger.info(
        "Wrote %s (%d bytes) in %.1fs", output_path, len(result.trimmed_audio),
        time.time() - start_time,
    )
    return result
