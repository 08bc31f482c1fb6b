import io
import os
import sys

import numpy as np
import pytest
import soundfile as sf

from application.dto.trim_dto import TrimConfig
from infrastructure.audio.codecs import (
    PydubAudioDecoder,
    PydubAudioEncoder,
    SoundfileAudioDecoder,
    SoundfileAudioEncoder,
)
from infrastructure.audio.codecs.pcm import float_to_int16
from main import build_parser, main
from trimmer import utils
from trimmer.core import SilenceTrimmer, analyze_file, decoder_for, encoder_for, trim_file
from trimmer.errors import DecodeError, EncodeError, TrimmerError
from trimmer.printer import OutputPrinter
from trimmer.utils import (
    FORMAT_EXPORT_MAP,
    SUPPORTED_INPUT_FORMATS,
    SUPPORTED_OUTPUT_FORMATS,
    format_time,
    format_timestamp,
    get_export_format,
    get_output_path,
    validate_bitrate,
    validate_input_file,
    validate_output_path,
    validate_param_range,
)

# Test Constants
SAMPLE_RATE: int = 8000


# Helpers


def make_speech_like(sr: int = SAMPLE_RATE, channels: int = 2) -> np.ndarray:
    """1s digital silence, 1s 440 Hz tone, 1s digital silence."""
    t: np.ndarray = np.arange(sr, dtype=np.float32) / sr
    tone: np.ndarray = (0.5 * np.sin(2 * np.pi * 440 * t)).astype(np.float32)
    silence: np.ndarray = np.zeros(sr, dtype=np.float32)
    mono: np.ndarray = np.concatenate([silence, tone, silence])
    return np.column_stack([mono] * channels)


def make_wav_bytes(samples: np.ndarray, sr: int = SAMPLE_RATE) -> bytes:
    buffer = io.BytesIO()
    sf.write(buffer, samples, sr, format="WAV", subtype="PCM_16")
    return buffer.getvalue()


def make_test_wav(path: str, sr: int = SAMPLE_RATE) -> None:
    """Write the speech-like stereo fixture to *path*."""
    sf.write(path, make_speech_like(sr), sr, subtype="PCM_16")


def trimmer_config(threshold_db: float) -> TrimConfig:
    return TrimConfig(threshold_db=threshold_db, min_silence_duration=0.6, silence_margin=0.2)


class TestFloatToInt16:
    """Tests for PCM conversion."""

    def test_full_scale_and_clamping(self) -> None:
        samples = np.array([-2.0, -1.0, 0.0, 1.0, 2.0], dtype=np.float32)
        np.testing.assert_array_equal(
            float_to_int16(samples), np.array([-32768, -32768, 0, 32767, 32767], dtype=np.int16)
        )

    def test_shape_preserved(self) -> None:
        samples = np.zeros((10, 2), dtype=np.float32)
        assert float_to_int16(samples).shape == (10, 2)


class TestSoundfileCodecs:
    """Tests for the libsndfile decoder/encoder pair."""

    def test_decodes_wav_bytes(self) -> None:
        decoded = SoundfileAudioDecoder().decode(make_wav_bytes(make_speech_like()))
        assert decoded.sample_rate == SAMPLE_RATE
        assert decoded.channels == 2
        assert decoded.length == 3 * SAMPLE_RATE
        assert decoded.duration == pytest.approx(3.0)
        assert decoded.samples.dtype == np.float32

    def test_garbage_raises_decode_error(self) -> None:
        with pytest.raises(DecodeError):
            SoundfileAudioDecoder().decode(b"definitely not an audio file" * 10)

    def test_empty_bytes_raise_decode_error(self) -> None:
        with pytest.raises(DecodeError, match="empty"):
            SoundfileAudioDecoder().decode(b"")

    def test_encoded_wav_decodes_back(self) -> None:
        samples = make_speech_like()
        encoded = SoundfileAudioEncoder("wav").encode(samples, SAMPLE_RATE)
        decoded = SoundfileAudioDecoder().decode(encoded)
        assert decoded.length == len(samples)
        assert decoded.channels == 2
        np.testing.assert_allclose(decoded.samples, samples, atol=1e-3)

    def test_invalid_sample_rate_raises_encode_error(self) -> None:
        with pytest.raises(EncodeError):
            SoundfileAudioEncoder("wav").encode(np.zeros((10, 1), dtype=np.float32), 0)

    def test_unknown_format_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unsupported soundfile format"):
            SoundfileAudioEncoder("aiff")

    def test_format_tag(self) -> None:
        assert SoundfileAudioEncoder(".FLAC").format == "flac"


class TestPydubCodecs:
    """Tests for pydub paths that fail before ffmpeg is invoked."""

    def test_mp3_rejects_surround(self) -> None:
        with pytest.raises(EncodeError, match="at most 2 channels"):
            PydubAudioEncoder("mp3").encode(np.zeros((100, 6), dtype=np.float32), 44100)

    def test_mp3_rejects_unsupported_rate(self) -> None:
        with pytest.raises(EncodeError, match="sample rate"):
            PydubAudioEncoder("mp3").encode(np.zeros((100, 1), dtype=np.float32), 12345)

    def test_encode_error_is_trimmer_error(self) -> None:
        with pytest.raises(TrimmerError):
            PydubAudioEncoder("mp3").encode(np.zeros((100, 1), dtype=np.float32), 0)

    def test_decoder_rejects_empty_input(self) -> None:
        with pytest.raises(DecodeError):
            PydubAudioDecoder("mp3").decode(b"")

    def test_default_format_is_mp3(self) -> None:
        assert PydubAudioEncoder().format == "mp3"


class TestSilenceTrimmer:
    """End-to-end tests through the facade with injected codecs."""

    def _trimmer(self) -> SilenceTrimmer:
        return SilenceTrimmer(
            decoder=SoundfileAudioDecoder(),
            encoder=SoundfileAudioEncoder("wav"),
            resolution_ms=200,
        )

    def test_full_flow(self) -> None:
        trimmer = self._trimmer()
        audio = make_wav_bytes(make_speech_like())

        waveform = trimmer.analyze_waveform(audio)
        assert len(waveform.segments) == 15
        assert waveform.duration == pytest.approx(3.0)

        threshold_db = trimmer.calculate_auto_threshold(waveform)
        assert -60.0 <= threshold_db <= -20.0

        config = trimmer_config(threshold_db)
        segments = trimmer.calculate_trim_ranges(waveform, config)
        assert [s.is_silence for s in segments] == [True] * 4 + [False] * 7 + [True] * 4

        result = trimmer.trim_audio(audio, segments)
        assert result.format == "wav"
        assert result.original_duration == pytest.approx(3.0)
        assert result.trimmed_duration == pytest.approx(1.4)
        assert result.removed_percentage == pytest.approx(100 * 1.6 / 3.0)
        assert result.removed_segments == 2

        trimmed = SoundfileAudioDecoder().decode(result.trimmed_audio)
        assert abs(trimmed.length - 1.4 * SAMPLE_RATE) <= 2
        assert trimmed.channels == 2

    def test_margin_and_stats_methods(self) -> None:
        trimmer = self._trimmer()
        waveform = trimmer.analyze_waveform(make_wav_bytes(make_speech_like()))
        classified = trimmer.calculate_silence_segments(waveform, trimmer_config(-40.0))
        widened = trimmer.apply_margin(classified, 0.4)
        assert sum(s.is_silence for s in classified) == 10
        assert sum(s.is_silence for s in widened) == 6
        stats = trimmer.calculate_trim_stats(widened, waveform.duration)
        assert stats.trimmed_duration == pytest.approx(1.8)

    def test_corrupt_audio_raises_decode_error(self) -> None:
        with pytest.raises(DecodeError):
            self._trimmer().analyze_waveform(b"RIFF....garbage")

    def test_invalid_resolution_rejected(self) -> None:
        with pytest.raises(ValueError):
            SilenceTrimmer(resolution_ms=0)


class TestCodecSelection:
    """Tests for extension-based codec choice."""

    def test_wav_input_uses_soundfile(self) -> None:
        assert isinstance(decoder_for("memo.WAV"), SoundfileAudioDecoder)

    def test_webm_input_uses_pydub(self) -> None:
        assert isinstance(decoder_for("memo.webm"), PydubAudioDecoder)

    def test_mp3_output_uses_pydub(self) -> None:
        encoder = encoder_for("out.mp3")
        assert isinstance(encoder, PydubAudioEncoder)
        assert encoder.format == "mp3"

    def test_m4a_output_maps_to_mp4(self) -> None:
        assert encoder_for("out.m4a").format == "mp4"

    def test_flac_output_uses_soundfile(self) -> None:
        assert isinstance(encoder_for("out.flac"), SoundfileAudioEncoder)


class TestTrimFile:
    """Integration tests for the file pipeline (WAV only, no ffmpeg needed)."""

    def test_end_to_end_wav(self, tmp_path) -> None:
        in_path: str = os.path.join(str(tmp_path), "memo.wav")
        out_path: str = os.path.join(str(tmp_path), "memo_trimmed.wav")
        make_test_wav(in_path)

        result = trim_file(in_path, out_path, threshold_db=-40.0)

        assert os.path.exists(out_path)
        data, sr = sf.read(out_path)
        assert sr == SAMPLE_RATE
        assert data.shape[1] == 2
        assert abs(len(data) - 1.4 * SAMPLE_RATE) <= 2
        assert result.removed_segments == 2

    def test_auto_threshold(self, tmp_path) -> None:
        in_path: str = os.path.join(str(tmp_path), "memo.wav")
        out_path: str = os.path.join(str(tmp_path), "out.flac")
        make_test_wav(in_path)
        result = trim_file(in_path, out_path, threshold_db=None)
        assert result.format == "flac"
        assert result.trimmed_duration == pytest.approx(1.4)

    def test_progress_callback_reports_every_step(self, tmp_path) -> None:
        in_path: str = os.path.join(str(tmp_path), "memo.wav")
        out_path: str = os.path.join(str(tmp_path), "out.wav")
        make_test_wav(in_path)
        calls: list = []
        trim_file(in_path, out_path, progress_callback=lambda i, n, name: calls.append((i, n, name)))
        assert [c[0] for c in calls] == [0, 1, 2, 3, 4]
        assert all(c[1] == 5 for c in calls)
        assert calls[0][2] == "Loading audio file"

    def test_missing_input_raises_file_not_found(self, tmp_path) -> None:
        out_path: str = os.path.join(str(tmp_path), "out.wav")
        with pytest.raises(FileNotFoundError):
            trim_file("nonexistent.wav", out_path)

    def test_invalid_output_extension_raises(self, tmp_path) -> None:
        in_path: str = os.path.join(str(tmp_path), "memo.wav")
        make_test_wav(in_path)
        with pytest.raises(ValueError, match="Unsupported output format"):
            trim_file(in_path, os.path.join(str(tmp_path), "out.txt"))

    def test_threshold_out_of_range_raises(self, tmp_path) -> None:
        in_path: str = os.path.join(str(tmp_path), "memo.wav")
        make_test_wav(in_path)
        with pytest.raises(ValueError, match="threshold_db"):
            trim_file(in_path, os.path.join(str(tmp_path), "out.wav"), threshold_db=12.0)

    def test_unsupported_bitrate_raises(self, tmp_path) -> None:
        in_path: str = os.path.join(str(tmp_path), "memo.wav")
        make_test_wav(in_path)
        with pytest.raises(ValueError, match="Bitrate"):
            trim_file(in_path, os.path.join(str(tmp_path), "out.wav"), bitrate_kbps=100)

    def test_corrupt_input_raises_decode_error(self, tmp_path) -> None:
        in_path: str = os.path.join(str(tmp_path), "broken.wav")
        with open(in_path, "wb") as f:
            f.write(b"not really a wav file")
        out_path: str = os.path.join(str(tmp_path), "out.wav")
        with pytest.raises(DecodeError):
            trim_file(in_path, out_path)
        assert not os.path.exists(out_path)

    def test_analyze_file_reports_without_writing(self, tmp_path) -> None:
        in_path: str = os.path.join(str(tmp_path), "memo.wav")
        make_test_wav(in_path)
        report = analyze_file(in_path, threshold_db=-40.0)
        assert report.threshold_db == -40.0
        assert report.stats.trimmed_duration == pytest.approx(1.4)
        assert len(report.segments) == 15
        assert os.listdir(str(tmp_path)) == ["memo.wav"]


class TestValidation:
    """Tests for path and parameter validation."""

    def test_nonexistent_file_raises_file_not_found(self) -> None:
        with pytest.raises(FileNotFoundError, match="Input file not found"):
            validate_input_file("absolutely_missing_file.wav")

    def test_directory_instead_of_file_raises_value_error(self, tmp_path) -> None:
        with pytest.raises(ValueError, match="not a file"):
            validate_input_file(str(tmp_path))

    def test_unsupported_extension_raises_value_error(self, tmp_path) -> None:
        bad_file: str = os.path.join(str(tmp_path), "memo.txt")
        with open(bad_file, "w") as f:
            f.write("not audio")
        with pytest.raises(ValueError, match="Unsupported input format"):
            validate_input_file(bad_file)

    def test_recorder_formats_accepted(self) -> None:
        assert {".webm", ".m4a", ".mp3", ".wav"} <= SUPPORTED_INPUT_FORMATS

    def test_missing_output_directory_raises(self) -> None:
        with pytest.raises(FileNotFoundError, match="Output directory does not exist"):
            validate_output_path("/nonexistent/dir/output.wav")

    def test_all_output_formats_mapped(self) -> None:
        for ext in SUPPORTED_OUTPUT_FORMATS:
            assert ext in FORMAT_EXPORT_MAP

    def test_param_range_bounds_inclusive(self) -> None:
        validate_param_range(0.0, "silence_margin", 0.0, 10.0)
        validate_param_range(10.0, "silence_margin", 0.0, 10.0)
        with pytest.raises(ValueError, match="silence_margin"):
            validate_param_range(10.5, "silence_margin", 0.0, 10.0)

    def test_bitrate_whitelist(self) -> None:
        validate_bitrate(128)
        with pytest.raises(ValueError):
            validate_bitrate(127)


class TestPathAndTimeHelpers:
    """Tests for output naming and duration formatting."""

    def test_default_output_path(self) -> None:
        assert get_output_path("notes/memo.webm") == "notes/memo_trimmed.mp3"

    def test_output_ext_override(self) -> None:
        assert get_output_path("memo.wav", output_ext=".flac") == "memo_trimmed.flac"

    def test_export_format_lookup(self) -> None:
        assert get_export_format("out.m4a") == "mp4"
        assert get_export_format("out.xyz") == "wav"

    def test_format_time(self) -> None:
        assert format_time(0) == "00:00:00"
        assert format_time(3725.9) == "01:02:05"

    def test_format_timestamp(self) -> None:
        assert format_timestamp(59.99) == "[00:00:59]"

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("TRIMMER_MARGIN", "0.35")
        assert utils._env_float("TRIMMER_MARGIN", 0.2) == 0.35

    def test_malformed_env_falls_back(self, monkeypatch) -> None:
        monkeypatch.setenv("TRIMMER_MARGIN", "lots")
        assert utils._env_float("TRIMMER_MARGIN", 0.2) == 0.2


class TestOutputPrinter:
    """Tests for CLI output formatting."""

    def test_success_prints_details(self, capsys) -> None:
        printer: OutputPrinter = OutputPrinter(no_color=True)
        printer.success("memo_trimmed.mp3", details={"Removed": "40.0%"})
        captured = capsys.readouterr()
        assert "memo_trimmed.mp3" in captured.out
        assert "Removed   " in captured.out

    def test_error_goes_to_stderr_even_when_quiet(self, capsys) -> None:
        printer: OutputPrinter = OutputPrinter(quiet=True, no_color=True)
        printer.error("Could not decode audio.", hint="Check the file.")
        captured = capsys.readouterr()
        assert "Could not decode audio." in captured.err
        assert "Check the file." in captured.err
        assert captured.out == ""

    def test_quiet_suppresses_everything_else(self, capsys) -> None:
        printer: OutputPrinter = OutputPrinter(quiet=True)
        printer.success("x")
        printer.warning("y")
        printer.info("z")
        assert capsys.readouterr().out == ""

    def test_no_color_env_variable(self, monkeypatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        assert OutputPrinter().no_color is True

    def test_color_enabled_includes_ansi(self, capsys) -> None:
        printer = OutputPrinter(no_color=False)
        if printer.no_color:
            pytest.skip("NO_COLOR is set in the environment")
        printer.info("hello")
        assert "\033[" in capsys.readouterr().out

    def test_trim_details(self) -> None:
        details = OutputPrinter.trim_details(
            original_duration=125.0,
            trimmed_duration=65.0,
            removed_percentage=48.0,
            removed_segments=3,
            threshold_db=-42.5,
        )
        assert details["Original"] == "00:02:05"
        assert details["Trimmed"] == "00:01:05"
        assert details["Removed"] == "48.0% in 3 silent span(s)"
        assert details["Threshold"] == "-42.5 dB"


class TestCli:
    """Tests for the argparse front end."""

    def test_defaults(self) -> None:
        args = build_parser().parse_args(["memo.wav"])
        assert args.threshold == utils.DEFAULT_PARAMS["threshold"]
        assert args.auto_threshold is False
        assert args.output is None

    def test_threshold_and_auto_are_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["memo.wav", "-t", "-40", "--auto-threshold"])

    def test_quiet_run_writes_output(self, tmp_path, monkeypatch, capsys) -> None:
        in_path: str = os.path.join(str(tmp_path), "memo.wav")
        make_test_wav(in_path)
        monkeypatch.setattr(sys, "argv", ["silence-trim", in_path, "--auto-output", "--format", "wav", "-q"])
        main()
        assert os.path.exists(os.path.join(str(tmp_path), "memo_trimmed.wav"))
        assert capsys.readouterr().out == ""

    def test_dry_run_prints_report(self, tmp_path, monkeypatch, capsys) -> None:
        in_path: str = os.path.join(str(tmp_path), "memo.wav")
        make_test_wav(in_path)
        monkeypatch.setattr(sys, "argv", ["silence-trim", in_path, "--dry-run", "-n"])
        main()
        out = capsys.readouterr().out
        assert "dry run" in out
        assert "Threshold" in out
        assert os.listdir(str(tmp_path)) == ["memo.wav"]

    def test_missing_input_exits_with_error(self, tmp_path, monkeypatch, capsys) -> None:
        out_path: str = os.path.join(str(tmp_path), "out.wav")
        monkeypatch.setattr(sys, "argv", ["silence-trim", "missing.wav", out_path, "-q"])
        with pytest.raises(SystemExit) as excinfo:
            main()
        assert excinfo.value.code == 1
        assert "Input file not found" in capsys.readouterr().err
