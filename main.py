#!/usr/bin/env python3
"""
Silence Trimmer CLI
Remove long silent stretches from voice recordings.

Usage:
    python main.py memo.wav memo_trimmed.mp3
    python main.py memo.webm memo_trimmed.wav --threshold -45 --margin 0.3
    python main.py memo.wav --auto-output --auto-threshold
    python main.py memo.wav --dry-run
"""

import argparse
import logging
import os
import sys
import time

from tqdm import tqdm

from trimmer.core import analyze_file, trim_file
from trimmer.errors import TrimmerError
from trimmer.printer import OutputPrinter
from trimmer.utils import (
    ALLOWED_BITRATES,
    DEFAULT_PARAMS,
    SUPPORTED_OUTPUT_FORMATS,
    get_output_path,
)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="silence-trim",
        description="Trim silence from voice recordings.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py memo.wav memo_trimmed.mp3
  python main.py memo.m4a memo_trimmed.wav --threshold -45 --min-silence 1.0
  python main.py memo.wav --auto-output --auto-threshold --quiet

Parameter guide:
  --threshold    -50 = only near-silence | -40 = typical room | -30 = noisy room
  --min-silence  0.3 = trim short pauses | 0.6 = natural       | 2.0 = long gaps only
  --margin       0.0 = hard cuts         | 0.2 = natural       | 0.5 = relaxed
        """,
    )

    # Positional arguments
    parser.add_argument(
        "input",
        metavar="INPUT",
        help="Path to the input audio file (.wav, .flac, .ogg, .mp3, .m4a, .aac, .webm).",
    )
    parser.add_argument(
        "output",
        metavar="OUTPUT",
        nargs="?",
        default=None,
        help="Path for the output file. Omit if using --auto-output or --dry-run.",
    )

    # Detection parameters
    det_group = parser.add_argument_group("Detection Parameters")
    thr = det_group.add_mutually_exclusive_group()
    thr.add_argument(
        "--threshold",
        "-t",
        type=float,
        default=DEFAULT_PARAMS["threshold"],
        metavar="DB",
        help=f"Silence threshold in dB (default: {DEFAULT_PARAMS['threshold']}).",
    )
    thr.add_argument(
        "--auto-threshold",
        "-a",
        action="store_true",
        help="Derive the threshold from the recording's noise floor.",
    )
    det_group.add_argument(
        "--min-silence",
        "-m",
        type=float,
        default=DEFAULT_PARAMS["min_silence"],
        metavar="SECONDS",
        help=f"Shortest pause that gets trimmed (default: {DEFAULT_PARAMS['min_silence']}).",
    )
    det_group.add_argument(
        "--margin",
        "-g",
        type=float,
        default=DEFAULT_PARAMS["margin"],
        metavar="SECONDS",
        help=f"Audio kept around speech (default: {DEFAULT_PARAMS['margin']}).",
    )
    det_group.add_argument(
        "--resolution",
        "-r",
        type=float,
        default=DEFAULT_PARAMS["resolution"],
        metavar="MS",
        help=f"Analysis segment width in ms (default: {DEFAULT_PARAMS['resolution']:.0f}).",
    )

    # Output options
    out_group = parser.add_argument_group("Output Options")
    out_group.add_argument(
        "--bitrate",
        "-b",
        type=int,
        default=int(DEFAULT_PARAMS["bitrate"]),
        choices=ALLOWED_BITRATES,
        metavar="KBPS",
        help=f"Bitrate for mp3/m4a output (default: {int(DEFAULT_PARAMS['bitrate'])}).",
    )
    out_group.add_argument(
        "--auto-output",
        action="store_true",
        help="Auto-generate output filename from input (e.g., memo.wav -> memo_trimmed.mp3).",
    )
    out_group.add_argument(
        "--format",
        type=str,
        default=None,
        choices=["mp3", "wav", "flac", "ogg", "m4a"],
        help="Output format (default: mp3, or inferred from OUTPUT filename).",
    )
    out_group.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report what would be removed; write nothing.",
    )
    out_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress all output except errors.",
    )
    out_group.add_argument(
        "--no-color",
        "-n",
        action="store_true",
        help="Disable colored output (also auto-disabled when NO_COLOR env var is set).",
    )
    out_group.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Log progress details (-vv for debug output).",
    )

    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT)


def resolve_output_path(args: argparse.Namespace, parser: argparse.ArgumentParser) -> str:
    output_ext: str = ".mp3"  # default

    if args.format is not None:
        output_ext = f".{args.format}"
    elif args.output is not None:
        ext: str = os.path.splitext(args.output)[1].lower()
        if ext in SUPPORTED_OUTPUT_FORMATS:
            output_ext = ext

    if args.output is None and args.auto_output:
        return get_output_path(args.input, suffix="_trimmed", output_ext=output_ext)
    if args.output is not None:
        output_path: str = args.output
        if args.format is not None and not output_path.lower().endswith(output_ext):
            output_path = os.path.splitext(output_path)[0] + output_ext
        return output_path

    parser.error(
        "Provide an OUTPUT path, or use --auto-output to generate one automatically."
    )
    return ""  # unreachable, parser.error exits


def run_dry(args: argparse.Namespace, printer: OutputPrinter) -> None:
    report = analyze_file(
        args.input,
        threshold_db=None if args.auto_threshold else args.threshold,
        min_silence_duration=args.min_silence,
        silence_margin=args.margin,
        resolution_ms=args.resolution,
    )
    printer.success(
        title=f"{args.input} (dry run)",
        details=OutputPrinter.trim_details(
            original_duration=report.waveform.duration,
            trimmed_duration=report.stats.trimmed_duration,
            removed_percentage=report.stats.removed_percentage,
            removed_segments=report.stats.removed_segments,
            threshold_db=report.threshold_db,
        ),
    )


def main() -> None:
    parser: argparse.ArgumentParser = build_parser()
    args: argparse.Namespace = parser.parse_args()

    configure_logging(args.verbose)
    printer: OutputPrinter = OutputPrinter(
        quiet=args.quiet,
        no_color=args.no_color,
    )

    try:
        if args.dry_run:
            run_dry(args, printer)
            return

        output_path: str = resolve_output_path(args, parser)
        params: dict = {
            "input_path": args.input,
            "output_path": output_path,
            "threshold_db": None if args.auto_threshold else args.threshold,
            "min_silence_duration": args.min_silence,
            "silence_margin": args.margin,
            "resolution_ms": args.resolution,
            "bitrate_kbps": args.bitrate,
        }

        start_time = time.time()
        if args.quiet:
            result = trim_file(**params)
        else:
            with tqdm(total=5, desc="Processing", unit="step") as pbar:

                def cli_callback(step_idx: int, total: int, name: str) -> None:
                    pbar.set_description(name)
                    if step_idx > 0:
                        pbar.update(1)
                    if step_idx == total - 1:
                        pbar.update(1)  # finish the bar

                result = trim_file(**params, progress_callback=cli_callback)

        size_mb: float = len(result.trimmed_audio) / (1024 * 1024)
        details = OutputPrinter.trim_details(
            original_duration=result.original_duration,
            trimmed_duration=result.trimmed_duration,
            removed_percentage=result.removed_percentage,
            removed_segments=result.removed_segments,
            threshold_db=params["threshold_db"],
        )
        details["Size"] = f"{size_mb:.2f} MB"
        details["Time"] = f"{time.time() - start_time:.1f}s"
        printer.success(title=output_path, details=details)

    except (FileNotFoundError, ValueError) as exc:
        printer.error(str(exc))
        sys.exit(1)
    except TrimmerError as exc:
        printer.error(str(exc), hint="Check that the file is a valid, supported audio file.")
        sys.exit(1)
    except KeyboardInterrupt:
        printer.warning("Trimming cancelled.", hint="Output file was not saved.")
        sys.exit(130)


if __name__ == "__main__":
    main()
