# trimmer/printer.py
# Console output for the silence-trim CLI: results on stdout, errors on stderr.

import os
import sys
from typing import Optional, TextIO

from trimmer.utils import format_time


class OutputPrinter:
    """
    Formats CLI messages.

    - Errors always go to stderr and are never silenced.
    - Everything else is suppressed by quiet=True.
    - Colour is disabled by no_color=True or the NO_COLOR environment variable.
    """

    SYMBOLS : dict[str, str] = {
        "success" : "✅",
        "error"   : "❌",
        "warning" : "⚠️ ",
        "info"    : "ℹ️ ",
        "hint"    : "→",
    }

    COLORS : dict[str, str] = {
        "green"  : "32",
        "red"    : "31",
        "yellow" : "33",
        "cyan"   : "36",
        "dim"    : "90",
    }

    COL_WIDTH : int = 10  # Key column width for detail blocks

    def __init__(self, quiet : bool = False, no_color : bool = False) -> None:
        self.quiet    : bool = quiet
        self.no_color : bool = no_color or bool(os.environ.get("NO_COLOR", ""))

    # ── Internal ─────────────────────────────────────────────────

    def _colorize(self, text : str, code : str) -> str:
        if self.no_color:
            return text
        return f"\033[{code}m{text}\033[0m"

    def _headline(
        self, kind : str, color : str, message : str, stream : TextIO, gap : str = "\n"
    ) -> None:
        symbol : str = self._colorize(self.SYMBOLS[kind], self.COLORS[color])
        print(f"{gap}{symbol}  {self._colorize(message, self.COLORS[color])}", file=stream)

    def _hint(self, hint : Optional[str], stream : TextIO) -> None:
        if hint:
            text : str = self._colorize(f"{self.SYMBOLS['hint']} {hint}", self.COLORS["cyan"])
            print(f"    {text}", file=stream)

    def _details(self, details : Optional[dict[str, str]]) -> None:
        for key, value in (details or {}).items():
            dim_key : str = self._colorize(f"{key:<{self.COL_WIDTH}}", self.COLORS["dim"])
            print(f"    {dim_key}: {value}")

    # ── Messages ─────────────────────────────────────────────────

    def success(self, title : str, details : Optional[dict[str, str]] = None) -> None:
        if self.quiet:
            return
        self._headline("success", "green", title, sys.stdout)
        self._details(details)

    def error(self, message : str, hint : Optional[str] = None) -> None:
        self._headline("error", "red", message, sys.stderr)
        self._hint(hint, sys.stderr)

    def warning(self, message : str, hint : Optional[str] = None) -> None:
        if self.quiet:
            return
        self._headline("warning", "yellow", message, sys.stdout)
        self._hint(hint, sys.stdout)

    def info(self, message : str) -> None:
        if self.quiet:
            return
        self._headline("info", "cyan", message, sys.stdout, gap="")

    # ── Trim reporting ───────────────────────────────────────────

    @staticmethod
    def trim_details(
        original_duration : float,
        trimmed_duration  : float,
        removed_percentage: float,
        removed_segments  : int,
        threshold_db      : Optional[float] = None,
    ) -> dict[str, str]:
        """Detail rows describing one trim, for success()."""
        details : dict[str, str] = {
            "Original": format_time(original_duration),
            "Trimmed":  format_time(trimmed_duration),
            "Removed":  f"{removed_percentage:.1f}% in {removed_segments} silent span(s)",
        }
        if threshold_db is not None:
            details["Threshold"] = f"{threshold_db:.1f} dB"
        return details
