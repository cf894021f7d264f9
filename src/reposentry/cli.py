"""reposentry - Console output helpers."""
from __future__ import annotations

import os
import shutil
import sys
from typing import List, Sequence

from .core.fixer import FixOutcome, FixStatus
from .practices.types import EvaluationRecord, PracticeEvaluationResult, PracticeImpact

# ═════════════════════════════════════════════════════════════════════════════
# ANSI Color & Style Codes
# ═════════════════════════════════════════════════════════════════════════════

class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # True color (24-bit)
    @staticmethod
    def rgb(r: int, g: int, b: int) -> str:
        """24-bit RGB foreground color."""
        return f"\033[38;2;{r};{g};{b}m"


# ═════════════════════════════════════════════════════════════════════════════
# Theme Colors
# ═════════════════════════════════════════════════════════════════════════════

class Theme:
    """Custom theme colors for reposentry."""

    ACCENT = Colors.rgb(86, 124, 140)

    SUCCESS = Colors.rgb(107, 158, 120)  # Muted green
    WARNING = Colors.rgb(201, 168, 87)   # Muted gold
    ERROR = Colors.rgb(184, 90, 90)      # Muted red

    HIGH = Colors.rgb(199, 90, 90)
    MEDIUM = Colors.rgb(201, 168, 87)
    LOW = Colors.rgb(90, 138, 199)

    TEXT = Colors.rgb(242, 242, 242)
    TEXT_DIM = Colors.rgb(129, 139, 140)
    TEXT_MUTED = Colors.rgb(90, 99, 102)

    BORDER = Colors.rgb(71, 84, 89)

    @staticmethod
    def impact_color(impact: PracticeImpact) -> str:
        return {
            PracticeImpact.HIGH: Theme.HIGH,
            PracticeImpact.MEDIUM: Theme.MEDIUM,
            PracticeImpact.LOW: Theme.LOW,
        }.get(impact, Theme.TEXT)

    @staticmethod
    def evaluation_color(evaluation: PracticeEvaluationResult) -> str:
        return {
            PracticeEvaluationResult.PRACTICING: Theme.SUCCESS,
            PracticeEvaluationResult.NOT_PRACTICING: Theme.ERROR,
            PracticeEvaluationResult.UNKNOWN: Theme.TEXT_MUTED,
        }.get(evaluation, Theme.TEXT)


# ═════════════════════════════════════════════════════════════════════════════
# Terminal Utilities
# ═════════════════════════════════════════════════════════════════════════════

def supports_color() -> bool:
    """Check if terminal supports color output."""
    if os.getenv("NO_COLOR"):
        return False
    if os.getenv("FORCE_COLOR"):
        return True
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def get_terminal_width() -> int:
    """Get terminal width, default 80."""
    try:
        return shutil.get_terminal_size().columns
    except (OSError, ValueError):
        return 80


# ═════════════════════════════════════════════════════════════════════════════
# Icons & Symbols
# ═════════════════════════════════════════════════════════════════════════════

class Icons:
    """Unicode icons for CLI output."""

    PRACTICING = "✓"
    NOT_PRACTICING = "✗"
    UNKNOWN = "?"
    OFF = "○"
    WARNING = "⚠"

    ARROW = "→"
    BULLET = "•"
    DIAMOND = "◆"

    BOX_TL = "╭"
    BOX_TR = "╮"
    BOX_BL = "╰"
    BOX_BR = "╯"
    BOX_H = "─"
    BOX_V = "│"

    @staticmethod
    def evaluation_icon(record: EvaluationRecord) -> str:
        if not record.is_on:
            return Icons.OFF
        return {
            PracticeEvaluationResult.PRACTICING: Icons.PRACTICING,
            PracticeEvaluationResult.NOT_PRACTICING: Icons.NOT_PRACTICING,
            PracticeEvaluationResult.UNKNOWN: Icons.UNKNOWN,
        }.get(record.evaluation, "?")


BANNER = """
╭──────────────────────────────────────────────────────────────────╮
│  reposentry - Repository Practice Scanner                        │
╰──────────────────────────────────────────────────────────────────╯
"""


# ═════════════════════════════════════════════════════════════════════════════
# Console
# ═════════════════════════════════════════════════════════════════════════════

class Console:
    """Pretty console output."""

    def __init__(self, color: bool | None = None):
        self.use_color = color if color is not None else supports_color()
        self.width = get_terminal_width()

    def _c(self, text: str, color: str) -> str:
        """Colorize text if colors enabled."""
        if self.use_color:
            return f"{color}{text}{Colors.RESET}"
        return text

    def banner(self) -> None:
        if self.use_color:
            print(BANNER.replace("reposentry", self._c("reposentry", Theme.ACCENT), 1))
        else:
            print(BANNER)

    def subheader(self, text: str) -> None:
        """Print a subsection header."""
        print()
        print(f"  {self._c(Icons.DIAMOND, Theme.ACCENT)} {self._c(text, Colors.BOLD)}")
        print(f"  {self._c(Icons.BOX_H * (len(text) + 2), Theme.TEXT_MUTED)}")

    def info(self, key: str, value: str) -> None:
        """Print key-value info."""
        print(f"    {self._c(key + ':', Theme.TEXT_DIM)} {value}")

    def success(self, message: str) -> None:
        print(f"  {self._c(Icons.PRACTICING, Theme.SUCCESS)} {message}")

    def error(self, message: str) -> None:
        print(f"  {self._c(Icons.NOT_PRACTICING, Theme.ERROR)} {message}")

    def warning(self, message: str) -> None:
        print(f"  {self._c(Icons.WARNING, Theme.WARNING)} {message}")

    def dim(self, message: str) -> None:
        print(f"  {self._c(message, Theme.TEXT_MUTED)}")

    def blank(self) -> None:
        print()

    def component_label(self, path: str, language: str, count: int) -> None:
        """Print a label grouping the records of one component."""
        print(f"\n    {self._c(Icons.DIAMOND, Theme.ACCENT)} {path} {self._c(f'({language}, {count})', Theme.TEXT_MUTED)}")

    def record_result(self, record: EvaluationRecord, show_details: bool = False) -> None:
        """Print a single evaluation record."""
        icon = Icons.evaluation_icon(record)
        impact = f"[{record.impact.value}]"
        if self.use_color:
            icon = self._c(icon, Theme.evaluation_color(record.evaluation) if record.is_on else Theme.TEXT_MUTED)
            impact = self._c(impact, Theme.impact_color(record.impact))
        label = record.practice.name if record.is_on else f"{record.practice.name} (off)"
        print(f"  {icon} {impact} {label}")

        if record.is_on and record.evaluation != PracticeEvaluationResult.PRACTICING:
            if record.practice.suggestion:
                print(f"     {self._c(Icons.ARROW + ' ' + record.practice.suggestion, Theme.TEXT_DIM)}")
            if record.practice.url:
                print(f"     {self._c(Icons.BULLET + ' ' + record.practice.url, Theme.TEXT_MUTED)}")

        if show_details and record.details:
            self._print_details(dict(record.details))

    def _print_details(self, details: dict) -> None:
        """Print details dict in a readable format."""
        for key, value in details.items():
            if isinstance(value, (list, tuple)) and value:
                print(f"     {self._c(key + ':', Theme.TEXT_MUTED)}")
                for item in value[:10]:
                    print(f"       {self._c(f'- {item}', Theme.TEXT_DIM)}")
                if len(value) > 10:
                    print(f"       {self._c(f'... and {len(value) - 10} more', Theme.TEXT_MUTED)}")
            elif value:
                print(f"     {self._c(f'{key}: {value}', Theme.TEXT_MUTED)}")

    def fix_results(self, outcomes: Sequence[FixOutcome]) -> None:
        for outcome in outcomes:
            if outcome.status == FixStatus.SUCCESS:
                self.success(f"Fixed {outcome.practice_id} on {outcome.component_id}")
            else:
                self.warning(f"Fix for {outcome.practice_id} on {outcome.component_id} failed: {outcome.message}")

    def summary_box(self, stats: dict[str, int]) -> None:
        """Print a summary statistics box."""
        width = 50
        line = Icons.BOX_H * width
        rows: List[str] = [
            f"Total records: {stats.get('total', 0):>5}",
            f"Practicing:    {stats.get('practicing', 0):>5}",
            f"Not practicing:{stats.get('notPracticing', 0):>5}",
            f"Unknown:       {stats.get('unknown', 0):>5}",
            f"Off:           {stats.get('off', 0):>5}",
        ]
        border = Theme.BORDER
        print()
        print(f"  {self._c(Icons.BOX_TL + line + Icons.BOX_TR, border)}")
        print(f"  {self._c(Icons.BOX_V, border)} {self._c('SCAN SUMMARY'.center(width - 2), Colors.BOLD)} {self._c(Icons.BOX_V, border)}")
        for row in rows:
            print(f"  {self._c(Icons.BOX_V, border)}  {row:<{width - 2}}{self._c(Icons.BOX_V, border)}")
        print(f"  {self._c(Icons.BOX_BL + line + Icons.BOX_BR, border)}")

    def impact_breakdown(self, stats: dict[str, int]) -> None:
        """Print violations grouped by impact."""
        print(f"  {self._c('Violations by impact:', Theme.TEXT_DIM)}")
        for impact in PracticeImpact:
            count = stats.get(impact.value, 0)
            if count:
                print(f"    {self._c(f'{impact.value.title()}: {count}', Theme.impact_color(impact))}")
