"""Utility helpers for reposentry."""
from __future__ import annotations

from .reporting import (
    collect_summary,
    filter_records,
    format_html_report,
    format_json_report,
    format_text_report,
    write_report,
)

__all__ = [
    "collect_summary",
    "filter_records",
    "format_text_report",
    "format_json_report",
    "format_html_report",
    "write_report",
]
