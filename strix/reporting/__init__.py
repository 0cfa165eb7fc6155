"""Report generation functionality."""

from .report_generator import (
    generate_text_report,
    generate_json_report,
    generate_csv_report,
    generate_html_report,
    generate_stats_report,
    generate_threat_report,
    render_report,
    save_report,
)
from .diff import DiffResult, compare, generate_diff_report

__all__ = [
    'generate_text_report',
    'generate_json_report',
    'generate_csv_report',
    'generate_html_report',
    'generate_stats_report',
    'generate_threat_report',
    'render_report',
    'save_report',
    'DiffResult',
    'compare',
    'generate_diff_report',
]
