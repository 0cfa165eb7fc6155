"""
Quick check that every module imports and exposes what the CLI relies on.
"""

from __future__ import annotations


def test_package():
    import strix
    from strix import ScanConfig, StringAnalyzer, scan_buffer

    assert strix.__version__ == "1.0.0"
    assert callable(scan_buffer)
    assert StringAnalyzer and ScanConfig


def test_core():
    from strix.core import (
        bruteforce_xor,
        calculate_entropy,
        calculate_risk_level,
        classify_string,
        extract_base64,
        extract_strings,
    )

    assert calculate_entropy("ab") == 1.0
    assert all(callable(f) for f in (
        bruteforce_xor, calculate_risk_level, classify_string, extract_base64, extract_strings,
    ))


def test_parsing():
    from strix.parsing import open_buffer, parse_sections, section_for_offset

    assert parse_sections(b"").lookup(0) is None
    assert section_for_offset([], 0) is None
    assert callable(open_buffer)


def test_reporting():
    from strix.reporting import generate_html_report, generate_json_report, generate_text_report

    assert generate_text_report([]) == ""
    assert callable(generate_json_report) and callable(generate_html_report)


def test_cli():
    import strix_cli

    assert strix_cli.build_parser().prog == "strix"
