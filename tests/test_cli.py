"""
Tests for strix_cli
"""

from __future__ import annotations

import json
import logging

import pytest

import strix_cli
from helpers import build_pe


@pytest.fixture
def sample(write_binary):
    data = bytearray(build_pe())
    data[0x210:0x210 + 18] = b"http://evil.test/a"
    data[0x240:0x240 + 17] = b"IsDebuggerPresent"
    data[0x280:0x280 + 11] = b"hello there"
    return write_binary(bytes(data), "sample.exe")


class TestScan:
    def test_text_output(self, sample, capsys):
        assert strix_cli.main([sample, "-q"]) == 0
        out = capsys.readouterr().out
        assert "http://evil.test/a" in out
        assert "[.text]" in out

    def test_offsets(self, sample, capsys):
        strix_cli.main([sample, "-q", "-o"])
        assert "0x00000210" in capsys.readouterr().out

    def test_json(self, sample, capsys):
        assert strix_cli.main([sample, "--json"]) == 0
        doc = json.loads(capsys.readouterr().out)
        values = [s["value"] for s in doc["strings"]]
        assert "hello there" in values
        assert doc["sections"][0]["name"] == ".text"

    def test_csv(self, sample, capsys):
        strix_cli.main([sample, "-q", "--csv"])
        out = capsys.readouterr().out
        assert out.splitlines()[0].startswith("offset,encoding")

    def test_only_preset(self, sample, capsys):
        strix_cli.main([sample, "-q", "--only", "urls"])
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 1
        assert lines[0].endswith("http://evil.test/a")

    def test_filter(self, sample, capsys):
        strix_cli.main([sample, "-q", "-f", "HELLO", "-i"])
        assert capsys.readouterr().out.strip().endswith("hello there")

    def test_stats_and_threat_on_stderr(self, sample, capsys):
        strix_cli.main([sample, "-q", "--stats", "--threat"])
        captured = capsys.readouterr()
        assert "THREAT ASSESSMENT" in captured.err
        assert "Total strings:" in captured.err
        assert "THREAT ASSESSMENT" not in captured.out

    def test_html_report(self, sample, tmp_path, capsys):
        out = tmp_path / "r.html"
        assert strix_cli.main([sample, "-q", "--report", str(out)]) == 0
        assert "http://evil.test/a" in out.read_text(encoding="utf-8")
        assert capsys.readouterr().out == ""

    def test_progress_logs(self, sample, capsys):
        strix_cli.main([sample, "-a"])
        err = capsys.readouterr().err
        assert "[*] encoding: utf-16-be" in err


class TestErrors:
    def test_missing_file_keeps_going(self, sample, tmp_path, capsys):
        missing = str(tmp_path / "missing.exe")
        assert strix_cli.main([missing, sample, "-q"]) == 1
        captured = capsys.readouterr()
        assert "missing.exe" in captured.err
        assert "http://evil.test/a" in captured.out

    def test_bad_filter(self, sample, capsys):
        assert strix_cli.main([sample, "-f", "(("]) == 2
        assert "bad filter" in capsys.readouterr().err

    def test_bad_min_length(self, sample):
        assert strix_cli.main([sample, "-n", "0"]) == 2

    def test_output_formats_exclusive(self, sample):
        with pytest.raises(SystemExit) as info:
            strix_cli.main([sample, "--json", "--csv"])
        assert info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            strix_cli.main(["--version"])
        assert info.value.code == 0
        assert "strix 1.0.0" in capsys.readouterr().out


class TestDiff:
    def test_diff(self, sample, write_binary, capsys):
        other = write_binary(b"\x00hello there\x00brand new string\x00", "other.bin")
        assert strix_cli.main([sample, "--diff", other, "-q"]) == 0
        out = capsys.readouterr().out
        assert "DIFF RESULTS" in out
        assert "+ brand new string" in out
        assert "- http://evil.test/a" in out


class TestLogging:
    def test_levels(self):
        strix_cli.setup_logging(quiet=True)
        assert logging.getLogger("strix").level == logging.WARNING
        strix_cli.setup_logging(verbose=True)
        assert logging.getLogger("strix").level == logging.DEBUG

    def test_formatter_prefix(self):
        record = logging.LogRecord("strix", logging.WARNING, __file__, 1, "careful", None, None)
        assert strix_cli.ColorFormatter(color=False).format(record) == "[!] careful"
        assert "\x1b[" in strix_cli.ColorFormatter(color=True).format(record)
