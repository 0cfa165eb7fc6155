"""
Tests for strix.core.base64_decoder
"""

from __future__ import annotations

import base64
import re

import pytest

from strix.core.base64_decoder import decode_base64_run, extract_base64, printable_ratio
from strix.core.models import Category, Source


def wrap(payload, pad=b"\x00" * 8):
    return pad + payload + pad


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_printable_ratio(self):
        assert printable_ratio(b"") == 0.0
        assert printable_ratio(b"abcd") == 1.0
        assert printable_ratio(b"ab\x00\x01") == 0.5

    def test_decode_pads_missing_equals(self):
        encoded = base64.b64encode(b"sixteen bytes!!!").rstrip(b"=")
        assert decode_base64_run(encoded) == b"sixteen bytes!!!"

    def test_decode_invalid_length(self):
        assert decode_base64_run(b"A" * 21) is None


# ---------------------------------------------------------------------------
# extract_base64
# ---------------------------------------------------------------------------

class TestExtractBase64:
    @pytest.mark.parametrize("text", [
        "http://malicious.example/payload.exe",
        "cmd.exe /c whoami > out.txt",
        "This program cannot be run",
        "user=admin;pass=letmein!",
    ])
    def test_round_trip(self, text):
        data = wrap(base64.b64encode(text.encode()))
        results = extract_base64(data)
        assert [c.value for c in results] == [text]
        found = results[0]
        assert found.source is Source.BASE64
        assert found.encoding == "base64"
        assert found.offset == 8

    def test_categories_come_from_decoded_text(self):
        data = wrap(base64.b64encode(b"http://malicious.example/payload"))
        assert Category.URL in extract_base64(data)[0].categories

    def test_binary_payload_rejected(self):
        payload = bytes(range(256)) * 2
        assert extract_base64(wrap(base64.b64encode(payload))) == []

    def test_junk_run_skipped(self):
        data = wrap(b"A" * 21) + wrap(base64.b64encode(b"still decoded after junk"))
        assert [c.value for c in extract_base64(data)] == ["still decoded after junk"]

    @pytest.mark.parametrize("text", [
        "http://malicious.example/payload.exe",
        "powershell -nop -w hidden",
    ])
    def test_stray_alphabet_byte_after_payload(self, text):
        encoded = base64.b64encode(text.encode())
        data = wrap(encoded + b"Z")
        results = extract_base64(data)
        assert [c.value for c in results] == [text]
        assert results[0].offset == 8
        assert results[0].raw_length == len(encoded)

    def test_unpadded_tail_dropped(self):
        # 21 bytes encode to 28 chars; the two trailing alphabet bytes are not a full group
        encoded = base64.b64encode(b"twenty-one bytes long")
        results = extract_base64(wrap(encoded + b"Qk"))
        assert [c.value for c in results] == ["twenty-one bytes long"]
        assert results[0].raw_length == 28

    def test_short_runs_ignored(self):
        assert extract_base64(wrap(base64.b64encode(b"tiny"))) == []

    def test_min_length_on_decoded_text(self):
        data = wrap(base64.b64encode(b"fifteen chars!!"))
        assert extract_base64(data, min_length=15)
        assert extract_base64(data, min_length=16) == []

    def test_filter(self):
        data = wrap(base64.b64encode(b"first decoded string")) + \
            wrap(base64.b64encode(b"second decoded string"))
        kept = extract_base64(data, filter_pattern=re.compile("^second"))
        assert [c.value for c in kept] == ["second decoded string"]

    def test_empty(self):
        assert extract_base64(b"") == []
