"""
Tests for strix.core.models
"""

from __future__ import annotations

import dataclasses

import pytest

from strix.core.models import ApiGroup, Candidate, Category, EntropyLabel, Section, Source
from helpers import make_candidate


class TestSection:
    def test_contains_half_open(self):
        section = Section(".data", 0x100, 0x10)
        assert section.contains(0x100)
        assert section.contains(0x10F)
        assert not section.contains(0x110)
        assert not section.contains(0xFF)

    def test_zero_size_contains_nothing(self):
        assert not Section(".bss", 0x100, 0).contains(0x100)


class TestCandidate:
    def test_length_is_character_count(self):
        candidate = make_candidate("héllo")
        assert candidate.length == 5

    def test_needs_a_category(self):
        with pytest.raises(ValueError):
            make_candidate(categories=())

    def test_negative_offset(self):
        with pytest.raises(ValueError):
            make_candidate(offset=-1)

    def test_xor_key_only_with_xor_source(self):
        with pytest.raises(ValueError):
            make_candidate(source=Source.RAW, xor_key=3)

    def test_xor_source_needs_key(self):
        with pytest.raises(ValueError):
            Candidate(value="x", offset=0, encoding="ascii",
                      categories=frozenset({Category.GENERAL}), entropy=0.0,
                      entropy_label=EntropyLabel.LOW, source=Source.XOR)

    @pytest.mark.parametrize("key", [0, 256])
    def test_xor_key_range(self, key):
        with pytest.raises(ValueError):
            make_candidate(source=Source.XOR, xor_key=key)

    def test_frozen(self):
        candidate = make_candidate()
        with pytest.raises(dataclasses.FrozenInstanceError):
            candidate.value = "other"

    def test_to_dict_minimal(self):
        d = make_candidate("abc", categories=(Category.URL, Category.DOMAIN)).to_dict()
        assert d["categories"] == ["domain", "url"]
        assert d["source"] == "raw"
        assert d["length"] == 3
        assert "xor_key" not in d
        assert "section" not in d

    def test_to_dict_optional_fields(self):
        d = make_candidate("abc", source=Source.XOR, xor_key=0x42,
                           api_group=ApiGroup.NETWORK).to_dict()
        assert d["xor_key"] == 0x42
        assert d["api_group"] == "network"
        assert d["source"] == "xor"
