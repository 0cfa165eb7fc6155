"""
Scan configuration.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from strix.core.classifier import resolve_only
from strix.core.scanner import SUPPORTED_ENCODINGS
from strix.errors import ConfigError

ALL_ENCODINGS = SUPPORTED_ENCODINGS


@dataclass
class ScanConfig:
    """Options for one scan; shared by every file in a batch."""
    min_length:  int                = 4
    encodings:   tuple              = ('ascii',)
    base64:      bool               = False
    xor:         bool               = False
    filter:      Optional[str]      = None
    ignore_case: bool               = False
    only:        Optional[tuple]    = None
    dedup:       bool               = False
    context:     bool               = False

    def validate(self) -> None:
        if self.min_length < 1:
            raise ConfigError(f"minimum length must be at least 1, got {self.min_length}")
        if not self.encodings:
            raise ConfigError("no encodings selected")
        unknown = [e for e in self.encodings if e not in SUPPORTED_ENCODINGS]
        if unknown:
            raise ConfigError(
                f"unsupported encoding(s): {', '.join(unknown)} "
                f"(choose from {', '.join(SUPPORTED_ENCODINGS)})"
            )
        self.compile_filter()

    def compile_filter(self) -> Optional[re.Pattern]:
        if not self.filter:
            return None
        flags = re.IGNORECASE if self.ignore_case else 0
        try:
            return re.compile(self.filter, flags)
        except re.error as exc:
            raise ConfigError(f"bad filter pattern {self.filter!r}: {exc}") from exc

    def only_categories(self) -> Optional[frozenset]:
        if not self.only:
            return None
        return resolve_only(self.only)
