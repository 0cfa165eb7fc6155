"""
Data containers shared by the scanner, recoverers and reports.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Category(str, Enum):
    URL = "url"
    EMAIL = "email"
    IPV4 = "ipv4"
    IPV6 = "ipv6"
    DOMAIN = "domain"
    WIN_PATH = "win_path"
    UNIX_PATH = "unix_path"
    REGISTRY = "registry"
    DLL_API = "dll_api"
    ERROR = "error"
    CRYPTO = "crypto"
    BASE64_BLOB = "base64_blob"
    HASH_MD5 = "hash_md5"
    HASH_SHA1 = "hash_sha1"
    HASH_SHA256 = "hash_sha256"
    CREDENTIAL = "credential"
    BASIC_AUTH = "basic_auth"
    BEARER_TOKEN = "bearer_token"
    PORT = "port"
    GENERAL = "general"


class ApiGroup(str, Enum):
    PROCESS = "process"
    INJECTION = "injection"
    REGISTRY = "registry"
    NETWORK = "network"
    FILE = "file"
    CRYPTO = "crypto"
    EVASION = "evasion"
    PRIVILEGE = "privilege"
    SERVICE = "service"


class Source(str, Enum):
    RAW = "raw"
    BASE64 = "base64"
    XOR = "xor"


class EntropyLabel(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    ELEVATED = "elevated"
    HIGH = "high"
    VERY_HIGH = "very high"


class ThreatLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class BinaryFormat(str, Enum):
    PE = "PE"
    ELF = "ELF"
    UNKNOWN = "UNKNOWN"


class ParseOutcome(str, Enum):
    OK = "ok"
    UNSUPPORTED_FORMAT = "unsupported_format"
    TRUNCATED = "truncated"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class Section:
    """A named byte range declared by the file header."""
    name: str
    offset: int
    size: int
    virtual_address: int = 0

    def contains(self, offset: int) -> bool:
        return self.offset <= offset < self.offset + self.size

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "offset": self.offset,
            "size": self.size,
            "virtual_address": self.virtual_address,
        }


@dataclass(frozen=True)
class Candidate:
    """One extracted string plus everything we worked out about it."""
    value: str
    offset: int
    encoding: str
    categories: frozenset
    entropy: float
    entropy_label: EntropyLabel
    source: Source = Source.RAW
    section: Optional[str] = None
    api_group: Optional[ApiGroup] = None
    xor_key: Optional[int] = None
    raw_length: int = 0
    hex_before: Optional[str] = None
    hex_after: Optional[str] = None
    length: int = field(init=False)

    def __post_init__(self):
        if not self.categories:
            raise ValueError("candidate needs at least one category")
        if self.offset < 0:
            raise ValueError(f"negative offset {self.offset}")
        if (self.source is Source.XOR) != (self.xor_key is not None):
            raise ValueError("xor_key must be set exactly when source is xor")
        if self.xor_key is not None and not 1 <= self.xor_key <= 255:
            raise ValueError(f"xor key out of range: {self.xor_key}")
        object.__setattr__(self, "categories", frozenset(self.categories))
        object.__setattr__(self, "length", len(self.value))

    def to_dict(self) -> dict:
        d = {
            "value": self.value,
            "offset": self.offset,
            "encoding": self.encoding,
            "categories": sorted(c.value for c in self.categories),
            "entropy": round(self.entropy, 4),
            "entropy_label": self.entropy_label.value,
            "source": self.source.value,
            "length": self.length,
        }
        if self.section is not None:
            d["section"] = self.section
        if self.api_group is not None:
            d["api_group"] = self.api_group.value
        if self.xor_key is not None:
            d["xor_key"] = self.xor_key
        if self.hex_before is not None:
            d["hex_before"] = self.hex_before
        if self.hex_after is not None:
            d["hex_after"] = self.hex_after
        return d


@dataclass(frozen=True)
class ThreatDetail:
    count: int
    weight: int

    @property
    def score(self) -> int:
        return self.count * self.weight


@dataclass(frozen=True)
class ThreatResult:
    level: ThreatLevel
    score: int
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "level": self.level.value,
            "score": self.score,
            "details": {
                name: {"count": d.count, "weight": d.weight, "score": d.score}
                for name, d in self.details.items()
            },
        }
