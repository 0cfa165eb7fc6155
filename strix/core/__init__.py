"""Core extraction and classification functionality."""

from .entropy import calculate_entropy, entropy_label, get_entropy_color
from .classifier import (
    classify_string,
    suspicious_api_group,
    resolve_only,
    matches_only,
    ONLY_PRESETS,
    SUSPICIOUS_API_GROUPS,
)
from .scanner import extract_strings, SUPPORTED_ENCODINGS
from .xor import bruteforce_xor, xor_bytes
from .base64_decoder import extract_base64
from .risk_assessment import calculate_risk_level

__all__ = [
    'calculate_entropy',
    'entropy_label',
    'get_entropy_color',
    'classify_string',
    'suspicious_api_group',
    'resolve_only',
    'matches_only',
    'ONLY_PRESETS',
    'SUSPICIOUS_API_GROUPS',
    'extract_strings',
    'SUPPORTED_ENCODINGS',
    'bruteforce_xor',
    'xor_bytes',
    'extract_base64',
    'calculate_risk_level',
]
