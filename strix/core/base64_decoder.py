"""
Finds Base64-encoded text embedded in a binary and decodes it.
"""
import base64
import binascii
import logging
import re

from strix.core.models import Source
from strix.core.scanner import build_candidate

logger = logging.getLogger(__name__)

# Whole 4-char groups only, so a stray alphabet byte after a blob stays outside the run
BASE64_RUN = re.compile(
    rb"(?:[A-Za-z0-9+/]{4}){5,}(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?"
)
PRINTABLE_RATIO = 0.7

_PRINTABLE_BYTES = frozenset(range(0x20, 0x7F)) | {0x09, 0x0A, 0x0D}


def printable_ratio(decoded):
    if not decoded:
        return 0.0
    printable = sum(1 for byte in decoded if byte in _PRINTABLE_BYTES)
    return printable / len(decoded)


def decode_base64_run(raw):
    """Pad to a multiple of four and decode; None if it isn't valid Base64."""
    padded = raw + b'=' * (-len(raw) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except binascii.Error:
        return None


def extract_base64(data, min_length=4, sections=(), filter_pattern=None):
    """
    Decode every Base64-looking run and keep the ones that turn out to be text.

    The candidate offset is where the *encoded* run starts in the file.
    """
    results = []
    rejected = 0

    for match in BASE64_RUN.finditer(data):
        start, end = match.span()
        decoded = decode_base64_run(bytes(data[start:end]))
        if decoded is None:
            rejected += 1
            continue
        if len(decoded) < min_length or printable_ratio(decoded) < PRINTABLE_RATIO:
            continue

        value = decoded.decode('latin-1')
        if filter_pattern is not None and not filter_pattern.search(value):
            continue

        results.append(build_candidate(
            value, start, end - start, 'base64', sections, source=Source.BASE64,
        ))

    logger.debug("base64: %d decoded, %d invalid run(s) skipped", len(results), rejected)
    return results
