"""
Pulls printable text runs out of a raw buffer, one encoding at a time.
"""
import logging
import re

from strix.core.classifier import classify_string, suspicious_api_group
from strix.core.entropy import calculate_entropy, entropy_label
from strix.core.models import Candidate, Source
from strix.parsing.sections import section_for_offset

logger = logging.getLogger(__name__)

CONTEXT_BYTES = 16

# Byte grammar per encoding; {min} is filled with the minimum run length
ENCODING_PATTERNS = {
    'ascii': rb'[\x20-\x7e\x09]{%d,}',
    'utf-8': (
        rb'(?:[\x20-\x7e\x09]'
        rb'|[\xc2-\xdf][\x80-\xbf]'
        rb'|\xe0[\xa0-\xbf][\x80-\xbf]'
        rb'|[\xe1-\xec][\x80-\xbf]{2}'
        rb'|\xed[\x80-\x9f][\x80-\xbf]'
        rb'|[\xee-\xef][\x80-\xbf]{2}){%d,}'
    ),
    'utf-16-le': rb'(?:[\x20-\x7e\x09]\x00){%d,}',
    'utf-16-be': rb'(?:\x00[\x20-\x7e\x09]){%d,}',
}

SUPPORTED_ENCODINGS = tuple(ENCODING_PATTERNS)

_pattern_cache = {}


def encoding_pattern(encoding, min_length):
    """Compiled run pattern for an encoding, built once per (encoding, length)."""
    key = (encoding, min_length)
    pattern = _pattern_cache.get(key)
    if pattern is None:
        try:
            template = ENCODING_PATTERNS[encoding]
        except KeyError:
            raise ValueError(f"unsupported encoding: {encoding}") from None
        pattern = re.compile(template % min_length)
        _pattern_cache[key] = pattern
    return pattern


def decode_run(raw, encoding):
    """Turn a matched byte run into text."""
    if encoding == 'ascii':
        return raw.decode('ascii')
    if encoding == 'utf-8':
        return raw.decode('utf-8', errors='replace')
    if encoding == 'utf-16-le':
        return raw[0:len(raw) - len(raw) % 2:2].decode('ascii')
    if encoding == 'utf-16-be':
        return raw[1:len(raw):2].decode('ascii')
    raise ValueError(f"unsupported encoding: {encoding}")


def format_hex(chunk):
    return ' '.join(f'{byte:02X}' for byte in chunk)


def hex_context(data, offset, length, window=CONTEXT_BYTES):
    """Hex dump of the bytes just before and just after a match."""
    start = max(offset - window, 0)
    after_start = min(offset + length, len(data))
    end = min(offset + length + window, len(data))
    return format_hex(bytes(data[start:offset])), format_hex(bytes(data[after_start:end]))


def build_candidate(value, offset, raw_length, encoding, sections, source=Source.RAW,
                    xor_key=None, context=None):
    """Attach section, entropy and classification to a decoded string."""
    entropy = calculate_entropy(value)
    hex_before = hex_after = None
    if context is not None:
        hex_before, hex_after = context
    return Candidate(
        value=value,
        offset=offset,
        encoding=encoding,
        categories=classify_string(value),
        entropy=entropy,
        entropy_label=entropy_label(entropy),
        source=source,
        section=section_for_offset(sections, offset),
        api_group=suspicious_api_group(value),
        xor_key=xor_key,
        raw_length=raw_length,
        hex_before=hex_before,
        hex_after=hex_after,
    )


def extract_strings(data, encoding='ascii', min_length=4, sections=(), filter_pattern=None,
                    show_context=False):
    """
    Find every maximal run of *encoding* text at least *min_length*
    characters long and return them as Candidates in file order.

    *filter_pattern* is a compiled ``str`` regex; runs it doesn't match are
    dropped before any classification work is done.
    """
    pattern = encoding_pattern(encoding, min_length)
    results = []

    for match in pattern.finditer(data):
        start, end = match.span()
        value = decode_run(bytes(data[start:end]), encoding)

        if filter_pattern is not None and not filter_pattern.search(value):
            continue

        context = hex_context(data, start, end - start) if show_context else None
        results.append(build_candidate(
            value, start, end - start, encoding, sections, context=context,
        ))

    logger.debug("%s: %d string(s)", encoding, len(results))
    return results
