"""
Single-byte XOR bruteforce.

Malware often hides its config by XOR-ing it with one repeating byte. We
try every key, re-scan the decoded buffer for ASCII runs and keep only the
runs that look like something an analyst would care about; without that
filter 255 keys bury the real hits in noise.
"""
import logging
import re

import numpy as np

from strix.core.models import Source
from strix.core.scanner import build_candidate, encoding_pattern

logger = logging.getLogger(__name__)

XOR_MIN_LENGTH = 6
XOR_KEYS = range(1, 256)

INTERESTING_PATTERN = re.compile(
    r"https?://|\.exe\b|\.dll\b|\.bat\b|\.cmd\b|\.ps1\b|cmd\.exe|powershell"
    r"|\\windows\\|password|username|admin|HKEY_"
    r"|BEGIN\s+(?:RSA|CERTIFICATE|PRIVATE)|api[_\-]?key|secret|token"
    r"|\.onion\b|socket|connect",
    re.IGNORECASE,
)


def xor_bytes(data, key):
    """XOR every byte of *data* with *key*; applying it twice gives the input back."""
    view = np.frombuffer(data, dtype=np.uint8)
    return np.bitwise_xor(view, key).tobytes()


def is_interesting(text):
    return INTERESTING_PATTERN.search(text) is not None


def bruteforce_xor(data, min_length=4, sections=(), filter_pattern=None, cancel=None,
                   progress=None):
    """
    Try keys 1..255 against the whole buffer.

    Results are deduplicated by decoded text across the sweep; keys run in
    ascending order so the lowest key producing a string is the one kept.
    *cancel* is anything with an ``is_set()`` method and is checked before
    every key. *progress* is called with each finished key.
    """
    if len(data) == 0:
        return []

    pattern = encoding_pattern('ascii', max(min_length, XOR_MIN_LENGTH))
    source = np.frombuffer(data, dtype=np.uint8)
    scratch = bytearray(len(source))
    decoded = np.frombuffer(scratch, dtype=np.uint8)
    seen = set()
    results = []

    try:
        for key in XOR_KEYS:
            if cancel is not None and cancel.is_set():
                logger.info("xor bruteforce cancelled at key 0x%02X", key)
                break

            np.bitwise_xor(source, key, out=decoded)
            # The scratch array is reused for the next key, so copy out what we keep
            for match in pattern.finditer(scratch):
                start, end = match.span()
                value = bytes(scratch[start:end]).decode('ascii')
                if value in seen or not is_interesting(value):
                    continue
                if filter_pattern is not None and not filter_pattern.search(value):
                    continue
                seen.add(value)
                results.append(build_candidate(
                    value, start, end - start, 'ascii', sections,
                    source=Source.XOR, xor_key=key,
                ))

            if progress is not None:
                progress(key)
    finally:
        # Drop our views so a memory-mapped input can be closed afterwards
        del source, decoded

    logger.debug("xor: %d string(s) recovered", len(results))
    return results
