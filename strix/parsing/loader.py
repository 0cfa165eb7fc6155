"""
Handles loading input files and basic file information.
"""
import hashlib
import logging
import mmap
import os
from contextlib import contextmanager

from strix.errors import InputFileError

logger = logging.getLogger(__name__)

# Anything at least this big gets mapped instead of read
MMAP_THRESHOLD = 1_000_000


@contextmanager
def open_buffer(file_path):
    """
    Yield the file's bytes for the duration of a scan.

    Small files are read into memory. Big ones are mapped read-only and the
    mapping is released when the ``with`` block exits, so nothing may keep a
    view on the buffer past that point.
    """
    try:
        size = os.path.getsize(file_path)
    except OSError as e:
        raise InputFileError(file_path, e.strerror or str(e)) from e
    if os.path.isdir(file_path):
        raise InputFileError(file_path, "is a directory")

    if size == 0:
        yield b''
        return

    try:
        handle = open(file_path, 'rb')
    except OSError as e:
        raise InputFileError(file_path, e.strerror or str(e)) from e

    with handle:
        if size < MMAP_THRESHOLD:
            try:
                data = handle.read()
            except OSError as e:
                raise InputFileError(file_path, e.strerror or str(e)) from e
            yield data
            return

        try:
            mapped = mmap.mmap(handle.fileno(), 0, access=mmap.ACCESS_READ)
        except (OSError, ValueError) as e:
            logger.debug("mmap failed for %s (%s), reading instead", file_path, e)
            yield handle.read()
            return

        logger.debug("mapped %s (%d bytes)", file_path, size)
        try:
            yield mapped
        finally:
            mapped.close()


def get_basic_info(file_path, data):
    """Fundamental information about the input file."""
    return {
        'filename': os.path.basename(file_path),
        'file_size': len(data),
    }


def calculate_file_hashes(data):
    """Generate hash values for the buffer."""
    return {
        'md5': hashlib.md5(data).hexdigest(),
        'sha1': hashlib.sha1(data).hexdigest(),
        'sha256': hashlib.sha256(data).hexdigest(),
    }
