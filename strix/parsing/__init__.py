"""Input loading and header parsing."""

from .loader import open_buffer, get_basic_info, calculate_file_hashes
from .sections import SectionMap, parse_sections, detect_format, section_for_offset

__all__ = [
    'open_buffer',
    'get_basic_info',
    'calculate_file_hashes',
    'SectionMap',
    'parse_sections',
    'detect_format',
    'section_for_offset',
]
