"""
Main analyzer that coordinates all the extraction components.
"""
import logging

from strix.config import ScanConfig
from strix.core import (
    bruteforce_xor, calculate_risk_level, extract_base64, extract_strings, matches_only,
)
from strix.parsing import calculate_file_hashes, get_basic_info, open_buffer, parse_sections
from strix.reporting import render_report, save_report

logger = logging.getLogger(__name__)


def scan_buffer(data, config, sections=(), cancel=None, progress=None):
    """
    Run every requested extractor over one buffer and merge the results.

    Order is: each encoding as listed, then Base64, then XOR. With
    ``config.dedup`` the first occurrence of a value wins across all of them.
    """
    filter_pattern = config.compile_filter()
    wanted = config.only_categories()
    seen = set()
    merged = []

    def absorb(candidates):
        for candidate in candidates:
            if config.dedup and candidate.value in seen:
                continue
            if wanted is not None and not matches_only(candidate, wanted):
                continue
            seen.add(candidate.value)
            merged.append(candidate)

    for encoding in config.encodings:
        logger.info("encoding: %s", encoding)
        absorb(extract_strings(
            data, encoding, config.min_length, sections,
            filter_pattern=filter_pattern, show_context=config.context,
        ))

    if config.base64:
        logger.info("base64 decoding...")
        absorb(extract_base64(data, config.min_length, sections, filter_pattern=filter_pattern))

    if config.xor:
        logger.info("xor bruteforce: testing 255 keys...")
        absorb(bruteforce_xor(
            data, config.min_length, sections, filter_pattern=filter_pattern,
            cancel=cancel, progress=progress,
        ))

    return merged


class StringAnalyzer:
    """Coordinates all extraction tasks for one file."""

    def __init__(self, file_path, config=None):
        self.file_path = file_path
        self.config = config or ScanConfig()

        # Results storage
        self.basic_info = {}
        self.file_hashes = {}
        self.sections = None
        self.candidates = []
        self.threat = None

    def run_full_analysis(self, cancel=None, progress=None):
        """
        Load the file once and run every configured step over it.

        Raises InputFileError if the file can't be read and ConfigError if
        the configuration is bad; header damage never stops the scan.
        """
        self.config.validate()
        logger.info("scanning: %s", self.file_path)

        with open_buffer(self.file_path) as data:
            self.basic_info = get_basic_info(self.file_path, data)
            self.file_hashes = calculate_file_hashes(data)
            self.analyze_sections(data)
            self.candidates = scan_buffer(
                data, self.config, self.sections, cancel=cancel, progress=progress,
            )

        self.calculate_risk()
        logger.info("%s: %d string(s), threat %s (%d)", self.basic_info['filename'],
                    len(self.candidates), self.threat.level.value, self.threat.score)
        return self.candidates

    def analyze_sections(self, data):
        """Parse the section table, whatever shape it's in."""
        self.sections = parse_sections(data)
        if self.sections:
            logger.info("format: %s | %d sections", self.sections.format.value, len(self.sections))

    def calculate_risk(self):
        self.threat = calculate_risk_level(self.candidates)
        return self.threat

    def generate_report(self, format_type='text', **options):
        """Generate a report in the specified format."""
        return render_report(self, format_type, **options)

    def save_report(self, output_path, format_type='text', **options):
        """Save report to a file."""
        return save_report(self, output_path, format_type, **options)
