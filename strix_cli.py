#!/usr/bin/env python3
"""
Strix CLI - Command-line interface for binary string extraction.
"""
import argparse
import logging
import sys
from colorama import Fore, Style, just_fix_windows_console

from strix import StringAnalyzer, ScanConfig, __version__
from strix.config import ALL_ENCODINGS
from strix.core.classifier import ONLY_PRESETS
from strix.errors import ConfigError, InputFileError
from strix.reporting import (
    compare, generate_diff_report, generate_stats_report, generate_threat_report,
)

logger = logging.getLogger('strix')


class ColorFormatter(logging.Formatter):
    """Prefixes records the way the console output always looked."""

    PREFIXES = {
        logging.DEBUG: (Fore.WHITE, '[.]'),
        logging.INFO: (Fore.CYAN, '[*]'),
        logging.WARNING: (Fore.YELLOW, '[!]'),
        logging.ERROR: (Fore.RED, '[!]'),
        logging.CRITICAL: (Fore.RED, '[!]'),
    }

    def __init__(self, color=True):
        super().__init__('%(message)s')
        self.color = color

    def format(self, record):
        color, prefix = self.PREFIXES.get(record.levelno, (Fore.WHITE, '[*]'))
        message = super().format(record)
        if self.color:
            return f"{color}{prefix} {message}{Style.RESET_ALL}"
        return f"{prefix} {message}"


def setup_logging(quiet=False, verbose=False, color=False):
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColorFormatter(color))
    logger.handlers[:] = [handler]
    logger.propagate = False
    if quiet:
        logger.setLevel(logging.WARNING)
    elif verbose:
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)


def build_parser():
    parser = argparse.ArgumentParser(
        prog='strix',
        description="Strix - advanced binary string extractor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
presets for --only:
  {', '.join(ONLY_PRESETS)}

Examples:
  strix file.exe -a --base64 --xor --report report.html
  strix file.exe --only urls,passwords -a --color
  strix file.exe --only suspicious --threat --color
  strix app_v1.exe --diff app_v2.exe --color
        """
    )

    parser.add_argument('files', nargs='+', metavar='file', help='Binary file(s) to scan')
    parser.add_argument('-n', '--min-length', type=int, default=4,
                        help='Minimum string length (default: 4)')
    parser.add_argument('-e', '--encoding', default='ascii', choices=ALL_ENCODINGS,
                        help='Encoding to scan for (default: ascii)')
    parser.add_argument('-a', '--all-encodings', action='store_true',
                        help='Scan all encodings')
    parser.add_argument('--base64', action='store_true', help='Decode Base64 strings')
    parser.add_argument('--xor', action='store_true',
                        help='Single-byte XOR bruteforce (slow on big files)')
    parser.add_argument('--only', help='Comma-separated categories or presets to keep')
    parser.add_argument('--diff', metavar='FILE', help='Compare strings with another file')
    parser.add_argument('-f', '--filter', help='Regex the decoded string must match')
    parser.add_argument('-i', '--ignore-case', action='store_true',
                        help='Case-insensitive filter')
    parser.add_argument('-d', '--dedup', action='store_true', help='Remove duplicates')
    parser.add_argument('-o', '--offsets', action='store_true', help='Show offsets')
    parser.add_argument('--context', action='store_true', help='Show hex context')

    output = parser.add_mutually_exclusive_group()
    output.add_argument('--json', action='store_true', help='JSON output')
    output.add_argument('--csv', action='store_true', help='CSV output')
    output.add_argument('--report', metavar='FILE', help='Write an HTML report')

    parser.add_argument('--stats', action='store_true', help='Show statistics')
    parser.add_argument('--threat', action='store_true', help='Threat assessment')
    parser.add_argument('--color', action='store_true', help='Colored output')
    parser.add_argument('-q', '--quiet', action='store_true', help='Only print results')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show detailed progress information')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def config_from_args(args):
    return ScanConfig(
        min_length=args.min_length,
        encodings=ALL_ENCODINGS if args.all_encodings else (args.encoding,),
        base64=args.base64,
        xor=args.xor,
        filter=args.filter,
        ignore_case=args.ignore_case,
        only=tuple(args.only.split(',')) if args.only else None,
        dedup=args.dedup,
        context=args.context,
    )


def _progress_printer(quiet):
    if quiet:
        return None

    def progress(key):
        if key % 32 == 0:
            sys.stderr.write('.')
            sys.stderr.flush()
        if key == 255:
            sys.stderr.write(' done\n')
    return progress


def scan_file(path, config, quiet):
    """Scan one file; returns the analyzer or None if the file was unusable."""
    analyzer = StringAnalyzer(path, config)
    try:
        analyzer.run_full_analysis(progress=_progress_printer(quiet))
    except InputFileError as e:
        logger.error("error: %s", e)
        return None
    return analyzer


def output_results(analyzer, args):
    if args.report:
        if not analyzer.save_report(args.report, 'html'):
            return False
    elif args.json:
        print(analyzer.generate_report('json'))
    elif args.csv:
        sys.stdout.write(analyzer.generate_report('csv'))
    else:
        text = analyzer.generate_report('text', show_offsets=args.offsets,
                                        show_context=args.context, color=args.color)
        if text:
            print(text)

    if args.stats:
        print(generate_stats_report(analyzer.candidates, analyzer.file_path,
                                    analyzer.sections or (), color=args.color), file=sys.stderr)
    if args.threat:
        print(generate_threat_report(analyzer.threat, color=args.color), file=sys.stderr)
    return True


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    just_fix_windows_console()
    setup_logging(args.quiet, args.verbose, args.color)

    config = config_from_args(args)
    try:
        config.validate()
    except ConfigError as e:
        logger.error("%s", e)
        return 2

    if args.diff:
        first = scan_file(args.files[0], config, args.quiet)
        second = scan_file(args.diff, config, args.quiet)
        if first is None or second is None:
            return 1
        diff = compare(first.candidates, second.candidates)
        print(generate_diff_report(diff, args.files[0], args.diff, color=args.color))
        return 0

    status = 0
    for path in args.files:
        analyzer = scan_file(path, config, args.quiet)
        if analyzer is None or not output_results(analyzer, args):
            status = 1
    return status


def main_entry():
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}[!] Scan interrupted by user{Style.RESET_ALL}", file=sys.stderr)
        sys.exit(130)


if __name__ == '__main__':
    main_entry()
