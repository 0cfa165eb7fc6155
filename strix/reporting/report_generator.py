"""
Creates scan reports in different formats (text, JSON, CSV, HTML).
"""
import csv
import html
import io
import json
import logging
import os
from collections import Counter
from datetime import datetime

from colorama import Fore, Style

from strix.core.entropy import get_entropy_color
from strix.core.models import Category, Source, ThreatLevel

logger = logging.getLogger(__name__)

DISPLAY_ENTROPY = 4.5
HTML_VALUE_LIMIT = 500

CATEGORY_COLORS = {
    Category.URL: Fore.BLUE,
    Category.EMAIL: Fore.CYAN,
    Category.IPV4: Fore.YELLOW,
    Category.IPV6: Fore.YELLOW,
    Category.DOMAIN: Fore.BLUE,
    Category.WIN_PATH: Fore.GREEN,
    Category.UNIX_PATH: Fore.GREEN,
    Category.REGISTRY: Fore.YELLOW,
    Category.DLL_API: Fore.MAGENTA,
    Category.ERROR: Fore.RED,
    Category.CRYPTO: Fore.MAGENTA,
    Category.BASE64_BLOB: Fore.CYAN,
    Category.HASH_MD5: Fore.YELLOW,
    Category.HASH_SHA1: Fore.YELLOW,
    Category.HASH_SHA256: Fore.YELLOW,
    Category.CREDENTIAL: Fore.RED,
    Category.BASIC_AUTH: Fore.RED,
    Category.BEARER_TOKEN: Fore.RED,
    Category.PORT: Fore.CYAN,
}

LEVEL_COLORS = {
    ThreatLevel.LOW: Fore.GREEN,
    ThreatLevel.MEDIUM: Fore.YELLOW,
    ThreatLevel.HIGH: Fore.RED,
    ThreatLevel.CRITICAL: Fore.RED,
}

HTML_LEVEL_COLORS = {
    ThreatLevel.LOW: '#27ae60',
    ThreatLevel.MEDIUM: '#f39c12',
    ThreatLevel.HIGH: '#e67e22',
    ThreatLevel.CRITICAL: '#e74c3c',
}


def _paint(text, color, enabled):
    if not enabled or not color:
        return text
    return f"{color}{text}{Style.RESET_ALL}"


def format_size(size):
    for unit in ('B', 'KB', 'MB', 'GB'):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def _sorted_categories(candidate):
    return sorted(candidate.categories, key=lambda c: c.value)


def generate_text_report(candidates, show_offsets=False, show_context=False, color=False):
    """One line per string, tagged with section, source and categories."""
    lines = []

    for c in candidates:
        parts = []
        if show_offsets:
            parts.append(_paint(f"0x{c.offset:08X}", Style.DIM, color))
        if c.section:
            parts.append(_paint(f"[{c.section}]", Style.DIM, color))
        if c.source is not Source.RAW:
            tag = f"[{c.source.value}"
            if c.source is Source.XOR:
                tag += f" 0x{c.xor_key:02X}"
            tag += "]"
            parts.append(_paint(tag, Fore.RED if c.source is Source.XOR else Fore.CYAN, color))

        tags = [_paint(cat.value, CATEGORY_COLORS.get(cat), color)
                for cat in _sorted_categories(c) if cat is not Category.GENERAL]
        if tags:
            parts.append(' '.join(tags))
        if c.entropy >= DISPLAY_ENTROPY:
            parts.append(_paint(f"H:{c.entropy:.1f}", get_entropy_color(c.entropy), color))

        parts.append(c.value)
        lines.append('  '.join(parts))

        if show_context and (c.hex_before or c.hex_after):
            lines.append(f"    {_paint('before:', Style.DIM, color)} {c.hex_before or ''}")
            lines.append(f"    {_paint('after:', Style.DIM, color)}  {c.hex_after or ''}")

    return "\n".join(lines)


def generate_json_report(candidates, file_path, sections=(), threat=None):
    """Everything as a JSON document."""
    payload = {
        'file': file_path,
        'count': len(candidates),
        'threat': threat.to_dict() if threat is not None else None,
        'sections': [s.to_dict() for s in sections],
        'strings': [c.to_dict() for c in candidates],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def generate_csv_report(candidates):
    """Flat CSV, one row per string."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator='\n')
    writer.writerow(['offset', 'encoding', 'section', 'categories', 'entropy',
                     'source', 'xor_key', 'api_group', 'value'])
    for c in candidates:
        writer.writerow([
            c.offset,
            c.encoding,
            c.section or '',
            ';'.join(cat.value for cat in _sorted_categories(c)),
            f"{c.entropy:.2f}",
            c.source.value,
            c.xor_key if c.xor_key is not None else '',
            c.api_group.value if c.api_group is not None else '',
            c.value,
        ])
    return buf.getvalue()


def _summary_counts(candidates):
    return {
        'categories': Counter(cat.value for c in candidates for cat in c.categories),
        'sources': Counter(c.source.value for c in candidates),
        'high_entropy': sum(1 for c in candidates if c.entropy >= DISPLAY_ENTROPY),
        'suspicious': sum(1 for c in candidates if c.api_group is not None),
    }


def generate_stats_report(candidates, file_path, sections=(), color=False):
    """Summary block: totals, sources, categories and the section table."""
    counts = _summary_counts(candidates)
    width = 54
    lines = [
        "=" * width,
        _paint(os.path.basename(file_path), Style.BRIGHT, color),
        "-" * width,
        f"Total strings:       {len(candidates):8d}",
        f"High entropy (>=4.5):{counts['high_entropy']:8d}",
        f"Suspicious APIs:     {counts['suspicious']:8d}",
        "-" * width,
        "Sources:",
    ]
    for source, count in sorted(counts['sources'].items()):
        lines.append(f"  {source:<12}  {count:8d}")
    lines.append("-" * width)
    lines.append("Top categories:")
    for name, count in counts['categories'].most_common():
        lines.append(f"  {_paint(f'{name:<20}', CATEGORY_COLORS.get(Category(name)), color)}  {count:8d}")
    if sections:
        lines.append("-" * width)
        lines.append("Sections:")
        for s in sections:
            lines.append(f"  {s.name:<12}  offset=0x{s.offset:08X}  size={format_size(s.size)}")
    lines.append("=" * width)
    return "\n".join("  " + line for line in lines)


def generate_threat_report(threat, color=False):
    """Threat level plus the per-indicator breakdown."""
    width = 54
    lines = [
        "=" * width,
        _paint("THREAT ASSESSMENT", Style.BRIGHT, color),
        "=" * width,
        f"Level: {_paint(threat.level.value, LEVEL_COLORS[threat.level], color)} "
        f"(score: {threat.score})",
        "-" * width,
    ]
    if threat.details:
        lines.append(f"{'Indicator':<28} {'Count':>6} {'Weight':>7} {'Score':>6}")
        lines.append("-" * width)
        for name, detail in sorted(threat.details.items(), key=lambda kv: -kv[1].score):
            lines.append(f"{name:<28} {detail.count:6d} {detail.weight:5d}x {detail.score:6d}")
    else:
        lines.append("No suspicious indicators found.")
    lines.append("=" * width)
    return "\n".join("  " + line for line in lines)


def generate_html_report(candidates, file_path, sections=(), threat=None, file_size=None):
    """Create an HTML report that looks nice in a browser."""
    counts = _summary_counts(candidates)
    level = threat.level if threat is not None else ThreatLevel.LOW
    score = threat.score if threat is not None else 0
    badge_color = HTML_LEVEL_COLORS[level]
    name = html.escape(os.path.basename(file_path))
    size_text = format_size(file_size) if file_size is not None else "unknown size"

    page = f"""<!DOCTYPE html>
<html>
<head>
    <title>Strix Strings - {name}</title>
    <meta charset="UTF-8">
    <style>
        body {{ font-family: Arial, sans-serif; margin: 20px; background: #f5f5f5; }}
        .header {{ background: #2c3e50; color: white; padding: 20px; border-radius: 8px; margin-bottom: 20px; }}
        .section {{ background: white; padding: 20px; margin-bottom: 20px; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }}
        .risk-badge {{ display: inline-block; padding: 10px 20px; border-radius: 5px; font-weight: bold; color: white; background: {badge_color}; }}
        .stats {{ display: flex; gap: 30px; }}
        .stat b {{ display: block; font-size: 22px; }}
        table {{ width: 100%; border-collapse: collapse; margin-top: 10px; }}
        th, td {{ padding: 6px 10px; text-align: left; border-bottom: 1px solid #ddd; vertical-align: top; }}
        th {{ background: #34495e; color: white; }}
        .code {{ font-family: 'Courier New', monospace; word-break: break-all; }}
        .tag {{ display: inline-block; padding: 1px 6px; margin: 1px; border-radius: 3px; background: #ecf0f1; font-size: 11px; }}
        .xor {{ background: #fadbd8; }}
        .base64 {{ background: #d6eaf8; }}
    </style>
</head>
<body>
    <div class="header">
        <h1>Strix String Report</h1>
        <p>Target: {name} ({size_text}, {len(sections)} sections)</p>
        <p>Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}</p>
    </div>

    <div class="section">
        <h2>Threat Assessment</h2>
        <span class="risk-badge">{level.value} ({score})</span>
        <div class="stats">
            <div class="stat"><b>{len(candidates)}</b>Total strings</div>
            <div class="stat"><b>{counts['high_entropy']}</b>High entropy</div>
            <div class="stat"><b>{counts['suspicious']}</b>Suspicious APIs</div>
            <div class="stat"><b>{counts['sources'].get('base64', 0)}</b>Base64 decoded</div>
            <div class="stat"><b>{counts['sources'].get('xor', 0)}</b>XOR decrypted</div>
        </div>
"""

    if threat is not None and threat.details:
        page += "        <table>\n            <tr><th>Indicator</th><th>Count</th><th>Weight</th><th>Score</th></tr>\n"
        for indicator, detail in threat.details.items():
            page += (f"            <tr><td>{html.escape(indicator)}</td><td>{detail.count}</td>"
                     f"<td>{detail.weight}</td><td>{detail.score}</td></tr>\n")
        page += "        </table>\n"

    page += """    </div>

    <div class="section">
        <h2>Sections</h2>
        <table>
            <tr><th>Name</th><th>Offset</th><th>Size</th><th>Virtual Addr</th></tr>
"""
    for s in sections:
        page += (f"            <tr><td>{html.escape(s.name)}</td><td>0x{s.offset:X}</td>"
                 f"<td>0x{s.size:X}</td><td>0x{s.virtual_address:X}</td></tr>\n")

    page += """        </table>
    </div>

    <div class="section">
        <h2>Strings</h2>
        <table>
            <tr><th>Offset</th><th>String</th><th>Enc</th><th>Section</th><th>Category</th><th>Entropy</th><th>Source</th></tr>
"""
    for c in candidates:
        tags = ''.join(f"<span class='tag'>{cat.value}</span>" for cat in _sorted_categories(c))
        source = c.source.value
        if c.source is Source.XOR:
            source += f" 0x{c.xor_key:02X}"
        page += (
            f"            <tr><td class='code'>0x{c.offset:X}</td>"
            f"<td class='code'>{html.escape(c.value[:HTML_VALUE_LIMIT])}</td>"
            f"<td>{c.encoding}</td><td>{html.escape(c.section or '-')}</td><td>{tags}</td>"
            f"<td>{c.entropy:.2f} ({c.entropy_label.value})</td>"
            f"<td><span class='tag {c.source.value}'>{source}</span></td></tr>\n"
        )

    page += """        </table>
    </div>
</body>
</html>
"""
    return page


def render_report(analyzer, format_type='text', show_offsets=False, show_context=False,
                  color=False):
    """Render one analyzed file in the requested format."""
    sections = analyzer.sections or ()
    if format_type == 'json':
        return generate_json_report(analyzer.candidates, analyzer.file_path, sections, analyzer.threat)
    elif format_type == 'csv':
        return generate_csv_report(analyzer.candidates)
    elif format_type == 'html':
        return generate_html_report(analyzer.candidates, analyzer.file_path, sections,
                                    analyzer.threat, analyzer.basic_info.get('file_size'))
    elif format_type == 'text':
        return generate_text_report(analyzer.candidates, show_offsets, show_context, color)
    raise ValueError(f"unknown report format: {format_type}")


def save_report(analyzer, output_path, format_type='text', **options):
    """Save a report to a file. Returns False if it couldn't be written."""
    content = render_report(analyzer, format_type, **options)
    try:
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(content)
    except OSError as e:
        logger.error("could not write report %s: %s", output_path, e)
        return False
    logger.info("report: %s", output_path)
    return True
