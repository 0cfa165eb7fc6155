"""
Rolls a finished result set up into a weighted threat score.
"""
from collections import Counter

from strix.core.classifier import CREDENTIAL_CATEGORIES
from strix.core.models import ApiGroup, Source, ThreatDetail, ThreatLevel, ThreatResult


API_GROUP_WEIGHTS = {
    ApiGroup.INJECTION: 5,
    ApiGroup.EVASION: 4,
    ApiGroup.PRIVILEGE: 4,
    ApiGroup.SERVICE: 3,
    ApiGroup.PROCESS: 2,
    ApiGroup.NETWORK: 2,
    ApiGroup.CRYPTO: 2,
    ApiGroup.REGISTRY: 1,
    ApiGroup.FILE: 1,
}
DEFAULT_GROUP_WEIGHT = 1

HIGH_ENTROPY_THRESHOLD = 5.0
HIGH_ENTROPY_WEIGHT = 2
CREDENTIAL_WEIGHT = 3
XOR_WEIGHT = 4
BASE64_WEIGHT = 1

# Inclusive lower bounds, highest first
LEVEL_THRESHOLDS = (
    (70, ThreatLevel.CRITICAL),
    (30, ThreatLevel.HIGH),
    (10, ThreatLevel.MEDIUM),
)


def score_to_level(score):
    for lower_bound, level in LEVEL_THRESHOLDS:
        if score >= lower_bound:
            return level
    return ThreatLevel.LOW


def calculate_risk_level(candidates):
    """
    Look at everything we extracted and give it a threat rating.

    Each indicator contributes count x weight; the per-indicator breakdown
    is kept on the result so the score can be explained.
    """
    details = {}

    api_counts = Counter(c.api_group for c in candidates if c.api_group is not None)
    for group, count in api_counts.items():
        details[group.value] = ThreatDetail(
            count=count, weight=API_GROUP_WEIGHTS.get(group, DEFAULT_GROUP_WEIGHT),
        )

    high_entropy = sum(1 for c in candidates if c.entropy >= HIGH_ENTROPY_THRESHOLD)
    if high_entropy:
        details['high_entropy_strings'] = ThreatDetail(high_entropy, HIGH_ENTROPY_WEIGHT)

    # Once per string, even if it matched several credential detectors
    credentials = sum(1 for c in candidates if c.categories & CREDENTIAL_CATEGORIES)
    if credentials:
        details['credentials'] = ThreatDetail(credentials, CREDENTIAL_WEIGHT)

    xored = sum(1 for c in candidates if c.source is Source.XOR)
    if xored:
        details['xor_obfuscated'] = ThreatDetail(xored, XOR_WEIGHT)

    decoded = sum(1 for c in candidates if c.source is Source.BASE64)
    if decoded:
        details['base64_decoded'] = ThreatDetail(decoded, BASE64_WEIGHT)

    score = sum(detail.score for detail in details.values())
    return ThreatResult(level=score_to_level(score), score=score, details=details)
