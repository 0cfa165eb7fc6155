"""
Calculates string entropy to spot packed, encrypted or random-looking text.
"""
import math
from collections import defaultdict
from colorama import Fore

from strix.core.models import EntropyLabel


# Lower bound of each band, checked from the top down
ENTROPY_BANDS = (
    (5.5, EntropyLabel.VERY_HIGH),
    (5.0, EntropyLabel.HIGH),
    (4.0, EntropyLabel.ELEVATED),
    (2.5, EntropyLabel.NORMAL),
)


def calculate_entropy(text):
    """Shannon entropy over the symbols of a string (or any sequence)."""
    total = len(text)
    if total <= 1:
        return 0.0

    frequency_map = defaultdict(int)
    for symbol in text:
        frequency_map[symbol] += 1

    entropy_value = 0.0
    for count in frequency_map.values():
        probability = count / total
        entropy_value -= probability * math.log2(probability)

    # A single repeated symbol comes out as -0.0
    return abs(entropy_value)


def entropy_label(entropy):
    for lower_bound, label in ENTROPY_BANDS:
        if entropy >= lower_bound:
            return label
    return EntropyLabel.LOW


def get_entropy_color(entropy):
    """Returns color based on how suspicious the entropy level is."""
    if entropy >= 5.0:
        return Fore.RED
    elif entropy >= 4.0:
        return Fore.YELLOW
    else:
        return Fore.GREEN
