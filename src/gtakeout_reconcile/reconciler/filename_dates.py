"""Date inference from media filenames.

Last-resort tier for media without a sidecar: camera and messenger apps
embed the capture date as YYYYMMDD (optionally separated) in the name,
e.g. ``IMG_20190704_153012.jpg`` or ``2018-06-17 01_54_22.png``.
"""

import re
from datetime import datetime
from typing import Optional

MIN_NAME_LENGTH = 8

_COUNTERS = [f"({n})" for n in range(5)]
_NOISE_TOKENS = ["edited", "IMG", "VID", "JPEG", "EFFECTS"]
_TOKEN_SEPARATORS = ["-", "_"]
_DATE_SEPARATORS = ["-", "_", " "]

_EIGHT_DIGITS_RE = re.compile(r"\d{8}", re.ASCII)


def normalize_name(stem: str) -> str:
    """Strip counters and app prefixes that would otherwise split a date run."""
    for counter in _COUNTERS:
        stem = stem.replace(counter, "")
    for token in _NOISE_TOKENS:
        for separator in _TOKEN_SEPARATORS:
            stem = stem.replace(f"{separator}{token}", "")
            stem = stem.replace(f"{token}{separator}", "")
    return stem


def parse_eight_digit_date(text: str) -> Optional[datetime]:
    """Parse the first run of eight digits as YYYYMMDD at local midnight.

    Only the first run is considered; an invalid calendar date there
    yields None rather than a search further along the string.
    """
    match = _EIGHT_DIGITS_RE.search(text)
    if match is None:
        return None

    digits = match.group(0)
    try:
        naive = datetime(int(digits[0:4]), int(digits[4:6]), int(digits[6:8]))
    except ValueError:
        return None
    return naive.astimezone()


def infer_date_from_filename(stem: str) -> Optional[datetime]:
    """Infer a creation date from a media file stem.

    The name is tried as is, then with each separator removed in turn
    ("-", "_", " "). The first attempt yielding a valid date wins; a
    later separator never overrides an earlier match.

    Args:
        stem: File name without extension

    Returns:
        Timezone-aware local midnight, or None when no valid date is found
    """
    name = normalize_name(stem)
    if len(name) < MIN_NAME_LENGTH:
        return None

    date = parse_eight_digit_date(name)
    if date is not None:
        return date

    for separator in _DATE_SEPARATORS:
        date = parse_eight_digit_date(name.replace(separator, ""))
        if date is not None:
            return date

    return None
