"""Sidecar candidate generation.

Takeout names sidecars inconsistently: counters move behind the media
extension, long names get truncated, HEIC sidecars drop the media
extension, JPG/PNG extensions are shortened to one letter and ``-edited``
copies share the original's sidecar. Each quirk is one rule below.

Every rule is a pure ``(media_path, candidates) -> candidates`` transform
that only adds entries, so later rules see a superset of earlier output.
No rule touches the filesystem. Callers try candidates in list order.

Examples:
    >>> generate_candidates(Path("/album/my_bracket(1).png"))[0]
    PosixPath('/album/my_bracket.png(1).json')
    >>> generate_candidates(Path("/album/IMG_2433.jpg"))[0]
    PosixPath('/album/IMG_2433.jpg.json')
"""

import re
from pathlib import Path, PurePath
from typing import Callable, List

CandidateRule = Callable[[PurePath, List[str]], List[str]]

JSON_SUFFIX = ".json"
TRUNCATION_DEPTH = 7

# Counters up to these values are tried for the shortened extensions
JPG_COUNTER_LIMIT = 1000
PNG_COUNTER_LIMIT = 2000

_COUNTER_RE = re.compile(r"\(([^()]*)\)$")


def _extension(media_path: PurePath) -> str:
    return media_path.suffix[1:]


def numbered_suffix_rule(media_path: PurePath, candidates: List[str]) -> List[str]:
    """``name(N).ext`` -> ``name.ext(N).json``, tried before everything else."""
    stem = media_path.stem
    ext = _extension(media_path)
    if not ext or not stem.endswith(")"):
        return candidates

    match = _COUNTER_RE.search(stem)
    if match is None:
        return candidates
    counter = match.group(1)
    if not (counter.isascii() and counter.isdigit()):
        return candidates

    base = stem[:len(stem) - len(counter) - 2]
    reordered = str(media_path.parent / f"{base}.{ext}({int(counter)}){JSON_SUFFIX}")
    return [reordered] + candidates


def heic_rule(media_path: PurePath, candidates: List[str]) -> List[str]:
    """HEIC sidecars sometimes carry no media extension."""
    if _extension(media_path).lower() != "heic":
        return candidates

    added = []
    for candidate in candidates:
        added.append(candidate.replace(".heic.json", JSON_SUFFIX))
        added.append(candidate.replace(".HEIC.json", JSON_SUFFIX))
    return candidates + added


def _shortened_extension_rule(ext: str, letter: str, counter_limit: int) -> CandidateRule:
    """Build the rule for sidecars named ``name.j.json`` / ``name.j(N).json``."""
    lower_tail = f".{ext}{JSON_SUFFIX}"
    upper_tail = f".{ext.upper()}{JSON_SUFFIX}"
    short_tail = f".{letter}{JSON_SUFFIX}"

    def rule(media_path: PurePath, candidates: List[str]) -> List[str]:
        if _extension(media_path).lower() != ext:
            return candidates

        added = []
        for candidate in candidates:
            for i in range(1, counter_limit):
                counter = f"({i})"
                if counter not in candidate:
                    continue
                base = candidate.replace(lower_tail, "").replace(upper_tail, "")
                base = base[:max(0, len(base) - len(str(i)) - 2)]
                added.append(f"{base}.{letter}{counter}{JSON_SUFFIX}")

            added.append(candidate.replace(lower_tail, short_tail).replace(upper_tail, short_tail))
        return candidates + added

    rule.__name__ = f"{ext}_shortened_extension_rule"
    rule.__doc__ = f"``.{ext}`` sidecars may be named ``.{letter}.json`` or ``.{letter}(N).json``."
    return rule


jpg_rule = _shortened_extension_rule("jpg", "j", JPG_COUNTER_LIMIT)
png_rule = _shortened_extension_rule("png", "p", PNG_COUNTER_LIMIT)


def edited_rule(media_path: PurePath, candidates: List[str]) -> List[str]:
    """Edited copies share the original's sidecar."""
    return candidates + [c.replace("-edited", "") for c in candidates if "-edited" in c]


def double_dot_rule(media_path: PurePath, candidates: List[str]) -> List[str]:
    """Names ending in a dot produce ``..json`` sidecars, or lose the dot."""
    added = []
    for candidate in candidates:
        if "..json" in candidate:
            added.append(candidate.replace("..json", JSON_SUFFIX))
        if ".." in candidate:
            added.append(candidate.replace("..", "."))
    return candidates + added


def truncation_rule(media_path: PurePath, candidates: List[str]) -> List[str]:
    """Long names are cut short; drop up to six trailing stem characters.

    Stops at a closing parenthesis so counters are never cut in half.
    """
    added = []
    for candidate in candidates:
        path = PurePath(candidate)
        stem = path.stem
        for k in range(TRUNCATION_DEPTH):
            if len(stem) <= k:
                break
            if stem[len(stem) - 1 - k] == ")":
                break
            added.append(str(path.parent / f"{stem[:len(stem) - k]}{JSON_SUFFIX}"))
    return candidates + added


CANDIDATE_RULES: List[CandidateRule] = [
    numbered_suffix_rule,
    heic_rule,
    jpg_rule,
    png_rule,
    edited_rule,
    double_dot_rule,
    truncation_rule,
]


def generate_candidates(media_path: Path) -> List[Path]:
    """Generate sidecar paths for a media file, highest priority first.

    Duplicates are kept; the first existing, unclaimed candidate wins.

    Args:
        media_path: Path to the media file

    Returns:
        Ordered list of candidate sidecar paths
    """
    candidates = [f"{media_path}{JSON_SUFFIX}"]
    for rule in CANDIDATE_RULES:
        candidates = rule(media_path, candidates)
    return [Path(c) for c in candidates]
