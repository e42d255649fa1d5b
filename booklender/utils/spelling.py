import re
from typing import Iterable, List, Optional
from rapidfuzz.distance import Levenshtein

from booklender.config import MAX_EDIT_DISTANCE, MIN_CORRECTION_LENGTH

# Latin letters, digits and CJK ideographs survive normalization
_STRIP_PATTERN = re.compile(r"[^a-zA-Z0-9\u4e00-\u9fa5]")


# Normalize a single word (lowercase, drop punctuation)
def normalize_token(word: str) -> str:
    if not isinstance(word, str):
        return ""
    return _STRIP_PATTERN.sub("", word.lower())


# Split free text into normalized, non-empty tokens
def tokenize(text: str) -> List[str]:
    if not isinstance(text, str):
        return []
    tokens = (normalize_token(w) for w in text.split())
    return [t for t in tokens if t]


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance, unit cost for insert, delete and substitute."""
    return Levenshtein.distance(a, b)


# Closest dictionary term by edit distance
def find_closest_word(word: str, terms: Iterable[str], max_distance: int = MAX_EDIT_DISTANCE) -> Optional[str]:
    """
    Full scan over terms. Only a strictly smaller distance replaces the
    current best, so the earliest term wins a tie.
    Words shorter than MIN_CORRECTION_LENGTH are never corrected.
    """
    if len(word) < MIN_CORRECTION_LENGTH:
        return None

    best = None
    best_distance = max_distance + 1

    for candidate in terms:
        distance = edit_distance(word, candidate)
        if distance < best_distance:
            best_distance = distance
            best = candidate

    return best
