"""Fuzzy title matcher for AniMatch.

Uses rapidfuzz to measure how close two anime titles are. Titles from
different sources disagree on punctuation, season suffixes, romanisation and
capitalisation, so comparison happens on normalised text and mixes several
token-based ratios.
"""

import re
import unicodedata

from rapidfuzz import fuzz

# Highest score a pair of titles can get without being equal after
# normalisation. Keeps inexact matches below the confidence threshold.
NEAR_EXACT = 0.99

_PUNCTUATION = re.compile(r"[^\w\s]|_", re.UNICODE)
_LEADING_ARTICLE = re.compile(r"^the\s+")
_TRAILING_YEAR = re.compile(r"\s*\(?\b(19|20)\d{2}\b\)?\s*$")
_TRAILING_SEASON = re.compile(
    r"\s+(?:season\s*\d+|s\d+|\d+(?:st|nd|rd|th)\s+season|part\s*\d+)$"
)


def normalize_title(title: str) -> str:
    """Normalise a title for comparison.

    NFKC folding, case folding, punctuation to spaces, collapsed whitespace.

    Example:
        >>> normalize_title("  Re:ZERO -Starting Life-  ")
        're zero starting life'
    """
    if not title:
        return ""
    text = unicodedata.normalize("NFKC", title).casefold()
    text = _PUNCTUATION.sub(" ", text)
    return " ".join(text.split())


def _fold_symbols(text: str) -> str:
    """NFKC and case fold *text*, dropping whitespace but keeping symbols."""
    return "".join(unicodedata.normalize("NFKC", text or "").casefold().split())


def _tokens(text: str) -> set[str]:
    return set(text.split())


def _strip_decorations(text: str) -> str:
    """Drop a leading article and a trailing year or season marker."""
    text = _LEADING_ARTICLE.sub("", text)
    text = _TRAILING_YEAR.sub("", text)
    text = _TRAILING_SEASON.sub("", text)
    return text.strip()


def _fuzzy_score(a: str, b: str) -> float:
    """Blend rapidfuzz ratios for two normalised, non-equal titles."""
    a_words, b_words = _tokens(a), _tokens(b)

    token_sort = fuzz.token_sort_ratio(a, b) / 100.0
    token_set = fuzz.token_set_ratio(a, b) / 100.0
    partial = fuzz.partial_ratio(a, b) / 100.0

    # token_set rates any subset as a perfect match; scale it by how much of
    # the larger title the smaller one actually covers.
    small, large = sorted((len(a_words), len(b_words)))
    if small < large:
        token_set *= (small / large) * 0.8

    best = max(token_sort, token_set)

    shorter, longer = sorted((len(a), len(b)))
    if shorter >= longer * 0.6:
        best = max(best, partial)
    else:
        best = max(best, partial * (shorter / longer))

    if a_words and b_words:
        shared = a_words & b_words
        overlap = len(shared) / max(len(a_words), len(b_words))
        if not shared:
            best *= 0.3
        elif min(len(a_words), len(b_words)) > 1 and overlap > 0.5:
            best = max(best, overlap * 0.85)

    length_ratio = shorter / longer
    if best < 0.5 and length_ratio < 0.6:
        best *= 0.5

    return best


def title_proximity(a: str, b: str) -> float:
    """Return how close two titles are, from 0.0 (unrelated) to 1.0 (same).

    1.0 is returned only when both titles normalise to the same text; every
    other pair is capped at :data:`NEAR_EXACT`. Titles that differ only by a
    leading "The", a trailing year or a season marker score 0.95. Titles made
    only of symbols ("!!!") are compared on their folded raw text; a blank
    title scores 0.0 against anything.

    Args:
        a: First title (usually the query).
        b: Second title (usually a candidate).

    Returns:
        A score in ``[0.0, 1.0]``.
    """
    a_norm, b_norm = normalize_title(a), normalize_title(b)
    if not a_norm and not b_norm:
        # Symbol-only titles: compare the folded raw text instead
        a_raw, b_raw = _fold_symbols(a), _fold_symbols(b)
        return 1.0 if a_raw and a_raw == b_raw else 0.0
    if not a_norm or not b_norm:
        return 0.0
    if a_norm == b_norm:
        return 1.0

    a_bare, b_bare = _strip_decorations(a_norm), _strip_decorations(b_norm)
    if a_bare and a_bare == b_bare:
        return 0.95

    score = _fuzzy_score(a_norm, b_norm)
    return max(0.0, min(NEAR_EXACT, score))
