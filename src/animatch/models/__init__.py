"""Domain models for the animatch application."""

from animatch.models.decision import (
    Ambiguous,
    ConfidentMatch,
    MatchDecision,
    NoMatch,
    ScoredCandidate,
)
from animatch.models.links import (
    RESULT_ITEMS_ADAPTER,
    AnimeLink,
    EpisodeLink,
    ListingReference,
    ResultItem,
)
from animatch.models.query import ListingTitles, MatchQuery, TitleReference

__all__ = [
    "Ambiguous",
    "AnimeLink",
    "ConfidentMatch",
    "EpisodeLink",
    "ListingReference",
    "ListingTitles",
    "MatchDecision",
    "MatchQuery",
    "NoMatch",
    "RESULT_ITEMS_ADAPTER",
    "ResultItem",
    "ScoredCandidate",
    "TitleReference",
]
