"""Outcome of a resolution run.

Exactly one of these is produced per completed run:

- NoMatch: the first page held no anime candidates.
- ConfidentMatch: the best candidate scored above the confidence threshold;
  the caller can navigate to it directly.
- Ambiguous: candidates exist but none is trusted; the caller should open a
  listing seeded with the same query so the user can pick.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from animatch.errors import NoMatchFound
from animatch.models.links import AnimeLink
from animatch.models.query import MatchQuery


class ScoredCandidate(BaseModel):
    """An anime candidate with its similarity to the query."""

    model_config = ConfigDict(frozen=True)

    candidate: AnimeLink
    score: float = Field(ge=0.0, le=1.0)


def _query_dict(query: MatchQuery) -> dict[str, Any]:
    ref = query.preferred_reference
    return {
        "title": query.title,
        "preferred_reference": ref.default_name if ref is not None else None,
    }


@dataclass(frozen=True)
class NoMatch:
    query: MatchQuery

    kind = "no_match"

    def raise_for_status(self) -> None:
        raise NoMatchFound(self.query)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "query": _query_dict(self.query)}


@dataclass(frozen=True)
class ConfidentMatch:
    query: MatchQuery
    best: ScoredCandidate

    kind = "confident"

    @property
    def candidate(self) -> AnimeLink:
        return self.best.candidate

    @property
    def score(self) -> float:
        return self.best.score

    def raise_for_status(self) -> None:
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "query": _query_dict(self.query),
            "best": self.best.model_dump(),
        }


@dataclass(frozen=True)
class Ambiguous:
    query: MatchQuery
    best: ScoredCandidate
    candidates: tuple[ScoredCandidate, ...] = field(default_factory=tuple)
    """All scored candidates, best first (stable for equal scores)."""

    kind = "ambiguous"

    @property
    def candidate(self) -> AnimeLink:
        return self.best.candidate

    @property
    def score(self) -> float:
        return self.best.score

    def raise_for_status(self) -> None:
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "query": _query_dict(self.query),
            "best": self.best.model_dump(),
            "candidates": [c.model_dump() for c in self.candidates],
        }


MatchDecision = Union[NoMatch, ConfidentMatch, Ambiguous]
