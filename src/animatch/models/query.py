"""Query model for a resolution run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from animatch.core.fuzzy_matcher import title_proximity


@runtime_checkable
class TitleReference(Protocol):
    """Structured, title-bearing object used to seed a resolution.

    Implementations may know several names for the same anime and should use
    all of them in :meth:`proximity`.
    """

    @property
    def default_name(self) -> str: ...

    def proximity(self, title: str) -> float: ...


class ListingTitles(BaseModel):
    """All known names of an anime on a listing service.

    Implements :class:`TitleReference`; proximity is the best score over every
    name, so aliases and romanisations count as matches.
    """

    model_config = ConfigDict(frozen=True)

    default: str
    english: str | None = None
    romaji: str | None = None
    native: str | None = None
    synonyms: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def default_name(self) -> str:
        return self.default

    @property
    def all_names(self) -> list[str]:
        """Every distinct non-empty name, default first."""
        names: list[str] = []
        for name in (self.default, self.english, self.romaji, self.native, *self.synonyms):
            if name and name not in names:
                names.append(name)
        return names

    def proximity(self, title: str) -> float:
        return max((title_proximity(name, title) for name in self.all_names), default=0.0)


@dataclass(frozen=True)
class MatchQuery:
    """A single user request to find an anime by title.

    Attributes:
        title: Free-text title used as the search keyword.
        preferred_reference: Optional structured reference whose proximity
            replaces plain string comparison when scoring candidates.
    """

    title: str
    preferred_reference: TitleReference | None = None

    @classmethod
    def from_reference(cls, reference: TitleReference) -> MatchQuery:
        """Build a query that searches by the reference's default name."""
        return cls(title=reference.default_name, preferred_reference=reference)

    def score(self, candidate_title: str) -> float:
        """Score *candidate_title* against this query."""
        if self.preferred_reference is not None:
            return self.preferred_reference.proximity(candidate_title)
        return title_proximity(self.title, candidate_title)
