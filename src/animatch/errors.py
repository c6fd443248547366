"""Exception hierarchy for AniMatch.

- SearchTransportError: the search source failed (network, parse). Carries
  the original error as ``__cause__``. Never retried by the library.
- NoMatchFound: the search succeeded but produced no anime candidates. Not a
  transport failure, but delivered through the same failure channel so callers
  can present it the same way.

Both derive from ResolutionError, whose ``is_fetching_error`` flag lets callers
tell "fetching failed" apart from "fetching succeeded with zero matches".
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from animatch.models.query import MatchQuery


class AniMatchError(Exception):
    """Base class for all AniMatch errors."""


class SourceConfigurationError(AniMatchError):
    """Raised when a search source cannot be built from configuration."""


class ResolutionError(AniMatchError):
    """A resolution run ended without a usable match."""

    is_fetching_error: bool = False

    def __init__(self, message: str, query: MatchQuery | None = None) -> None:
        super().__init__(message)
        self.query = query


class SearchTransportError(ResolutionError):
    """The search source reported an error while fetching results."""

    is_fetching_error = True

    @classmethod
    def wrap(
        cls, error: BaseException, query: MatchQuery | None = None
    ) -> SearchTransportError:
        """Return *error* unchanged if it already is a transport error, else wrap it."""
        if isinstance(error, SearchTransportError):
            if error.query is None:
                error.query = query
            return error
        wrapped = cls(f"Fetching search results failed: {error}", query)
        wrapped.__cause__ = error
        return wrapped


class NoMatchFound(ResolutionError):
    """The search returned no anime that could be matched."""

    def __init__(self, query: MatchQuery | None = None) -> None:
        super().__init__("No matching anime found", query)
