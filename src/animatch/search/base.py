"""Base abstractions for search sources.

A SearchSource turns a keyword into a PaginatedResultProvider. Providers are
callback driven: ``request_page`` starts a fetch and the result arrives later
through the provider's ``delegate``. Every concrete source (AniList, offline
catalogue, test fakes) implements these interfaces so the resolver stays
transport agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol, Sequence

from animatch.models.links import ResultItem

FIRST_PAGE = 0


class ResultProviderDelegate(Protocol):
    """Receiver of provider events."""

    def page_incoming(self, page: int, provider: PaginatedResultProvider) -> None:
        """Called when *page* has been loaded and can be read."""

    def on_error(self, error: BaseException, provider: PaginatedResultProvider) -> None:
        """Called when loading a page failed."""


class PaginatedResultProvider(ABC):
    """Paginated results for one keyword.

    Pages are numbered from :data:`FIRST_PAGE`. After :meth:`cancel` the
    provider must not notify its delegate again.
    """

    def __init__(self, keyword: str) -> None:
        self.keyword = keyword
        self.delegate: ResultProviderDelegate | None = None

    @property
    @abstractmethod
    def more_available(self) -> bool:
        """Whether another page can be requested."""

    @property
    @abstractmethod
    def available_pages(self) -> int:
        """Number of pages loaded so far."""

    @abstractmethod
    def request_page(self, page: int) -> None:
        """Start loading *page*. The outcome is reported to the delegate."""

    @abstractmethod
    def results_on_page(self, page: int) -> Sequence[ResultItem]:
        """Return the items of an already loaded *page*."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop any in-flight work. Safe to call more than once."""

    def more(self) -> None:
        """Request the next page that has not been loaded yet."""
        self.request_page(self.available_pages)


class SearchSource(ABC):
    """A place anime can be searched for (a site, an API, a catalogue)."""

    name: str = "unknown"

    @abstractmethod
    def search(self, keyword: str) -> PaginatedResultProvider:
        """Return a provider for *keyword*. Must not perform I/O."""
        raise NotImplementedError
