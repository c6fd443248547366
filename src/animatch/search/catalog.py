"""Offline catalogue search source.

Serves search results from a local JSON file, or from items given directly.
A catalogue file is either a list of result items or an object with an
``items`` list; every item carries a ``kind`` (see animatch.models.links).

Example::

    {"items": [
        {"kind": "anime", "title": "Attack on Titan",
         "link": "https://example.org/aot", "source": "catalog"},
        {"kind": "listing", "service": "anilist", "identifier": "16498",
         "name": "Shingeki no Kyojin"}
    ]}

Results are delivered on the next event loop iteration, like a network source
would, so callers exercise the same asynchronous path.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Iterable, Sequence

from pydantic import ValidationError

from animatch.core.fuzzy_matcher import normalize_title
from animatch.errors import SourceConfigurationError
from animatch.models.links import (
    RESULT_ITEMS_ADAPTER,
    AnimeLink,
    EpisodeLink,
    ListingReference,
    ResultItem,
)
from animatch.search.base import PaginatedResultProvider, SearchSource

DEFAULT_PAGE_SIZE = 10


def _searchable_names(item: ResultItem) -> list[str]:
    if isinstance(item, AnimeLink):
        return [item.title, *item.alternate_titles]
    if isinstance(item, EpisodeLink):
        return [item.anime.title, item.name]
    if isinstance(item, ListingReference):
        return [item.name]
    return []


def matches_keyword(item: ResultItem, keyword: str) -> bool:
    """True when every keyword token appears in one of the item's names."""
    tokens = normalize_title(keyword).split()
    if not tokens:
        return False
    for name in _searchable_names(item):
        name_tokens = normalize_title(name).split()
        if all(any(t in n for n in name_tokens) for t in tokens):
            return True
    return False


class CatalogResultProvider(PaginatedResultProvider):
    """Pages over the catalogue items matching one keyword."""

    def __init__(self, keyword: str, items: Sequence[ResultItem], page_size: int) -> None:
        super().__init__(keyword)
        self._matches = [item for item in items if matches_keyword(item, keyword)]
        self._page_size = page_size
        self._loaded: set[int] = set()
        self._handles: list[asyncio.Handle] = []
        self._cancelled = False

    @property
    def total_pages(self) -> int:
        return max(1, -(-len(self._matches) // self._page_size))

    @property
    def more_available(self) -> bool:
        return not self._cancelled and len(self._loaded) < self.total_pages

    @property
    def available_pages(self) -> int:
        return len(self._loaded)

    def results_on_page(self, page: int) -> Sequence[ResultItem]:
        if page not in self._loaded:
            return []
        start = page * self._page_size
        return self._matches[start : start + self._page_size]

    def request_page(self, page: int) -> None:
        if self._cancelled:
            return
        handle = asyncio.get_running_loop().call_soon(self._deliver, page)
        self._handles.append(handle)

    def cancel(self) -> None:
        self._cancelled = True
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()

    def _deliver(self, page: int) -> None:
        if self._cancelled or self.delegate is None:
            return
        if page < 0 or page >= self.total_pages:
            self.delegate.on_error(
                IndexError(f"Page {page} is out of range for {self.keyword!r}"), self
            )
            return
        self._loaded.add(page)
        self.delegate.page_incoming(page, self)


class CatalogSearchSource(SearchSource):
    """Search source over an in-memory list of result items."""

    name = "catalog"

    def __init__(
        self, items: Iterable[ResultItem], *, page_size: int = DEFAULT_PAGE_SIZE
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.items: list[ResultItem] = list(items)
        self.page_size = page_size

    @classmethod
    def from_data(cls, data: Any, **kwargs: Any) -> CatalogSearchSource:
        """Build a source from decoded JSON (a list, or a dict with ``items``).

        Raises:
            SourceConfigurationError: An item does not validate.
        """
        if isinstance(data, dict):
            data = data.get("items", [])
        try:
            items = RESULT_ITEMS_ADAPTER.validate_python(data)
        except ValidationError as exc:
            raise SourceConfigurationError(f"Invalid catalogue items: {exc}") from exc
        return cls(items, **kwargs)

    @classmethod
    def from_file(cls, path: Path, **kwargs: Any) -> CatalogSearchSource:
        """Load a catalogue JSON file.

        Raises:
            SourceConfigurationError: The file is missing, unreadable or not
                valid UTF-8 JSON.
        """
        if not path.exists():
            raise SourceConfigurationError(f"Catalogue file not found: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise SourceConfigurationError(f"Invalid catalogue file {path}: {exc}") from exc
        return cls.from_data(data, **kwargs)

    def search(self, keyword: str) -> CatalogResultProvider:
        return CatalogResultProvider(keyword, self.items, self.page_size)
