"""AniList GraphQL search source.

Searches anime on the AniList GraphQL API one page at a time. Each
``request_page`` call schedules a task on the running event loop; the result
is reported to the provider's delegate when the request completes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from animatch.errors import SearchTransportError
from animatch.models.links import AnimeLink, ResultItem
from animatch.search.base import FIRST_PAGE, PaginatedResultProvider, SearchSource
from animatch.search.settings import AniListSettings

logger = logging.getLogger(__name__)

SEARCH_PAGE_QUERY = """
query ($search: String, $page: Int, $perPage: Int) {
  Page(page: $page, perPage: $perPage) {
    pageInfo {
      currentPage
      hasNextPage
    }
    media(search: $search, type: ANIME) {
      id
      title {
        romaji
        english
        native
      }
      synonyms
      siteUrl
      coverImage {
        medium
      }
    }
  }
}
"""


def map_media(media: Dict[str, Any], source: str = "anilist") -> AnimeLink:
    """Map an AniList Media object to an AnimeLink.

    The display title prefers English, then romaji, then native. Every other
    name goes into ``alternate_titles``.

    Raises:
        SearchTransportError: *media* is not shaped like a Media object.
    """
    if not isinstance(media, dict):
        raise SearchTransportError(f"Malformed AniList media entry: {media!r}")
    titles = media.get("title") or {}
    if not isinstance(titles, dict):
        raise SearchTransportError(f"Malformed AniList title: {titles!r}")
    names = [titles.get("english"), titles.get("romaji"), titles.get("native")]
    names += media.get("synonyms") or []
    names = [n for n in names if n]
    title = names[0] if names else "Unknown Anime"
    alternates = tuple(dict.fromkeys(n for n in names[1:] if n != title))
    link = media.get("siteUrl") or f"https://anilist.co/anime/{media['id']}"
    cover = (media.get("coverImage") or {}).get("medium")
    return AnimeLink(
        title=title,
        link=link,
        source=source,
        image=cover,
        alternate_titles=alternates,
    )


class AniListResultProvider(PaginatedResultProvider):
    """Pages of AniList search results for one keyword."""

    def __init__(
        self,
        keyword: str,
        settings: AniListSettings,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(keyword)
        self.settings = settings
        self._client = client
        self._pages: Dict[int, List[ResultItem]] = {}
        self._has_next = True
        self._tasks: set[asyncio.Task[None]] = set()
        self._cancelled = False

    @property
    def more_available(self) -> bool:
        return self._has_next and not self._cancelled

    @property
    def available_pages(self) -> int:
        return len(self._pages)

    def results_on_page(self, page: int) -> Sequence[ResultItem]:
        return self._pages.get(page, [])

    def request_page(self, page: int) -> None:
        if self._cancelled:
            return
        task = asyncio.get_running_loop().create_task(self._load(page))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def cancel(self) -> None:
        self._cancelled = True
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(
                self.settings.api_url, json=payload, timeout=self.settings.timeout
            )
        async with httpx.AsyncClient() as client:
            return await client.post(
                self.settings.api_url, json=payload, timeout=self.settings.timeout
            )

    async def _load(self, page: int) -> None:
        variables = {
            "search": self.keyword,
            # AniList pages start at 1
            "page": page - FIRST_PAGE + 1,
            "perPage": self.settings.per_page,
        }
        try:
            response = await self._post(
                {"query": SEARCH_PAGE_QUERY, "variables": variables}
            )
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict):
                raise SearchTransportError("AniList response is not a JSON object")
            if data.get("errors"):
                raise SearchTransportError(
                    f"AniList error: {data['errors'][0].get('message', 'unknown')}"
                )
            page_data = (data.get("data") or {}).get("Page")
            if not isinstance(page_data, dict):
                raise SearchTransportError("AniList response has no Page data")
            media = page_data.get("media") or []
            if not isinstance(media, list):
                raise SearchTransportError("AniList Page.media is not a list")
            items: List[ResultItem] = [map_media(m) for m in media]
            has_next = bool((page_data.get("pageInfo") or {}).get("hasNextPage"))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            # Every failure settles the request, or the caller would wait forever
            logger.debug("AniList page %d failed: %r", page, exc)
            if not self._cancelled and self.delegate is not None:
                self.delegate.on_error(exc, self)
            return

        if self._cancelled:
            return
        self._pages[page] = items
        self._has_next = has_next
        logger.debug("AniList page %d: %d results", page, len(items))
        if self.delegate is not None:
            self.delegate.page_incoming(page, self)


class AniListSearchSource(SearchSource):
    """Search source backed by the public AniList GraphQL API."""

    name = "anilist"

    def __init__(
        self,
        settings: Optional[AniListSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings or AniListSettings()
        self._client = client

    def search(self, keyword: str) -> AniListResultProvider:
        return AniListResultProvider(keyword, self.settings, self._client)
