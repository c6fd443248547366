"""Search sources for animatch.

``build_search_source`` is the only place a source is picked by name; the
resolver and session always receive a source explicitly.
"""

from pathlib import Path
from typing import Optional

from animatch.errors import SourceConfigurationError
from animatch.search.anilist import AniListSearchSource
from animatch.search.base import (
    FIRST_PAGE,
    PaginatedResultProvider,
    ResultProviderDelegate,
    SearchSource,
)
from animatch.search.catalog import CatalogSearchSource
from animatch.search.settings import AniListSettings

SOURCE_NAMES: tuple[str, ...] = ("anilist", "catalog")


def build_search_source(
    name: str,
    *,
    catalog_path: Optional[Path] = None,
    per_page: Optional[int] = None,
    timeout: Optional[float] = None,
) -> SearchSource:
    """Create the search source registered under *name*.

    Raises:
        SourceConfigurationError: Unknown name, or ``catalog`` without a path.
    """
    key = name.strip().lower()
    if key == "anilist":
        settings = AniListSettings()
        if per_page is not None:
            settings.per_page = per_page
        if timeout is not None:
            settings.timeout = timeout
        return AniListSearchSource(settings)
    if key == "catalog":
        if catalog_path is None:
            raise SourceConfigurationError(
                "The catalog source needs a catalogue file "
                "(--catalog or search.catalog_path)"
            )
        if per_page is not None:
            return CatalogSearchSource.from_file(catalog_path, page_size=per_page)
        return CatalogSearchSource.from_file(catalog_path)
    raise SourceConfigurationError(
        f"Unknown search source: {name!r} (expected one of: {', '.join(SOURCE_NAMES)})"
    )


__all__ = [
    "AniListSearchSource",
    "AniListSettings",
    "CatalogSearchSource",
    "FIRST_PAGE",
    "PaginatedResultProvider",
    "ResultProviderDelegate",
    "SOURCE_NAMES",
    "SearchSource",
    "build_search_source",
]
