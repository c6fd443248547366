"""Search result items returned by search sources.

A search source may mix several kinds of result in one page. Items are a
tagged union on ``kind``:

- AnimeLink ("anime"): a playable anime; the only kind the resolver scores.
- EpisodeLink ("episode"): a single episode of some anime.
- ListingReference ("listing"): an entry on a listing service (AniList,
  MyAnimeList, ...) rather than a playable source.

The union is discriminated so catalogue files and fixtures can be validated
with :data:`RESULT_ITEMS_ADAPTER`.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class AnimeLink(BaseModel):
    """A playable anime as seen by a search source."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["anime"] = "anime"
    title: str
    """Display title as reported by the source."""
    link: str
    """Identity used for navigation (URL or source-specific id)."""
    source: str
    """Name of the search source that produced this link."""
    image: str | None = None
    alternate_titles: tuple[str, ...] = ()
    """Other names the source knows this anime by (romaji, native, synonyms)."""


class EpisodeLink(BaseModel):
    """A single episode result."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["episode"] = "episode"
    anime: AnimeLink
    name: str
    identifier: str


class ListingReference(BaseModel):
    """A reference to an entry on a listing service."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["listing"] = "listing"
    service: str
    identifier: str
    name: str


ResultItem = Annotated[
    Union[AnimeLink, EpisodeLink, ListingReference], Field(discriminator="kind")
]

RESULT_ITEMS_ADAPTER: TypeAdapter[list[ResultItem]] = TypeAdapter(list[ResultItem])
