"""Settings for the AniList search source.

Loaded from environment variables (or a local .env file) with the
``ANIMATCH_ANILIST_`` prefix, e.g. ``ANIMATCH_ANILIST_PER_PAGE=50``. AniList's
public GraphQL API needs no credentials.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class AniListSettings(BaseSettings):
    """Endpoint and paging settings for AniList."""

    api_url: str = "https://graphql.anilist.co"
    per_page: int = 25
    timeout: float = 10.0

    model_config = SettingsConfigDict(
        env_prefix="ANIMATCH_ANILIST_", env_file=".env", extra="ignore"
    )
