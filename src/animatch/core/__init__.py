"""Core matching functionality for animatch.

- title_proximity / normalize_title: the title similarity metric.
- TitleMatchResolver (core.resolver): first-page search, scoring and decision.
- FetchingAgent (core.fetching_agent): asyncio bridge to result providers.
- FetchingSession (core.session): one run in flight per caller, callbacks.

Only the metric is re-exported here; the other modules depend on
animatch.models, which itself imports the metric.
"""

from animatch.core.fuzzy_matcher import normalize_title, title_proximity

__all__ = ["normalize_title", "title_proximity"]
