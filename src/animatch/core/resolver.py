"""Title match resolver.

Given a query and a search source, fetch the first page of results, score
every anime candidate against the query and decide:

- NoMatch when the page holds no anime at all,
- ConfidentMatch when the best score is above CONFIDENCE_THRESHOLD,
- Ambiguous otherwise.

Only the first page is ever inspected, even when the provider reports more
pages.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Iterable

from animatch.core.fetching_agent import FetchingAgent
from animatch.errors import SearchTransportError
from animatch.models.decision import (
    Ambiguous,
    ConfidentMatch,
    MatchDecision,
    NoMatch,
    ScoredCandidate,
)
from animatch.models.links import AnimeLink, ResultItem
from animatch.models.query import MatchQuery
from animatch.search.base import FIRST_PAGE, SearchSource
from animatch.utils.debug import debug, info

CONFIDENCE_THRESHOLD = 0.998

Scorer = Callable[[MatchQuery, AnimeLink], float]


def default_scorer(query: MatchQuery, candidate: AnimeLink) -> float:
    """Score with the query's reference when present, else by plain title."""
    return query.score(candidate.title)


def select_best(scored: Iterable[ScoredCandidate]) -> ScoredCandidate | None:
    """Return the highest-scoring candidate; the first one wins ties."""
    best: ScoredCandidate | None = None
    for item in scored:
        if best is None or item.score > best.score:
            best = item
    return best


class TitleMatchResolver:
    """Resolve free-text titles to a single anime, or ask for disambiguation.

    The resolver keeps no state between runs; each call to :meth:`resolve`
    opens its own provider and releases it before returning.
    """

    def __init__(
        self,
        *,
        threshold: float = CONFIDENCE_THRESHOLD,
        scorer: Scorer = default_scorer,
    ) -> None:
        self.threshold = threshold
        self.scorer = scorer

    async def resolve(self, query: MatchQuery, source: SearchSource) -> MatchDecision:
        """Search *source* for *query* and decide on a match.

        Raises:
            SearchTransportError: The source failed to deliver the first page.
            asyncio.CancelledError: The run was cancelled; the provider has
                been stopped.
        """
        debug(f"Resolving {query.title!r} on source {source.name!r}")
        agent = FetchingAgent.search(query.title, source)
        try:
            items = await agent.fetch_page(FIRST_PAGE)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            raise SearchTransportError.wrap(exc, query)
        finally:
            agent.cancel()
        return self.decide(query, items)

    def score_candidates(
        self, query: MatchQuery, items: Iterable[ResultItem]
    ) -> list[ScoredCandidate]:
        """Score the anime among *items*, preserving arrival order."""
        return [
            ScoredCandidate(candidate=item, score=self.scorer(query, item))
            for item in items
            if isinstance(item, AnimeLink)
        ]

    def decide(self, query: MatchQuery, items: Iterable[ResultItem]) -> MatchDecision:
        """Turn one page of results into a decision. Pure function of its inputs."""
        scored = self.score_candidates(query, items)
        best = select_best(scored)
        if best is None:
            info(f"No anime found for {query.title!r}")
            return NoMatch(query)

        info(
            f'Found an anime "{best.candidate.title}" with {best.score:.4f} confidence'
        )
        if best.score > self.threshold:
            return ConfidentMatch(query, best)

        # sorted() is stable, so equal scores keep arrival order.
        ranked = tuple(sorted(scored, key=lambda s: s.score, reverse=True))
        return Ambiguous(query, best, ranked)
