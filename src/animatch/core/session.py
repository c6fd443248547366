"""Screen-scoped episode fetching session.

A FetchingSession owns at most one resolution run. Starting a new run cancels
the one in flight. Outcomes are reported through two callbacks, always on
the event loop the run was started from:

- ``on_decision(decision)`` for ConfidentMatch and Ambiguous,
- ``on_failure(error)`` for NoMatchFound and SearchTransportError; check
  ``error.is_fetching_error`` to tell them apart.

A cancelled run never reports anything. Retrying is always a user action:
call :meth:`FetchingSession.retry` to re-run the last query.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from animatch.core.resolver import TitleMatchResolver
from animatch.errors import NoMatchFound, ResolutionError
from animatch.models.decision import Ambiguous, ConfidentMatch, MatchDecision, NoMatch
from animatch.models.query import MatchQuery
from animatch.search.base import PaginatedResultProvider, SearchSource
from animatch.utils.debug import debug

DecisionCallback = Callable[[ConfidentMatch | Ambiguous], None]
FailureCallback = Callable[[ResolutionError], None]


class FetchingSession:
    """Run title resolutions one at a time against an injected source."""

    def __init__(
        self,
        source: SearchSource,
        *,
        on_decision: DecisionCallback,
        on_failure: FailureCallback,
        resolver: Optional[TitleMatchResolver] = None,
    ) -> None:
        self.source = source
        self.on_decision = on_decision
        self.on_failure = on_failure
        self.resolver = resolver or TitleMatchResolver()
        self.did_perform_fetch = False
        self._task: asyncio.Task[Optional[MatchDecision]] | None = None
        self._last_query: MatchQuery | None = None

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def last_query(self) -> MatchQuery | None:
        return self._last_query

    def start(self, query: MatchQuery) -> asyncio.Task[Optional[MatchDecision]]:
        """Start resolving *query*, cancelling any run already in flight.

        Must be called from a running event loop. The returned task yields the
        decision, or None when the run ended in a reported failure.
        """
        if self.in_flight:
            debug("Cancelling in-flight run before starting a new one")
        self.cancel()
        self._last_query = query
        task = asyncio.get_running_loop().create_task(self._run(query))
        self._task = task
        return task

    def retry(self) -> asyncio.Task[Optional[MatchDecision]]:
        """Re-run the last query."""
        if self._last_query is None:
            raise RuntimeError("No previous query to retry")
        return self.start(self._last_query)

    def cancel(self) -> None:
        """Cancel the run in flight, if any. Safe to call repeatedly."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    def open_listing(self, query: MatchQuery | None = None) -> PaginatedResultProvider:
        """Return a provider for the disambiguation listing of *query*.

        Defaults to the last query. The listing uses the same source as the
        session.
        """
        query = query or self._last_query
        if query is None:
            raise RuntimeError("No query to list results for")
        return self.source.search(query.title)

    async def resolve(self, query: MatchQuery) -> Optional[MatchDecision]:
        """Start a run and wait for it (callbacks fire before this returns)."""
        return await self.start(query)

    def _is_current(self) -> bool:
        return self._task is not None and self._task is asyncio.current_task()

    async def _run(self, query: MatchQuery) -> Optional[MatchDecision]:
        try:
            decision = await self.resolver.resolve(query, self.source)
        except ResolutionError as exc:
            if self._is_current():
                self.on_failure(exc)
            return None

        if not self._is_current():
            return None
        self.did_perform_fetch = True
        if isinstance(decision, NoMatch):
            self.on_failure(NoMatchFound(query))
        else:
            self.on_decision(decision)
        return decision
