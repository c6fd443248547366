"""Bridge between callback-driven result providers and asyncio.

A :class:`FetchingAgent` installs itself as the delegate of one
:class:`~animatch.search.base.PaginatedResultProvider` and turns each page
request into an awaitable. The outcome is handed to a :class:`CompletionSink`
that the agent references only weakly: if whoever awaited the page goes away,
late provider callbacks are dropped instead of keeping the caller alive.

Providers may call back from any thread. The sink always hops back onto the
event loop it was created on, so results are delivered on the caller's loop
and serialised with everything else running there.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import Any, Callable

from animatch.models.links import ResultItem
from animatch.search.base import FIRST_PAGE, PaginatedResultProvider, SearchSource

logger = logging.getLogger(__name__)


class CompletionSink:
    """One-shot receiver for the outcome of a page request."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._future: asyncio.Future[list[ResultItem]] = loop.create_future()

    @property
    def done(self) -> bool:
        return self._future.done()

    def resolve(self, items: list[ResultItem]) -> None:
        self._deliver(self._future.set_result, items)

    def reject(self, error: BaseException) -> None:
        self._deliver(self._future.set_exception, error)

    def cancel(self) -> None:
        if not self._future.done():
            self._future.cancel()

    def _deliver(self, setter: Callable[[Any], None], value: Any) -> None:
        if self._loop.is_closed():
            return

        def apply() -> None:
            if not self._future.done():
                setter(value)

        self._loop.call_soon_threadsafe(apply)

    def __await__(self):
        return self._future.__await__()


class FetchingAgent:
    """Drives a single result provider on behalf of one resolution run.

    The agent owns the provider until :meth:`cancel` is called. Cancelling is
    idempotent, stops the provider, detaches the agent from it and guarantees
    no further result is delivered.
    """

    def __init__(self, provider: PaginatedResultProvider) -> None:
        self._provider: PaginatedResultProvider | None = provider
        self._sink_ref: weakref.ref[CompletionSink] | None = None
        self._pending_page: int | None = None
        self._cancelled = False
        provider.delegate = self

    @classmethod
    def search(cls, keyword: str, source: SearchSource) -> FetchingAgent:
        """Open a provider for *keyword* on *source* and wrap it."""
        return cls(source.search(keyword))

    @property
    def provider(self) -> PaginatedResultProvider | None:
        return self._provider

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def more_available(self) -> bool:
        return self._provider is not None and self._provider.more_available

    async def fetch_page(self, page: int = FIRST_PAGE) -> list[ResultItem]:
        """Request *page* and wait for its items.

        Raises:
            asyncio.CancelledError: The agent was cancelled before or while
                waiting.
            Exception: Whatever error the provider reported.
        """
        provider = self._provider
        if self._cancelled or provider is None:
            raise asyncio.CancelledError("fetching agent was cancelled")

        sink = CompletionSink(asyncio.get_running_loop())
        self._sink_ref = weakref.ref(sink)
        self._pending_page = page
        logger.debug("Requesting page %d for %r", page, provider.keyword)
        try:
            provider.request_page(page)
            return await sink
        except asyncio.CancelledError:
            self.cancel()
            raise
        finally:
            self._pending_page = None
            self._sink_ref = None

    def cancel(self) -> None:
        """Stop the provider and drop every reference to it."""
        if self._cancelled:
            return
        self._cancelled = True

        provider, self._provider = self._provider, None
        if provider is not None:
            if provider.delegate is self:
                provider.delegate = None
            provider.cancel()

        sink = self._sink_ref() if self._sink_ref is not None else None
        self._sink_ref = None
        if sink is not None:
            sink.cancel()
        logger.debug("Fetching agent cancelled")

    def _live_sink(self, provider: PaginatedResultProvider) -> CompletionSink | None:
        if self._cancelled or provider is not self._provider:
            return None
        if self._sink_ref is None:
            return None
        return self._sink_ref()

    # Delegate protocol

    def page_incoming(self, page: int, provider: PaginatedResultProvider) -> None:
        sink = self._live_sink(provider)
        if sink is None or page != self._pending_page:
            logger.debug("Dropping unrequested or late page %d", page)
            return
        sink.resolve(list(provider.results_on_page(page)))

    def on_error(self, error: BaseException, provider: PaginatedResultProvider) -> None:
        sink = self._live_sink(provider)
        if sink is None:
            logger.debug("Dropping late provider error: %s", error)
            return
        sink.reject(error)
