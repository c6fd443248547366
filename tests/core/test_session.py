"""Tests for animatch.core.session.FetchingSession."""

import asyncio
import threading

import pytest

from animatch.core.resolver import TitleMatchResolver
from animatch.core.session import FetchingSession
from animatch.errors import NoMatchFound, SearchTransportError
from animatch.models.decision import Ambiguous, ConfidentMatch
from animatch.models.query import MatchQuery
from tests.helpers.fake_search import SpySearchSource, anime


class Recorder:
    """Collects session callbacks and the thread they ran on."""

    def __init__(self):
        self.decisions = []
        self.failures = []
        self.threads = []

    def on_decision(self, decision):
        self.decisions.append(decision)
        self.threads.append(threading.get_ident())

    def on_failure(self, error):
        self.failures.append(error)
        self.threads.append(threading.get_ident())


def make_session(source, resolver=None):
    recorder = Recorder()
    session = FetchingSession(
        source,
        on_decision=recorder.on_decision,
        on_failure=recorder.on_failure,
        resolver=resolver,
    )
    return session, recorder


@pytest.mark.asyncio
async def test_confident_match_reaches_on_decision():
    source = SpySearchSource({0: [anime("Attack on Titan")]})
    session, recorder = make_session(source)

    decision = await session.resolve(MatchQuery(title="Attack on Titan"))

    assert isinstance(decision, ConfidentMatch)
    assert recorder.decisions == [decision]
    assert recorder.failures == []
    assert session.did_perform_fetch
    assert not session.in_flight


@pytest.mark.asyncio
async def test_ambiguous_reaches_on_decision():
    source = SpySearchSource({0: [anime("Naruto"), anime("Naruto Shippuden")]})
    session, recorder = make_session(source)

    decision = await session.resolve(MatchQuery(title="Naruto Shipuden"))

    assert isinstance(decision, Ambiguous)
    assert recorder.decisions == [decision]


@pytest.mark.asyncio
async def test_no_match_is_reported_as_failure():
    source = SpySearchSource({0: []})
    session, recorder = make_session(source)
    query = MatchQuery(title="xyz123notfound")

    await session.resolve(query)

    assert recorder.decisions == []
    assert len(recorder.failures) == 1
    failure = recorder.failures[0]
    assert isinstance(failure, NoMatchFound)
    assert not failure.is_fetching_error
    assert failure.query is query
    assert session.did_perform_fetch


@pytest.mark.asyncio
async def test_transport_failure_is_tagged():
    source = SpySearchSource(auto_respond=False)
    session, recorder = make_session(source)

    task = session.start(MatchQuery(title="Naruto"))
    await asyncio.sleep(0)
    source.last_provider.deliver_error(ConnectionError("offline"))

    assert await task is None
    assert len(recorder.failures) == 1
    assert isinstance(recorder.failures[0], SearchTransportError)
    assert recorder.failures[0].is_fetching_error
    assert not session.did_perform_fetch


@pytest.mark.asyncio
async def test_cancelled_run_reports_nothing():
    source = SpySearchSource({0: [anime("Naruto")]}, auto_respond=False)
    session, recorder = make_session(source)

    task = session.start(MatchQuery(title="Naruto"))
    await asyncio.sleep(0)
    provider = source.last_provider
    session.cancel()
    session.cancel()

    provider.deliver_page(0)
    with pytest.raises(asyncio.CancelledError):
        await task
    await asyncio.sleep(0)

    assert recorder.decisions == []
    assert recorder.failures == []
    assert provider.cancelled
    assert provider.delegate is None


@pytest.mark.asyncio
async def test_new_run_cancels_previous():
    source = SpySearchSource({0: [anime("Naruto")]}, auto_respond=False)
    session, recorder = make_session(source)

    first = session.start(MatchQuery(title="Naruto"))
    await asyncio.sleep(0)
    first_provider = source.last_provider

    second = session.start(MatchQuery(title="Naruto"))
    await asyncio.sleep(0)
    second_provider = source.last_provider
    assert first_provider is not second_provider

    first_provider.deliver_page(0)
    second_provider.deliver_page(0)

    with pytest.raises(asyncio.CancelledError):
        await first
    decision = await second

    assert first_provider.cancelled
    assert recorder.decisions == [decision]
    assert recorder.failures == []


@pytest.mark.asyncio
async def test_retry_reruns_last_query():
    source = SpySearchSource({0: [anime("Naruto")]})
    session, recorder = make_session(source)
    query = MatchQuery(title="Naruto")

    await session.resolve(query)
    await session.retry()

    assert source.keywords == ["Naruto", "Naruto"]
    assert len(recorder.decisions) == 2
    assert all(d.query is query for d in recorder.decisions)


def test_retry_without_query_fails():
    session, _ = make_session(SpySearchSource())
    with pytest.raises(RuntimeError):
        session.retry()


@pytest.mark.asyncio
async def test_open_listing_uses_same_source_and_query():
    source = SpySearchSource({0: [anime("Naruto"), anime("Boruto")]})
    resolver = TitleMatchResolver(threshold=1.0)
    session, recorder = make_session(source, resolver)

    decision = await session.resolve(MatchQuery(title="Naruto"))
    assert isinstance(decision, Ambiguous)

    listing = session.open_listing()
    assert listing.keyword == "Naruto"
    assert listing is source.last_provider
    assert session.open_listing(MatchQuery(title="Boruto")).keyword == "Boruto"


def test_open_listing_without_query_fails():
    session, _ = make_session(SpySearchSource())
    with pytest.raises(RuntimeError):
        session.open_listing()


@pytest.mark.asyncio
async def test_callbacks_run_on_loop_thread():
    source = SpySearchSource({0: [anime("Naruto")]}, auto_respond=False)
    session, recorder = make_session(source)
    loop_thread = threading.get_ident()

    task = session.start(MatchQuery(title="Naruto"))
    await asyncio.sleep(0)
    worker = threading.Thread(target=source.last_provider.deliver_page, args=(0,))
    worker.start()
    worker.join()
    await asyncio.wait_for(task, timeout=2)

    assert recorder.threads == [loop_thread]


@pytest.mark.asyncio
async def test_scorer_error_propagates_without_callbacks():
    source = SpySearchSource({0: [anime("Naruto")]})
    resolver = TitleMatchResolver(scorer=lambda query, candidate: 1.5)
    session, recorder = make_session(source, resolver)

    with pytest.raises(ValueError):
        await session.resolve(MatchQuery(title="Naruto"))

    assert recorder.decisions == []
    assert recorder.failures == []
    assert not session.in_flight
