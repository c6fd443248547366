"""Tests for animatch.core.fetching_agent."""

import asyncio
import threading

import pytest

from animatch.core.fetching_agent import CompletionSink, FetchingAgent
from tests.helpers.fake_search import SpyResultProvider, SpySearchSource, anime


@pytest.mark.asyncio
async def test_fetch_page_returns_items():
    source = SpySearchSource({0: [anime("Naruto")]})
    agent = FetchingAgent.search("Naruto", source)

    items = await agent.fetch_page()

    assert [i.title for i in items] == ["Naruto"]
    assert source.last_provider.delegate is agent


@pytest.mark.asyncio
async def test_page_from_worker_thread_is_delivered_on_loop():
    provider = SpyResultProvider("Naruto", pages={0: [anime("Naruto")]})
    agent = FetchingAgent(provider)
    loop_thread = threading.get_ident()
    seen_threads: list[int] = []

    async def fetch():
        items = await agent.fetch_page(0)
        seen_threads.append(threading.get_ident())
        return items

    task = asyncio.create_task(fetch())
    await asyncio.sleep(0)
    worker = threading.Thread(target=provider.deliver_page, args=(0,))
    worker.start()
    worker.join()

    items = await asyncio.wait_for(task, timeout=2)
    assert items[0].title == "Naruto"
    assert seen_threads == [loop_thread]


@pytest.mark.asyncio
async def test_unrequested_page_is_dropped():
    provider = SpyResultProvider(
        "Naruto", pages={0: [anime("Wrong")], 1: [anime("Right")]}
    )
    agent = FetchingAgent(provider)
    task = asyncio.create_task(agent.fetch_page(1))
    await asyncio.sleep(0)

    provider.deliver_page(0)
    await asyncio.sleep(0)
    assert not task.done()

    provider.deliver_page(1)
    items = await asyncio.wait_for(task, timeout=2)
    assert items[0].title == "Right"


@pytest.mark.asyncio
async def test_provider_error_is_raised():
    provider = SpyResultProvider("Naruto")
    agent = FetchingAgent(provider)
    task = asyncio.create_task(agent.fetch_page())
    await asyncio.sleep(0)

    provider.deliver_error(ValueError("bad payload"))
    with pytest.raises(ValueError, match="bad payload"):
        await task


def test_cancel_is_idempotent():
    provider = SpyResultProvider("Naruto")
    agent = FetchingAgent(provider)

    agent.cancel()
    agent.cancel()

    assert agent.cancelled
    assert agent.provider is None
    assert provider.delegate is None
    assert provider.cancel_calls == 1


@pytest.mark.asyncio
async def test_cancel_while_waiting_never_completes():
    provider = SpyResultProvider("Naruto", pages={0: [anime("Naruto")]})
    agent = FetchingAgent(provider)
    task = asyncio.create_task(agent.fetch_page())
    await asyncio.sleep(0)

    agent.cancel()
    # A misbehaving provider calling back anyway
    agent.page_incoming(0, provider)
    agent.on_error(RuntimeError("late"), provider)

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_fetch_after_cancel_raises_cancelled():
    agent = FetchingAgent(SpyResultProvider("Naruto"))
    agent.cancel()
    with pytest.raises(asyncio.CancelledError):
        await agent.fetch_page()


@pytest.mark.asyncio
async def test_more_available_follows_provider():
    source = SpySearchSource({0: [anime("Naruto")]}, more_available=True)
    agent = FetchingAgent.search("Naruto", source)
    await agent.fetch_page()
    assert agent.more_available
    agent.cancel()
    assert not agent.more_available


@pytest.mark.asyncio
async def test_sink_ignores_second_outcome():
    sink = CompletionSink(asyncio.get_running_loop())
    sink.resolve([anime("First")])
    sink.reject(RuntimeError("ignored"))
    items = await sink
    assert items[0].title == "First"
    assert sink.done
