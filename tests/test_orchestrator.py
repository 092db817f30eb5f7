"""Tests for the fetch orchestrator lifecycle and ordering guarantees."""

import asyncio

import pytest

from yieldscope.models import (
    FetchStatus,
    Location,
    MarketFilters,
    MarketRequest,
    PropertyType,
)
from yieldscope.orchestrator import FetchOrchestrator
from yieldscope.provider.client import GENERIC_FAILURE, ProviderTransportError
from tests.conftest import FakeProvider, make_analysis

FILTERS = MarketFilters(bedrooms="3", bathrooms="2", parking="2")


def _request(location: Location = Location.MELBOURNE) -> MarketRequest:
    return MarketRequest(location=location, property_type=PropertyType.HOUSE, filters=FILTERS)


@pytest.mark.asyncio
async def test_success_lifecycle():
    provider = FakeProvider()
    orchestrator = FetchOrchestrator(provider)
    seen: list[FetchStatus] = []
    orchestrator.subscribe(lambda state: seen.append(state.status))
    assert orchestrator.state.status is FetchStatus.IDLE

    task = orchestrator.request(_request())
    assert orchestrator.state.status is FetchStatus.LOADING
    await asyncio.sleep(0)
    analysis = make_analysis(("Footscray", 600_000, 500))
    provider.pending[0].set_result(analysis)
    await task

    assert orchestrator.state.status is FetchStatus.SUCCESS
    assert orchestrator.state.analysis is analysis
    assert seen == [FetchStatus.LOADING, FetchStatus.SUCCESS]


@pytest.mark.asyncio
async def test_provider_error_becomes_error_state():
    provider = FakeProvider()
    orchestrator = FetchOrchestrator(provider)
    task = orchestrator.request(_request())
    await asyncio.sleep(0)
    provider.pending[0].set_exception(ProviderTransportError(GENERIC_FAILURE))
    await task
    assert orchestrator.state.status is FetchStatus.ERROR
    assert orchestrator.state.error == GENERIC_FAILURE
    assert not orchestrator.busy


@pytest.mark.asyncio
async def test_unexpected_exception_never_leaves_loading():
    provider = FakeProvider()
    orchestrator = FetchOrchestrator(provider)
    task = orchestrator.request(_request())
    await asyncio.sleep(0)
    provider.pending[0].set_exception(KeyError("medianPrice"))
    await task
    assert orchestrator.state.status is FetchStatus.ERROR
    assert orchestrator.state.error == GENERIC_FAILURE


@pytest.mark.asyncio
async def test_missing_credential_goes_straight_to_error():
    provider = FakeProvider(has_key=False)
    orchestrator = FetchOrchestrator(provider)
    seen: list[FetchStatus] = []
    orchestrator.subscribe(lambda state: seen.append(state.status))

    assert orchestrator.request(_request()) is None
    assert provider.calls == []
    assert seen == [FetchStatus.ERROR]
    assert "Missing API key" in orchestrator.state.error


@pytest.mark.asyncio
async def test_new_attempt_clears_error_but_keeps_analysis():
    provider = FakeProvider()
    orchestrator = FetchOrchestrator(provider)
    task = orchestrator.request(_request())
    await asyncio.sleep(0)
    provider.pending[0].set_exception(ProviderTransportError("down"))
    await task

    orchestrator.request(_request())
    assert orchestrator.state.status is FetchStatus.LOADING
    assert orchestrator.state.error is None
    await orchestrator.aclose()


@pytest.mark.asyncio
async def test_stale_response_does_not_clobber_newer_result():
    provider = FakeProvider()
    orchestrator = FetchOrchestrator(provider)
    task_a = orchestrator.request(_request(Location.SYDNEY))
    task_b = orchestrator.request(_request(Location.PERTH))
    await asyncio.sleep(0)

    analysis_b = make_analysis(("Perth B", 700_000, 600), location=Location.PERTH)
    provider.pending[1].set_result(analysis_b)
    await task_b
    assert orchestrator.state.analysis is analysis_b

    provider.pending[0].set_result(
        make_analysis(("Sydney A", 1_500_000, 900), location=Location.SYDNEY)
    )
    await task_a
    assert orchestrator.state.status is FetchStatus.SUCCESS
    assert orchestrator.state.analysis is analysis_b


@pytest.mark.asyncio
async def test_stale_error_does_not_clobber_loading():
    provider = FakeProvider()
    orchestrator = FetchOrchestrator(provider)
    task_a = orchestrator.request(_request(Location.SYDNEY))
    orchestrator.request(_request(Location.PERTH))
    await asyncio.sleep(0)
    provider.pending[0].set_exception(ProviderTransportError("late failure"))
    await task_a
    assert orchestrator.state.status is FetchStatus.LOADING
    await orchestrator.aclose()


@pytest.mark.asyncio
async def test_credential_failure_supersedes_in_flight_attempt():
    provider = FakeProvider()
    orchestrator = FetchOrchestrator(provider)
    task = orchestrator.request(_request())
    provider.has_key = False
    orchestrator.request(_request())
    await asyncio.sleep(0)
    provider.pending[0].set_result(make_analysis(("A", 500_000, 400)))
    await task
    assert orchestrator.state.status is FetchStatus.ERROR


@pytest.mark.asyncio
async def test_retry_reissues_last_request_without_cache():
    provider = FakeProvider(auto=make_analysis(("A", 500_000, 400)))
    orchestrator = FetchOrchestrator(provider)
    assert orchestrator.retry() is None

    await orchestrator.request(_request(Location.ADELAIDE))
    await orchestrator.retry()
    assert len(provider.calls) == 2
    assert provider.calls[1][0] is Location.ADELAIDE
    assert provider.calls[0][3] is True
    assert provider.calls[1][3] is False


@pytest.mark.asyncio
async def test_wait_returns_settled_state():
    provider = FakeProvider()
    orchestrator = FetchOrchestrator(provider)
    orchestrator.request(_request())
    await asyncio.sleep(0)
    asyncio.get_running_loop().call_later(0.01, provider.pending[0].set_result, make_analysis())
    state = await orchestrator.wait()
    assert state.status is FetchStatus.SUCCESS


@pytest.mark.asyncio
async def test_result_after_close_is_noop():
    provider = FakeProvider()
    orchestrator = FetchOrchestrator(provider)
    orchestrator.request(_request())
    await asyncio.sleep(0)
    await orchestrator.aclose()

    assert orchestrator.closed
    assert not orchestrator.busy
    assert orchestrator.state.status is FetchStatus.LOADING
    assert orchestrator.request(_request()) is None
    assert len(provider.calls) == 1


@pytest.mark.asyncio
async def test_unsubscribe_stops_notifications_and_survives_close():
    provider = FakeProvider(auto=make_analysis())
    orchestrator = FetchOrchestrator(provider)
    seen: list[FetchStatus] = []
    unsubscribe = orchestrator.subscribe(lambda state: seen.append(state.status))

    await orchestrator.request(_request())
    unsubscribe()
    await orchestrator.request(_request(Location.DARWIN))
    assert seen == [FetchStatus.LOADING, FetchStatus.SUCCESS]

    late = orchestrator.subscribe(lambda state: None)
    await orchestrator.aclose()
    late()
    unsubscribe()
