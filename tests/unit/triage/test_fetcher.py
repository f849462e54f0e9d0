"""
Tests for paginated fetching in `triage/services/fetcher.py`.

These tests drive PaginatedFetcher through a scripted in-memory PatientSource,
so retry and pagination behaviour is checked without any HTTP.
"""

from __future__ import annotations

from collections.abc import Iterable
from unittest.mock import AsyncMock, call, patch

import pytest

from triage.config import FetchConfig
from triage.domain.errors import FatalFetchError, FetchError, TransientFetchError
from triage.domain.models import PatientPage
from triage.domain.result import Result
from triage.services.fetcher import PaginatedFetcher

PageResult = Result[PatientPage, FetchError]


def _page(ids: Iterable[str], total_pages: int | None = None) -> PatientPage:
    body: dict = {"data": [{"patient_id": pid} for pid in ids]}
    if total_pages is not None:
        body["pagination"] = {"totalPages": total_pages}
    return PatientPage.model_validate(body)


def _transient(page: int, status: int = 503) -> PageResult:
    return Result.err(TransientFetchError(f"server returned {status}", page, status))


class ScriptedPatientSource:
    """Test double that implements PatientSource with a per-page script."""

    def __init__(self, script: dict[int, list[PageResult]]) -> None:
        self.script = script
        self.calls: list[tuple[int, int]] = []

    async def get_patients_page(self, page: int, limit: int) -> PageResult:
        self.calls.append((page, limit))
        outcomes = self.script[page]
        return outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]


@pytest.fixture
def config() -> FetchConfig:
    return FetchConfig(page_size=2, max_attempts=5, backoff_seconds=0.0)


@pytest.mark.asyncio
async def test_fetches_all_pages_in_order(config: FetchConfig) -> None:
    source = ScriptedPatientSource(
        {
            1: [Result.ok(_page(["P1", "P2"], total_pages=3))],
            2: [Result.ok(_page(["P3", "P4"], total_pages=3))],
            3: [Result.ok(_page(["P5"], total_pages=3))],
        }
    )
    fetcher = PaginatedFetcher(source, config)

    records = await fetcher.fetch_all()

    assert [r.patient_id for r in records] == ["P1", "P2", "P3", "P4", "P5"]
    assert source.calls == [(1, 2), (2, 2), (3, 2)]
    assert fetcher.pages_fetched == 3


@pytest.mark.asyncio
async def test_missing_pagination_means_single_page(config: FetchConfig) -> None:
    source = ScriptedPatientSource({1: [Result.ok(_page(["P1"]))]})

    records = await PaginatedFetcher(source, config).fetch_all()

    assert [r.patient_id for r in records] == ["P1"]
    assert source.calls == [(1, 2)]


@pytest.mark.asyncio
async def test_transient_failures_are_retried(config: FetchConfig) -> None:
    source = ScriptedPatientSource(
        {
            1: [Result.ok(_page(["P1"], total_pages=2))],
            2: [_transient(2, 429), _transient(2, 500), Result.ok(_page(["P2"], total_pages=2))],
        }
    )

    records = await PaginatedFetcher(source, config).fetch_all()

    assert [r.patient_id for r in records] == ["P1", "P2"]
    assert [page for page, _ in source.calls] == [1, 2, 2, 2]


@pytest.mark.asyncio
async def test_backoff_between_attempts() -> None:
    config = FetchConfig(max_attempts=3, backoff_seconds=1.0)
    source = ScriptedPatientSource({1: [_transient(1), _transient(1), Result.ok(_page(["P1"]))]})

    with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
        await PaginatedFetcher(source, config).fetch_all()

    assert sleep.await_args_list == [call(1.0), call(1.0)]


@pytest.mark.asyncio
async def test_exhausted_retries_abort_the_run() -> None:
    config = FetchConfig(max_attempts=5, backoff_seconds=1.0)
    source = ScriptedPatientSource(
        {1: [Result.ok(_page(["P1"], total_pages=2))], 2: [_transient(2, 502)]}
    )

    with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
        with pytest.raises(FatalFetchError, match="after 5 attempts") as exc_info:
            await PaginatedFetcher(source, config).fetch_all()

    assert [page for page, _ in source.calls] == [1, 2, 2, 2, 2, 2]
    # No wait after the final attempt
    assert sleep.await_count == 4
    assert exc_info.value.page == 2
    assert exc_info.value.status_code == 502
    assert isinstance(exc_info.value.__cause__, TransientFetchError)


@pytest.mark.asyncio
async def test_client_error_fails_without_retry(config: FetchConfig) -> None:
    source = ScriptedPatientSource(
        {1: [Result.err(FatalFetchError("server returned 401", page=1, status_code=401))]}
    )

    with pytest.raises(FatalFetchError) as exc_info:
        await PaginatedFetcher(source, config).fetch_all()

    assert source.calls == [(1, 2)]
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_failure_on_first_page_is_retried_too(config: FetchConfig) -> None:
    source = ScriptedPatientSource({1: [_transient(1), Result.ok(_page(["P1"], total_pages=1))]})

    records = await PaginatedFetcher(source, config).fetch_all()

    assert len(records) == 1
    assert len(source.calls) == 2


@pytest.mark.asyncio
async def test_unusable_records_are_counted_not_fatal(config: FetchConfig) -> None:
    bad_page = PatientPage.model_validate(
        {
            "data": [{"patient_id": {"x": 1}}, "junk", {"patient_id": "P2"}],
            "pagination": {"totalPages": 2},
        }
    )
    source = ScriptedPatientSource(
        {1: [Result.ok(bad_page)], 2: [Result.ok(_page(["P3"], total_pages=2))]}
    )
    fetcher = PaginatedFetcher(source, config)

    records = await fetcher.fetch_all()

    assert [r.patient_id for r in records] == ["P2", "P3"]
    assert fetcher.records_rejected == 2
    assert source.calls == [(1, 2), (2, 2)]
