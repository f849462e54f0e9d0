"""
Paginated retrieval of patient records with bounded per-page retry.

Key patterns:
- Protocol-based dependency injection for the page source
- Iterative retry loop with a fixed backoff and an auditable attempt budget
- Fail the whole run on exhaustion; partial record lists never escape
"""

import asyncio
import time
from typing import Protocol

import structlog

from triage.config import FetchConfig
from triage.domain.errors import FatalFetchError, FetchError, TransientFetchError
from triage.domain.models import PatientPage, RawRecord
from triage.domain.result import Result

logger = structlog.get_logger(__name__)


class PatientSource(Protocol):
    """
    Anything that can fetch one page of patient records.

    Why Protocol over ABC: structural typing, easier test doubles.
    """

    async def get_patients_page(self, page: int, limit: int) -> Result[PatientPage, FetchError]:
        """
        Fetch a single page.

        Returns:
            Result[PatientPage, FetchError]: the page, or a transient/fatal error.
        """
        ...


class PaginatedFetcher:
    """Walks every page of the patient listing in order, one request at a time."""

    def __init__(self, source: PatientSource, config: FetchConfig | None = None) -> None:
        self.source = source
        self.config = config or FetchConfig()
        self.logger = logger.bind(component="paginated_fetcher")
        self.pages_fetched = 0
        self.records_rejected = 0

    async def fetch_page(self, page: int) -> PatientPage:
        """
        Fetch one page, retrying transient failures.

        Raises:
            FatalFetchError: on a non-retryable error, or once max_attempts is spent.
        """
        last_error: TransientFetchError | None = None

        for attempt in range(1, self.config.max_attempts + 1):
            result = await self.source.get_patients_page(page, self.config.page_size)
            if result.is_ok():
                if attempt > 1:
                    self.logger.info("page_recovered", page=page, attempt=attempt)
                return result.unwrap()

            error = result.unwrap_err()
            if not isinstance(error, TransientFetchError):
                self.logger.error(
                    "page_fetch_failed", page=page, status_code=error.status_code, error=str(error)
                )
                raise FatalFetchError(
                    str(error), page=page, status_code=error.status_code
                ) from error

            last_error = error
            self.logger.warning(
                "page_fetch_transient_failure",
                page=page,
                attempt=attempt,
                max_attempts=self.config.max_attempts,
                status_code=error.status_code,
                error=str(error),
            )
            if attempt < self.config.max_attempts:
                await asyncio.sleep(self.config.backoff_seconds)

        assert last_error is not None
        self.logger.error("page_retries_exhausted", page=page, attempts=self.config.max_attempts)
        raise FatalFetchError(
            f"page {page} failed after {self.config.max_attempts} attempts: {last_error}",
            page=page,
            status_code=last_error.status_code,
        ) from last_error

    async def fetch_all(self) -> list[RawRecord]:
        """
        Fetch every page and return the records in source order.

        Page 1 tells us how many pages exist; missing pagination means one page.
        """
        start_time = time.perf_counter()
        self.pages_fetched = 0
        self.records_rejected = 0

        first = await self.fetch_page(1)
        total_pages = first.total_pages
        records = self._collect(1, first)
        self.logger.info("first_page_fetched", total_pages=total_pages, count=len(records))

        for page in range(2, total_pages + 1):
            page_records = self._collect(page, await self.fetch_page(page))
            records.extend(page_records)
            self.logger.debug("page_fetched", page=page, count=len(page_records))

        self.logger.info(
            "fetch_completed",
            pages=self.pages_fetched,
            records=len(records),
            rejected=self.records_rejected,
            duration_seconds=round(time.perf_counter() - start_time, 3),
        )
        return records

    def _collect(self, page: int, patient_page: PatientPage) -> list[RawRecord]:
        self.pages_fetched += 1
        if patient_page.rejected:
            self.records_rejected += patient_page.rejected
            self.logger.warning("records_rejected", page=page, count=patient_page.rejected)
        return list(patient_page.records)
