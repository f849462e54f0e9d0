"""
End-to-end assessment pipeline.

1. Fetch every page of patient records
2. Aggregate them into high-risk, fever and data-quality sets
3. Submit the sets (unless this is a dry run)

A fetch failure aborts the run before anything is submitted.
"""

import time
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from triage.adapters.patient_api import connect
from triage.config import AppConfig, get_config
from triage.domain.models import AggregationStats, AssessmentPayload, ResultSets
from triage.services.aggregator import Aggregator
from triage.services.fetcher import PaginatedFetcher
from triage.services.submitter import Submitter

logger = structlog.get_logger(__name__)


@dataclass
class AssessmentOutcome:
    """Everything one run produced, for reporting to the operator."""

    result_sets: ResultSets
    payload: AssessmentPayload
    stats: AggregationStats
    pages_fetched: int
    records_rejected: int
    duration_seconds: float
    response: dict[str, Any] | None = None

    @property
    def submitted(self) -> bool:
        return self.response is not None


class AssessmentService:
    """Wires the fetcher, aggregator and submitter around one HTTP client."""

    def __init__(
        self,
        config: AppConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or get_config()
        self.transport = transport
        self.logger = logger.bind(component="assessment_service")

    async def run(self, dry_run: bool = False) -> AssessmentOutcome:
        """
        Execute one complete assessment.

        Raises:
            FatalFetchError: a page could not be fetched; nothing was submitted.
            SubmissionError: the final POST failed.
        """
        start_time = time.perf_counter()
        self.logger.info(
            "assessment_starting",
            base_url=self.config.api.base_url,
            page_size=self.config.fetch.page_size,
            dry_run=dry_run,
        )

        async with connect(self.config.api, transport=self.transport) as client:
            fetcher = PaginatedFetcher(client, self.config.fetch)
            records = await fetcher.fetch_all()

            aggregator = Aggregator()
            result_sets = aggregator.aggregate(records)

            response = None
            if dry_run:
                self.logger.info("submission_skipped_dry_run")
            else:
                response = await Submitter(client).submit(result_sets)

        duration = time.perf_counter() - start_time
        self.logger.info("assessment_completed", duration_seconds=round(duration, 3))

        return AssessmentOutcome(
            result_sets=result_sets,
            payload=result_sets.to_payload(),
            stats=aggregator.stats,
            pages_fetched=fetcher.pages_fetched,
            records_rejected=fetcher.records_rejected,
            duration_seconds=duration,
            response=response,
        )
