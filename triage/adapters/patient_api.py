"""
HTTP adapter for the clinical assessment API.

Knows the endpoints, the API-key header and how to classify a response. Retry
decisions are left to the caller: every page request comes back as a Result
whose error is either a TransientFetchError or a FatalFetchError.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog
from pydantic import ValidationError

from triage.config import ClinicalApiConfig
from triage.domain.errors import FatalFetchError, FetchError, TransientFetchError
from triage.domain.models import AssessmentPayload, PatientPage
from triage.domain.result import Result

logger = structlog.get_logger(__name__)

PATIENTS_PATH = "/patients"
SUBMIT_PATH = "/submit-assessment"


def is_transient_status(status_code: int) -> bool:
    return status_code == 429 or 500 <= status_code <= 599


class PatientApiClient:
    """Thin wrapper over httpx.AsyncClient bound to one base URL and API key."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client
        self.logger = logger.bind(component="patient_api")

    async def get_patients_page(self, page: int, limit: int) -> Result[PatientPage, FetchError]:
        """Fetch one page of patient records, classifying any failure."""
        try:
            response = await self._client.get(PATIENTS_PATH, params={"page": page, "limit": limit})
        except httpx.TransportError as e:
            return Result.err(TransientFetchError(f"transport error: {e!r}", page=page))

        status = response.status_code
        if is_transient_status(status):
            return Result.err(
                TransientFetchError(f"server returned {status}", page=page, status_code=status)
            )
        if not response.is_success:
            return Result.err(
                FatalFetchError(f"server returned {status}", page=page, status_code=status)
            )

        try:
            body = response.json()
        except ValueError:
            return Result.err(
                TransientFetchError("response body is not JSON", page=page, status_code=status)
            )

        try:
            return Result.ok(PatientPage.model_validate(body))
        except ValidationError as e:
            self.logger.debug("malformed_page_body", page=page, errors=e.error_count())
            return Result.err(
                TransientFetchError(
                    "response body has no usable data array", page=page, status_code=status
                )
            )

    async def post_assessment(self, payload: AssessmentPayload) -> httpx.Response:
        """POST the assessment. Transport errors propagate as httpx exceptions."""
        return await self._client.post(SUBMIT_PATH, json=payload.model_dump())


@asynccontextmanager
async def connect(
    config: ClinicalApiConfig, transport: httpx.AsyncBaseTransport | None = None
) -> AsyncIterator[PatientApiClient]:
    """
    Async context manager for the HTTP client lifecycle.

    Why: the connection pool is closed even if the run aborts midway.
    `transport` lets tests plug in httpx.MockTransport.
    """
    headers = {config.api_key_header: config.api_key}
    async with httpx.AsyncClient(
        base_url=config.base_url,
        headers=headers,
        timeout=config.timeout_seconds,
        transport=transport,
    ) as client:
        logger.debug("patient_api_client_opened", base_url=config.base_url)
        yield PatientApiClient(client)
    logger.debug("patient_api_client_closed", base_url=config.base_url)
