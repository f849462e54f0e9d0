"""Delivery of the final assessment. One attempt only; failures are terminal."""

from typing import Any, Protocol

import httpx
import structlog

from triage.domain.errors import SubmissionError
from triage.domain.models import AssessmentPayload, ResultSets

logger = structlog.get_logger(__name__)


class AssessmentSink(Protocol):
    async def post_assessment(self, payload: AssessmentPayload) -> httpx.Response: ...


class Submitter:
    def __init__(self, sink: AssessmentSink) -> None:
        self.sink = sink
        self.logger = logger.bind(component="submitter")

    async def submit(self, result_sets: ResultSets) -> dict[str, Any]:
        """
        POST the three sets and return the server's response body untouched.

        Raises:
            SubmissionError: transport failure or a non-2xx status.
        """
        payload = result_sets.to_payload()
        self.logger.info("submitting_assessment", **result_sets.counts())

        try:
            response = await self.sink.post_assessment(payload)
        except httpx.HTTPError as e:
            self.logger.error("submission_failed", error=str(e))
            raise SubmissionError(f"could not reach assessment endpoint: {e!r}") from e

        if not response.is_success:
            self.logger.error(
                "submission_rejected", status_code=response.status_code, body=response.text[:500]
            )
            raise SubmissionError(
                f"assessment endpoint returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError:
            body = {"body": response.text}
        if not isinstance(body, dict):
            body = {"body": body}

        self.logger.info("assessment_submitted", status_code=response.status_code)
        return body
