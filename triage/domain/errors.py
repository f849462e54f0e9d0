"""Exception hierarchy for the triage pipeline."""

from __future__ import annotations


class TriageError(Exception):
    """Base error for the triage pipeline."""


class ParseError(TriageError, ValueError):
    """A single record field could not be parsed. Always recovered locally."""


class FetchError(TriageError):
    """Retrieving a page of patient records failed."""

    def __init__(self, message: str, page: int, status_code: int | None = None) -> None:
        self.page = page
        self.status_code = status_code
        super().__init__(message)


class TransientFetchError(FetchError):
    """Rate limit, server error or malformed page body. Worth retrying."""


class FatalFetchError(FetchError):
    """Non-retryable client error, or the retry budget ran out."""


class SubmissionError(TriageError):
    """Delivering the assessment to the reporting endpoint failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
