"""
Core services for the application.

This package contains the risk-classification engine (normalizer, risk
scorer, quality classifier) and the fetch, aggregate and submit pipeline
built on top of it.
"""

from .aggregator import Aggregator, aggregate
from .assessment import AssessmentOutcome, AssessmentService
from .fetcher import PaginatedFetcher, PatientSource
from .normalizer import normalize, parse_bp
from .quality import has_quality_issue
from .risk_scorer import score
from .submitter import Submitter

__all__ = [
    "Aggregator",
    "AssessmentOutcome",
    "AssessmentService",
    "PaginatedFetcher",
    "PatientSource",
    "Submitter",
    "aggregate",
    "has_quality_issue",
    "normalize",
    "parse_bp",
    "score",
]
