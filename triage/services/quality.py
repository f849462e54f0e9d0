"""Data-quality detection on raw patient records."""

from collections.abc import Callable
from typing import Any

from triage.domain.errors import ParseError
from triage.domain.models import RawRecord
from triage.services.normalizer import parse_blood_pressure, parse_number


def _parses(parser: Callable[[Any], object], value: Any) -> bool:
    try:
        parser(value)
    except ParseError:
        return False
    return True


def quality_issues(raw: RawRecord) -> list[str]:
    """Names of the vitals on this record that cannot be used."""
    issues = []
    if not _parses(parse_blood_pressure, raw.blood_pressure):
        issues.append("blood_pressure")
    if not _parses(parse_number, raw.age):
        issues.append("age")
    if not _parses(parse_number, raw.temperature):
        issues.append("temperature")
    return issues


def has_quality_issue(raw: RawRecord) -> bool:
    """
    True if blood pressure, age or temperature is missing or unparsable.

    Re-parses the raw fields instead of trusting a NormalizedRecord so the
    check stands on its own; both go through the same parse helpers.
    """
    return bool(quality_issues(raw))
