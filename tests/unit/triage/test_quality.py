"""Tests for data-quality detection in `triage/services/quality.py`."""

from __future__ import annotations

from typing import Any

import pytest

from triage.domain.models import INVALID, RawRecord
from triage.services.normalizer import normalize
from triage.services.quality import has_quality_issue, quality_issues


def _record(**overrides: Any) -> RawRecord:
    fields: dict[str, Any] = {
        "patient_id": "P1",
        "blood_pressure": "120/80",
        "temperature": 98.6,
        "age": 45,
    }
    fields.update(overrides)
    return RawRecord(**fields)


def test_clean_record_has_no_issue() -> None:
    assert not has_quality_issue(_record())


def test_numeric_strings_are_acceptable() -> None:
    assert not has_quality_issue(_record(temperature=" 99.1 ", age="71"))


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"blood_pressure": None}, "blood_pressure"),
        ({"blood_pressure": 120}, "blood_pressure"),
        ({"blood_pressure": "120/"}, "blood_pressure"),
        ({"blood_pressure": "N/A"}, "blood_pressure"),
        ({"age": None}, "age"),
        ({"age": "fifty"}, "age"),
        ({"temperature": None}, "temperature"),
        ({"temperature": "TEMP_ERROR"}, "temperature"),
    ],
)
def test_unusable_field_is_flagged(overrides: dict[str, Any], field: str) -> None:
    record = _record(**overrides)

    assert has_quality_issue(record)
    assert quality_issues(record) == [field]


def test_missing_fields_are_flagged() -> None:
    record = RawRecord(patient_id="P1")

    assert quality_issues(record) == ["blood_pressure", "age", "temperature"]


def test_flag_is_independent_of_risk_magnitude() -> None:
    """A perfectly healthy reading with one bad field is still flagged."""
    assert has_quality_issue(_record(blood_pressure="110/70", temperature=98.0, age=None))


@pytest.mark.parametrize(
    "overrides",
    [
        {},
        {"blood_pressure": "abc/80"},
        {"age": ""},
        {"temperature": "99.x"},
        {"age": None, "temperature": "100"},
    ],
)
def test_agrees_with_normalizer(overrides: dict[str, Any]) -> None:
    record = _record(**overrides)
    normalized = normalize(record)

    any_invalid = INVALID in (
        normalized.systolic,
        normalized.diastolic,
        normalized.temperature,
        normalized.age,
    )
    assert has_quality_issue(record) is any_invalid


def test_fractional_bp_and_huge_age() -> None:
    assert not has_quality_issue(_record(blood_pressure="145.5/80"))
    assert quality_issues(_record(age=10**400)) == ["age"]
