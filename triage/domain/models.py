"""
Domain models for patient risk triage.

These models represent the core business concepts and are framework-agnostic.
They use Pydantic for validation but could be swapped to dataclasses if needed.
"""

from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError,
    computed_field,
    field_validator,
)


class Invalid(Enum):
    """Marker for a field that could not be parsed. Never equal to a valid zero."""

    INVALID = "invalid"

    def __repr__(self) -> str:
        return "INVALID"


INVALID = Invalid.INVALID

InvalidMarker = Literal[Invalid.INVALID]


class RawRecord(BaseModel):
    """Patient record exactly as delivered by the clinical API."""

    model_config = ConfigDict(frozen=True, extra="allow")  # Immutable as received

    patient_id: str | None = None
    blood_pressure: Any = None
    temperature: Any = None
    age: Any = None

    @field_validator("patient_id", mode="before")
    @classmethod
    def coerce_numeric_id(cls, v: Any) -> Any:
        # Identifiers are opaque; a numeric id is still an id
        if isinstance(v, int | float) and not isinstance(v, bool):
            return str(v)
        return v


class NormalizedRecord(BaseModel):
    """Typed vitals derived from a RawRecord, with INVALID for unusable fields."""

    model_config = ConfigDict(frozen=True)

    systolic: int | float | InvalidMarker
    diastolic: int | float | InvalidMarker
    temperature: float | InvalidMarker
    age: float | InvalidMarker


class RiskReport(BaseModel):
    """Bounded sub-scores for one record and their composite."""

    model_config = ConfigDict(frozen=True)

    bp_score: int = Field(ge=0, le=4)
    temp_score: int = Field(ge=0, le=2)
    age_score: int = Field(ge=0, le=2)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def composite(self) -> int:
        return self.bp_score + self.temp_score + self.age_score


class Pagination(BaseModel):
    """Pagination metadata attached to a page of patient records."""

    model_config = ConfigDict(populate_by_name=True)

    total_pages: int | None = Field(default=None, alias="totalPages")


class PatientPage(BaseModel):
    """
    One successfully fetched page.

    Only a missing or non-array `data` fails validation. Elements that are not
    usable records are dropped one by one and counted in `rejected`.
    """

    data: list[Any]
    pagination: Pagination | None = None

    _records: list[RawRecord] = PrivateAttr(default_factory=list)
    _rejected: int = PrivateAttr(default=0)

    def model_post_init(self, __context: Any) -> None:
        for item in self.data:
            try:
                self._records.append(RawRecord.model_validate(item))
            except ValidationError:
                self._rejected += 1

    @property
    def records(self) -> list[RawRecord]:
        return self._records

    @property
    def rejected(self) -> int:
        return self._rejected

    @property
    def total_pages(self) -> int:
        if self.pagination is None or not self.pagination.total_pages:
            return 1
        return max(self.pagination.total_pages, 1)


class PatientIdSet:
    """
    Ordered set of patient identifiers.

    Uniqueness comes from dict keys; enumeration follows first insertion so
    payloads are deterministic.
    """

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._ids: dict[str, None] = {}
        for patient_id in ids:
            self.add(patient_id)

    def add(self, patient_id: str) -> bool:
        """Add an identifier. Returns False when it was already present."""
        if patient_id in self._ids:
            return False
        self._ids[patient_id] = None
        return True

    def __contains__(self, patient_id: object) -> bool:
        return patient_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PatientIdSet):
            return list(self) == list(other)
        if isinstance(other, set | frozenset):
            return set(self._ids) == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"PatientIdSet({list(self._ids)!r})"

    def to_list(self) -> list[str]:
        return list(self._ids)


class AssessmentPayload(BaseModel):
    """Submission body for the assessment endpoint."""

    model_config = ConfigDict(frozen=True)

    high_risk_patients: list[str] = Field(default_factory=list)
    fever_patients: list[str] = Field(default_factory=list)
    data_quality_issues: list[str] = Field(default_factory=list)


class ResultSets:
    """The three deduplicated alert categories accumulated over one run."""

    def __init__(self) -> None:
        self.high_risk = PatientIdSet()
        self.fever = PatientIdSet()
        self.data_quality_issue = PatientIdSet()

    def to_payload(self) -> AssessmentPayload:
        return AssessmentPayload(
            high_risk_patients=self.high_risk.to_list(),
            fever_patients=self.fever.to_list(),
            data_quality_issues=self.data_quality_issue.to_list(),
        )

    def counts(self) -> dict[str, int]:
        return {
            "high_risk": len(self.high_risk),
            "fever": len(self.fever),
            "data_quality_issue": len(self.data_quality_issue),
        }


class AggregationStats(BaseModel):
    """Counters collected while aggregating one record stream."""

    records_seen: int = 0
    quality_flagged: int = 0
    scored: int = 0
    skipped_without_id: int = 0
    unique_patients: int = 0
