"""
Threshold-based risk scoring.

Thresholds are fixed clinical constants, not configuration. Each row function
maps one vital to its sub-score; an INVALID input scores 0 so a partially
broken record still gets a best-effort composite.
"""

from triage.domain.models import INVALID, InvalidMarker, NormalizedRecord, RiskReport

# Blood pressure stages (mmHg)
SYSTOLIC_ELEVATED = 120
SYSTOLIC_STAGE_1 = 130
SYSTOLIC_STAGE_2 = 140
DIASTOLIC_STAGE_1 = 80
DIASTOLIC_STAGE_2 = 90

# Temperature (same scale as input, Fahrenheit)
LOW_FEVER = 99.6
HIGH_FEVER = 101.0

SENIOR_AGE = 65

HIGH_RISK_THRESHOLD = 4


def systolic_score(systolic: float) -> int:
    if systolic < SYSTOLIC_ELEVATED:
        return 1
    if systolic < SYSTOLIC_STAGE_1:
        return 2
    if systolic < SYSTOLIC_STAGE_2:
        return 3
    return 4


def diastolic_score(diastolic: float) -> int:
    if diastolic < DIASTOLIC_STAGE_1:
        return 1
    if diastolic < DIASTOLIC_STAGE_2:
        return 3
    return 4


def bp_score(systolic: float | InvalidMarker, diastolic: float | InvalidMarker) -> int:
    """Higher of the systolic and diastolic stages, 0 if either is INVALID."""
    if systolic is INVALID or diastolic is INVALID:
        return 0
    return max(systolic_score(systolic), diastolic_score(diastolic))


def temp_score(temperature: float | InvalidMarker) -> int:
    if temperature is INVALID:
        return 0
    if temperature >= HIGH_FEVER:
        return 2
    if temperature >= LOW_FEVER:
        return 1
    return 0


def age_score(age: float | InvalidMarker) -> int:
    if age is INVALID:
        return 0
    # Under 40 and 40-65 share a score
    if age > SENIOR_AGE:
        return 2
    return 1


def has_fever(temperature: float | InvalidMarker) -> bool:
    return temperature is not INVALID and temperature >= LOW_FEVER


def score(normalized: NormalizedRecord) -> RiskReport:
    """Pure and deterministic: identical input always yields an identical report."""
    return RiskReport(
        bp_score=bp_score(normalized.systolic, normalized.diastolic),
        temp_score=temp_score(normalized.temperature),
        age_score=age_score(normalized.age),
    )


def is_high_risk(report: RiskReport) -> bool:
    return report.composite >= HIGH_RISK_THRESHOLD
