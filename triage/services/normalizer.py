"""
Field normalization for raw patient records.

The parse helpers here are the single source of truth for what counts as a
usable vital. The quality classifier calls the same helpers, so a field the
normalizer marks INVALID is exactly a field the classifier flags.
"""

import math
import re
from typing import Any

from triage.domain.errors import ParseError
from triage.domain.models import INVALID, InvalidMarker, NormalizedRecord, RawRecord

# Plain decimal literal; rejects "12abc", "1_000", "nan", "inf" and hex
_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(value: Any) -> float:
    """Parse a native number or numeric string. Raises ParseError otherwise."""
    if isinstance(value, bool) or value is None:
        raise ParseError(f"not a number: {value!r}")

    if isinstance(value, int | float):
        try:
            number = float(value)
        except OverflowError as e:
            raise ParseError(f"number out of range: {type(value).__name__}") from e
    elif isinstance(value, str):
        text = value.strip()
        if not _NUMBER_RE.fullmatch(text):
            raise ParseError(f"not a number: {value!r}")
        number = float(text)
    else:
        raise ParseError(f"unsupported type {type(value).__name__}")

    if not math.isfinite(number):
        raise ParseError(f"not a finite number: {value!r}")
    return number


def parse_blood_pressure(value: Any) -> tuple[float, float]:
    """
    Parse "<systolic>/<diastolic>" into two readings. Raises ParseError otherwise.

    Whole readings come back as int; fractional ones are kept as given.
    """
    if not isinstance(value, str):
        raise ParseError(f"blood pressure must be a string, got {type(value).__name__}")

    parts = [part.strip() for part in value.split("/")]
    if len(parts) != 2 or not all(parts):
        raise ParseError(f"malformed blood pressure: {value!r}")

    readings = []
    for part in parts:
        number = parse_number(part)
        readings.append(int(number) if number.is_integer() else number)
    return readings[0], readings[1]


def parse_bp(value: Any) -> tuple[float, float] | InvalidMarker:
    try:
        return parse_blood_pressure(value)
    except ParseError:
        return INVALID


def _number_or_invalid(value: Any) -> float | InvalidMarker:
    try:
        return parse_number(value)
    except ParseError:
        return INVALID


def normalize(raw: RawRecord) -> NormalizedRecord:
    """Coerce the vitals of a raw record. Never raises."""
    bp = parse_bp(raw.blood_pressure)
    systolic, diastolic = (INVALID, INVALID) if bp is INVALID else bp

    return NormalizedRecord(
        systolic=systolic,
        diastolic=diastolic,
        temperature=_number_or_invalid(raw.temperature),
        age=_number_or_invalid(raw.age),
    )
