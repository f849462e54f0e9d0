"""
Aggregation of scored records into deduplicated alert categories.

Quality-flagged records go to data_quality_issue only: their score is built
from zeroed fields and is not trustworthy, so they never count as high risk
or fever.
"""

from collections.abc import Iterable

import structlog

from triage.domain.models import AggregationStats, RawRecord, ResultSets
from triage.services import normalizer, risk_scorer
from triage.services.quality import quality_issues

logger = structlog.get_logger(__name__)


class Aggregator:
    """Single-writer accumulator for one run's ResultSets."""

    def __init__(self) -> None:
        self.logger = logger.bind(component="aggregator")
        self.stats = AggregationStats()

    def aggregate(self, records: Iterable[RawRecord]) -> ResultSets:
        """Classify every record in arrival order; repeated ids are idempotent."""
        results = ResultSets()
        stats = AggregationStats()
        seen_ids: set[str] = set()

        for record in records:
            stats.records_seen += 1
            patient_id = record.patient_id
            if not patient_id:
                stats.skipped_without_id += 1
                self.logger.warning("record_without_patient_id", position=stats.records_seen)
                continue
            seen_ids.add(patient_id)

            issues = quality_issues(record)
            if issues:
                stats.quality_flagged += 1
                if results.data_quality_issue.add(patient_id):
                    self.logger.debug("data_quality_issue", patient_id=patient_id, fields=issues)
                continue

            normalized = normalizer.normalize(record)
            report = risk_scorer.score(normalized)
            stats.scored += 1

            if risk_scorer.is_high_risk(report):
                results.high_risk.add(patient_id)
            if risk_scorer.has_fever(normalized.temperature):
                results.fever.add(patient_id)

        stats.unique_patients = len(seen_ids)
        self.stats = stats
        self.logger.info("aggregation_completed", **stats.model_dump(), **results.counts())
        return results


def aggregate(records: Iterable[RawRecord]) -> ResultSets:
    return Aggregator().aggregate(records)
