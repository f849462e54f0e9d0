"""
Command line entry point.

Run with: uv run triage [--dry-run] [--page-size N]
"""

import argparse
import asyncio
import json
import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from triage.config import FetchConfig, get_config
from triage.domain.errors import FatalFetchError, SubmissionError
from triage.observability import configure_logging
from triage.services.assessment import AssessmentOutcome, AssessmentService

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="triage",
        description="Fetch patient records, score their risk and submit the assessment.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="compute the assessment and print it without submitting",
    )
    parser.add_argument("--page-size", type=int, default=None, help="records per page")
    return parser


def render_outcome(outcome: AssessmentOutcome) -> None:
    """Print the run summary."""
    table = Table(title="Assessment summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white", justify="right")

    table.add_row("Pages fetched", str(outcome.pages_fetched))
    table.add_row("Records seen", str(outcome.stats.records_seen))
    table.add_row("Rejected (unreadable record)", str(outcome.records_rejected))
    table.add_row("Unique patients", str(outcome.stats.unique_patients))
    table.add_row("Skipped (no patient_id)", str(outcome.stats.skipped_without_id))
    table.add_row("High risk", str(len(outcome.result_sets.high_risk)))
    table.add_row("Fever", str(len(outcome.result_sets.fever)))
    table.add_row("Data quality issues", str(len(outcome.result_sets.data_quality_issue)))
    table.add_row("Duration", f"{outcome.duration_seconds:.2f}s")
    console.print(table)

    if outcome.submitted:
        console.print(Panel(json.dumps(outcome.response, indent=2), title="Server response"))
    else:
        console.print(
            Panel(outcome.payload.model_dump_json(indent=2), title="Payload (not submitted)")
        )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = get_config()
        if args.page_size is not None:
            fetch = FetchConfig(**{**config.fetch.model_dump(), "page_size": args.page_size})
            config = config.model_copy(update={"fetch": fetch})
    except ValueError as e:
        # ValidationError, or a non-numeric value such as PAGE_SIZE=abc
        console.print(f"❌ Configuration invalid: {e}", style="red")
        return 1

    configure_logging(config.logging)

    console.print("Fetching patient records...", style="bold blue")
    try:
        outcome = asyncio.run(AssessmentService(config).run(dry_run=args.dry_run))
    except FatalFetchError as e:
        console.print(f"❌ Fetch failed on page {e.page}: {e}", style="red")
        return 1
    except SubmissionError as e:
        console.print(f"❌ Submission failed: {e}", style="red")
        return 1

    render_outcome(outcome)
    return 0


if __name__ == "__main__":
    sys.exit(main())
