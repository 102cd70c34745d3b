"""Command-line interface for the petitions pipeline.

Provides subcommands: `fetch`, `subjects` and `summary`. Each command is
implemented as a `cmd_*` function that accepts an argparse namespace and
returns a process exit status.
"""
from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Sequence

from dotenv import load_dotenv
import requests

from anvisa_pipeline.config import Settings, get_settings
from anvisa_pipeline.logging_config import configure_logging
from anvisa_pipeline.models import FilterSpec, OutcomeFilter, PetitionRecord, StatsSnapshot

# INGEST
from anvisa_pipeline.ingest.fetch_csv import download_csv
from anvisa_pipeline.clean.validate import EmptyDatasetError, load_records

# FILTER + AGGREGATE
from anvisa_pipeline.filters.apply import apply_filters, unique_subjects
from anvisa_pipeline.aggregate.build_stats import aggregate, top_items
from anvisa_pipeline.aggregate.partitioned import aggregate_partitioned

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _positive_int(raw: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {raw!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return value


def _csv_path(args: argparse.Namespace, s: Settings) -> Path:
    return Path(args.csv) if args.csv else s.csv_path


def _build_filter(args: argparse.Namespace, s: Settings) -> FilterSpec:
    """Build the FilterSpec from CLI options, optionally on top of defaults.

    Options given explicitly override the corresponding default clause.
    """
    base = s.default_filter() if args.defaults else FilterSpec()
    updates: dict[str, Any] = {}
    if args.subject:
        updates["subjects"] = frozenset(args.subject)
    if args.outcome is not None:
        updates["outcome"] = OutcomeFilter(args.outcome)
    if args.date_from is not None:
        updates["date_from"] = args.date_from
    if args.date_to is not None:
        updates["date_to"] = args.date_to
    return base.model_copy(update=updates)


def _aggregate(
    full: Sequence[PetitionRecord],
    subset: Sequence[PetitionRecord],
    partitions: int,
) -> StatsSnapshot:
    if partitions > 1:
        return aggregate_partitioned(full, subset, npartitions=partitions)
    return aggregate(full, subset)


def summary_payload(snapshot: StatsSnapshot, top_n: int) -> dict[str, Any]:
    """Return a JSON-ready summary of a snapshot.

    The retained record list and the raw per-status samples are left out;
    company and subject tallies are cut to the `top_n` largest.
    """
    data = snapshot.model_dump(
        mode="json",
        exclude={"records", "durations_by_status", "counts_by_company", "counts_by_subject"},
    )
    data["top_companies"] = top_items(snapshot.counts_by_company, top_n)
    data["top_subjects"] = top_items(snapshot.counts_by_subject, top_n)
    data["monthly_timeline"] = dict(sorted(data["monthly_timeline"].items()))
    data["yearly_timeline"] = dict(sorted(data["yearly_timeline"].items()))
    return data


# --------------------------------------------------
# FETCH
# --------------------------------------------------
def cmd_fetch(args: argparse.Namespace) -> int:
    """Download the CSV export into the configured cache directory."""
    s = get_settings()
    url = args.url or s.data_url
    if not url:
        raise RuntimeError("No CSV URL given. Pass --url or set ANVISA_DATA_URL in .env.")

    try:
        path = download_csv(url, s.data_dir, s.user_agent, force=args.force)
    except requests.RequestException as exc:
        log.error("Download failed: %s", exc)
        return 1

    print(path)
    return 0


# --------------------------------------------------
# SUBJECTS
# --------------------------------------------------
def cmd_subjects(args: argparse.Namespace) -> int:
    """Print the distinct subjects found in the CSV, one per line."""
    s = get_settings()
    try:
        records = load_records(_csv_path(args, s))
    except (FileNotFoundError, EmptyDatasetError) as exc:
        log.error("%s", exc)
        return 1

    for subject in unique_subjects(records):
        print(subject)
    return 0


# --------------------------------------------------
# SUMMARY
# --------------------------------------------------
def cmd_summary(args: argparse.Namespace) -> int:
    """Filter the records, aggregate full and filtered sets, print JSON."""
    s = get_settings()
    try:
        records = load_records(_csv_path(args, s))
    except (FileNotFoundError, EmptyDatasetError) as exc:
        log.error("%s", exc)
        return 1

    spec = _build_filter(args, s)
    filtered = apply_filters(records, spec)
    partitions = s.partitions if args.partitions is None else args.partitions
    top_n = s.top_n if args.top_n is None else args.top_n

    log.info("Filter kept %d of %d records", len(filtered), len(records))

    report = {
        "filter": spec.model_dump(mode="json"),
        "overall": summary_payload(_aggregate(records, records, partitions), top_n),
        "filtered": summary_payload(_aggregate(records, filtered, partitions), top_n),
    }
    report["filter"]["subjects"] = sorted(spec.subjects)
    print(json.dumps(report, ensure_ascii=False, indent=2))
    return 0


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="anvisa_pipeline")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_fetch = sub.add_parser("fetch")
    p_fetch.add_argument("--url", default=None)
    p_fetch.add_argument("--force", action="store_true")

    p_subjects = sub.add_parser("subjects")
    p_subjects.add_argument("--csv", default=None)

    p_summary = sub.add_parser("summary")
    p_summary.add_argument("--csv", default=None)
    p_summary.add_argument("--subject", action="append", default=[])
    p_summary.add_argument("--outcome", choices=[o.value for o in OutcomeFilter], default=None)
    p_summary.add_argument("--date-from", type=date.fromisoformat, default=None)
    p_summary.add_argument("--date-to", type=date.fromisoformat, default=None)
    p_summary.add_argument("--defaults", action="store_true")
    p_summary.add_argument("--top-n", type=_positive_int, default=None)
    p_summary.add_argument("--partitions", type=_positive_int, default=None)

    return p


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    load_dotenv()
    configure_logging(Path("logs/pipeline.log"))

    args = build_parser().parse_args(argv)

    if args.cmd == "fetch":
        return cmd_fetch(args)
    if args.cmd == "subjects":
        return cmd_subjects(args)
    if args.cmd == "summary":
        return cmd_summary(args)
    raise SystemExit(2)


if __name__ == "__main__":
    raise SystemExit(main())
