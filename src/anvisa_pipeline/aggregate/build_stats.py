"""Snapshot aggregation functions.

Aggregation runs in two steps: `accumulate` folds records into a
`StatsAccumulator` (counters and raw duration samples), then `finalize`
collapses the timeline samples to means and computes the trend. Partial
accumulators can be merged, which is how `aggregate.partitioned` splits the
work.

Expectations:
- Input: validated `PetitionRecord` objects (outcome already classified).
- Output: a fresh `StatsSnapshot`; no state survives between calls.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from anvisa_pipeline.models import (
    Outcome,
    PetitionRecord,
    StatsSnapshot,
    TimelineBucket,
    Trend,
    TrendDirection,
)
from anvisa_pipeline.parsing import month_key, parse_duration, parse_publication_date, year_key

log = logging.getLogger(__name__)

TREND_WINDOW_MONTHS = 6
TREND_THRESHOLD_POINTS = 5.0


# =========================================================
# ACCUMULATION
# =========================================================

@dataclass
class _BucketSamples:
    approved: int = 0
    denied: int = 0
    durations: list[float] = field(default_factory=list)

    def merge(self, other: _BucketSamples) -> None:
        self.approved += other.approved
        self.denied += other.denied
        self.durations.extend(other.durations)


@dataclass
class StatsAccumulator:
    """Running totals for one slice of records.

    Merging two accumulators adds counters and concatenates sample lists,
    so merging slices in input order gives the same result as one pass.
    """
    total: int = 0
    approved: int = 0
    denied: int = 0
    durations: list[float] = field(default_factory=list)
    by_company: dict[str, int] = field(default_factory=dict)
    by_subject: dict[str, int] = field(default_factory=dict)
    by_status: dict[str, list[float]] = field(default_factory=dict)
    monthly: dict[str, _BucketSamples] = field(default_factory=dict)
    yearly: dict[str, _BucketSamples] = field(default_factory=dict)

    def add(self, record: PetitionRecord) -> None:
        """Fold a single record into the running totals."""
        self.total += 1
        if record.outcome is Outcome.APPROVED:
            self.approved += 1
        elif record.outcome is Outcome.DENIED:
            self.denied += 1

        buckets: list[_BucketSamples] = []
        day = parse_publication_date(record.publication_date)
        if day is not None:
            buckets = [
                self.monthly.setdefault(month_key(day), _BucketSamples()),
                self.yearly.setdefault(year_key(day), _BucketSamples()),
            ]
            for bucket in buckets:
                if record.outcome is Outcome.APPROVED:
                    bucket.approved += 1
                elif record.outcome is Outcome.DENIED:
                    bucket.denied += 1

        if record.company_name:
            self.by_company[record.company_name] = self.by_company.get(record.company_name, 0) + 1
        if record.subject:
            self.by_subject[record.subject] = self.by_subject.get(record.subject, 0) + 1

        duration = parse_duration(record.duration_days)
        if duration is not None:
            self.durations.append(duration)
            self.by_status.setdefault(record.status, []).append(duration)
            for bucket in buckets:
                bucket.durations.append(duration)

    def merge(self, other: StatsAccumulator) -> StatsAccumulator:
        """Merge `other` (a later slice of the input) into this accumulator."""
        self.total += other.total
        self.approved += other.approved
        self.denied += other.denied
        self.durations.extend(other.durations)
        for name, count in other.by_company.items():
            self.by_company[name] = self.by_company.get(name, 0) + count
        for name, count in other.by_subject.items():
            self.by_subject[name] = self.by_subject.get(name, 0) + count
        for status, samples in other.by_status.items():
            self.by_status.setdefault(status, []).extend(samples)
        for target, source in ((self.monthly, other.monthly), (self.yearly, other.yearly)):
            for key, bucket in source.items():
                target.setdefault(key, _BucketSamples()).merge(bucket)
        return self


def accumulate(records: Iterable[PetitionRecord]) -> StatsAccumulator:
    """Fold `records` into a new `StatsAccumulator`."""
    acc = StatsAccumulator()
    for record in records:
        acc.add(record)
    return acc


# =========================================================
# FINALIZATION
# =========================================================

def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _finalize_timeline(buckets: Mapping[str, _BucketSamples]) -> dict[str, TimelineBucket]:
    return {
        key: TimelineBucket(
            approved_count=b.approved,
            denied_count=b.denied,
            mean_duration=_mean(b.durations),
        )
        for key, b in buckets.items()
    }


def finalize(acc: StatsAccumulator, full_records: Sequence[PetitionRecord]) -> StatsSnapshot:
    """Turn an accumulator into an immutable `StatsSnapshot`.

    Args:
        acc: Accumulated totals for the records being summarized.
        full_records: The unfiltered collection, retained on the snapshot.
    """
    monthly = _finalize_timeline(acc.monthly)
    average = _mean(acc.durations)

    return StatsSnapshot(
        total_count=acc.total,
        approved_count=acc.approved,
        denied_count=acc.denied,
        average_duration_days=average,
        counts_by_company=dict(acc.by_company),
        counts_by_subject=dict(acc.by_subject),
        durations_by_status={k: list(v) for k, v in acc.by_status.items()},
        monthly_timeline=monthly,
        yearly_timeline=_finalize_timeline(acc.yearly),
        trend=compute_trend(monthly),
        records=list(full_records),
    )


def aggregate(
    full_records: Sequence[PetitionRecord],
    records_to_process: Sequence[PetitionRecord] | None = None,
) -> StatsSnapshot:
    """Compute a statistics snapshot.

    Args:
        full_records: Complete record collection, kept verbatim on the
            snapshot for later re-filtering.
        records_to_process: Records to summarize, typically the output of
            `filters.apply.apply_filters`. Defaults to `full_records`.

    Returns:
        A new `StatsSnapshot`. Empty input yields an all-zero snapshot with a
        stable trend.
    """
    subset = full_records if records_to_process is None else records_to_process
    snapshot = finalize(accumulate(subset), full_records)
    log.debug(
        "Aggregated %d records (approved=%d denied=%d months=%d)",
        snapshot.total_count,
        snapshot.approved_count,
        snapshot.denied_count,
        len(snapshot.monthly_timeline),
    )
    return snapshot


# =========================================================
# TREND + RANKING
# =========================================================

def _classify(delta: float) -> TrendDirection:
    if delta > TREND_THRESHOLD_POINTS:
        return TrendDirection.INCREASING
    if delta < -TREND_THRESHOLD_POINTS:
        return TrendDirection.DECREASING
    return TrendDirection.STABLE


def _shares(buckets: Sequence[TimelineBucket]) -> tuple[float, float]:
    approved = sum(b.approved_count for b in buckets)
    denied = sum(b.denied_count for b in buckets)
    volume = approved + denied
    if volume == 0:
        return 0.0, 0.0
    return approved * 100.0 / volume, denied * 100.0 / volume


def compute_trend(monthly_timeline: Mapping[str, TimelineBucket]) -> Trend:
    """Classify the approval/denial share shift over the latest months.

    The last six months (or fewer) are split in two halves, the first one
    taking the extra month when the count is odd. A share change above five
    percentage points is `increasing`, below minus five `decreasing`.

    Args:
        monthly_timeline: Buckets keyed by zero-padded ``YYYY-MM``.

    Returns:
        `Trend` whose magnitude is the absolute approval share change.
    """
    months = sorted(monthly_timeline)
    if len(months) < 2:
        return Trend()

    recent = months[-TREND_WINDOW_MONTHS:]
    split = math.ceil(len(recent) / 2)
    first = [monthly_timeline[m] for m in recent[:split]]
    second = [monthly_timeline[m] for m in recent[split:]]

    first_approval, first_denial = _shares(first)
    second_approval, second_denial = _shares(second)
    approval_delta = second_approval - first_approval
    denial_delta = second_denial - first_denial

    return Trend(
        approval_trend=_classify(approval_delta),
        denial_trend=_classify(denial_delta),
        magnitude_percent=abs(approval_delta),
    )


def top_items(counts: Mapping[str, int], limit: int = 10) -> dict[str, int]:
    """Return the `limit` entries with the highest counts, highest first.

    Ties keep the order in which they appear in `counts`.
    """
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return dict(ranked[:limit])
