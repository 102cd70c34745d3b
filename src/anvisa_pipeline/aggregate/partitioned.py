"""Partitioned aggregation with Dask.

Module notes:
- The records are split into contiguous partitions; each partition is
  accumulated in its own delayed task.
- Partials are merged in partition order, so dictionary ordering and
  duration sample order match a single sequential pass.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Sequence
from typing import cast, Any as TypingAny

from dask import delayed, compute  # type: ignore[attr-defined]

from anvisa_pipeline.aggregate.build_stats import StatsAccumulator, accumulate, finalize
from anvisa_pipeline.models import PetitionRecord, StatsSnapshot

log = logging.getLogger(__name__)


def _partitions(
    records: Sequence[PetitionRecord],
    npartitions: int,
) -> Iterable[List[PetitionRecord]]:
    """Yield `npartitions` contiguous slices of `records` (fewer if short)."""
    size = max(1, -(-len(records) // npartitions))
    for i in range(0, len(records), size):
        yield list(records[i : i + size])


def aggregate_partitioned(
    full_records: Sequence[PetitionRecord],
    records_to_process: Sequence[PetitionRecord] | None = None,
    npartitions: int = 4,
    scheduler: str = "threads",
) -> StatsSnapshot:
    """Aggregate like `build_stats.aggregate`, spreading the pass over tasks.

    Args:
        full_records: Complete record collection, kept on the snapshot.
        records_to_process: Records to summarize; defaults to `full_records`.
        npartitions: Number of partitions to accumulate independently.
        scheduler: Dask scheduler name passed to `dask.compute`.

    Returns:
        A `StatsSnapshot` equal to the sequential aggregation of the input.

    Raises:
        ValueError: if `npartitions` is less than 1.
    """
    if npartitions < 1:
        raise ValueError(f"npartitions must be >= 1, got {npartitions}")

    subset = full_records if records_to_process is None else records_to_process
    tasks = [delayed(accumulate)(part) for part in _partitions(subset, npartitions)]
    log.info("Aggregating %d records in %d partitions", len(subset), len(tasks))

    # `compute` is untyped in our environment; cast to Any before calling
    partials: tuple[Any, ...] = cast(TypingAny, compute)(*tasks, scheduler=scheduler)

    merged = StatsAccumulator()
    for partial in partials:
        merged.merge(partial)
    return finalize(merged, full_records)
