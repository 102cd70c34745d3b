"""Filter predicate over petition records.

All clauses of a `FilterSpec` are ANDed. Records whose publication date
cannot be parsed are excluded whenever a date bound is active; nothing in
this module raises for malformed field values.
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from anvisa_pipeline.models import FilterSpec, Outcome, OutcomeFilter, PetitionRecord
from anvisa_pipeline.parsing import parse_publication_date

log = logging.getLogger(__name__)

_OUTCOME_FOR_FILTER = {
    OutcomeFilter.APPROVED: Outcome.APPROVED,
    OutcomeFilter.DENIED: Outcome.DENIED,
}


def matches(record: PetitionRecord, spec: FilterSpec) -> bool:
    """Return True when `record` satisfies every clause of `spec`.

    Args:
        record: Validated petition record.
        spec: Filter selection. An empty `subjects` set means no subject
            restriction; date bounds are inclusive calendar days.
    """
    if spec.subjects and record.subject not in spec.subjects:
        return False

    if spec.outcome is not OutcomeFilter.ANY:
        if record.outcome is not _OUTCOME_FOR_FILTER[spec.outcome]:
            return False

    if spec.date_from is not None or spec.date_to is not None:
        day = parse_publication_date(record.publication_date)
        if day is None:
            return False
        if spec.date_from is not None and day < spec.date_from:
            return False
        if spec.date_to is not None and day > spec.date_to:
            return False

    return True


def apply_filters(records: Sequence[PetitionRecord], spec: FilterSpec) -> list[PetitionRecord]:
    """Return the records matching `spec`, in their original order."""
    kept = [r for r in records if matches(r, spec)]
    log.debug("Filter kept %d of %d records", len(kept), len(records))
    return kept


def unique_subjects(records: Iterable[PetitionRecord]) -> list[str]:
    """Return the distinct non-blank subjects, sorted lexicographically."""
    return sorted({r.subject for r in records if r.subject and r.subject.strip()})
