from __future__ import annotations

from datetime import date

from anvisa_pipeline.filters.apply import apply_filters, matches, unique_subjects
from anvisa_pipeline.models import (
    APPROVED_STATUS,
    DENIED_STATUS,
    FilterSpec,
    OutcomeFilter,
    PetitionRecord,
)


def _rec(subject: str = "GENERICO", status: str = APPROVED_STATUS, published: str = "2024-03-10") -> PetitionRecord:
    return PetitionRecord(
        company_name="ACME",
        process_number="1",
        subject=subject,
        status=status,
        publication_date=published,
        duration_days="30",
    )


def test_empty_subject_set_places_no_restriction() -> None:
    records = [_rec(subject="A"), _rec(subject="B"), _rec(subject="")]
    assert apply_filters(records, FilterSpec()) == records


def test_subject_clause_keeps_only_members() -> None:
    records = [_rec(subject="A"), _rec(subject="B"), _rec(subject="C")]
    out = apply_filters(records, FilterSpec(subjects=frozenset({"A", "C"})))
    assert [r.subject for r in out] == ["A", "C"]


def test_subject_clause_rejects_everything_when_nothing_matches() -> None:
    records = [_rec(subject="A"), _rec(subject="")]
    assert apply_filters(records, FilterSpec(subjects=frozenset({"Z"}))) == []


def test_outcome_clause() -> None:
    records = [_rec(status=APPROVED_STATUS), _rec(status=DENIED_STATUS), _rec(status="Em análise")]
    approved = apply_filters(records, FilterSpec(outcome=OutcomeFilter.APPROVED))
    denied = apply_filters(records, FilterSpec(outcome=OutcomeFilter.DENIED))
    assert approved == [records[0]]
    assert denied == [records[1]]
    assert apply_filters(records, FilterSpec(outcome=OutcomeFilter.ANY)) == records


def test_date_from_is_inclusive() -> None:
    spec = FilterSpec(date_from=date(2024, 3, 10))
    assert matches(_rec(published="2024-03-10"), spec)
    assert matches(_rec(published="2024-03-10T23:59:00"), spec)
    assert not matches(_rec(published="2024-03-09"), spec)


def test_date_to_is_inclusive() -> None:
    spec = FilterSpec(date_to=date(2024, 3, 10))
    assert matches(_rec(published="2024-03-10T08:00:00"), spec)
    assert not matches(_rec(published="2024-03-11"), spec)


def test_unparseable_date_excluded_only_under_date_filter() -> None:
    bad = [_rec(published=""), _rec(published="not-a-date"), _rec(published="2024-13-45")]
    assert apply_filters(bad, FilterSpec()) == bad
    assert apply_filters(bad, FilterSpec(date_from=date(2000, 1, 1))) == []
    assert apply_filters(bad, FilterSpec(date_to=date(2100, 1, 1))) == []


def test_clauses_are_combined() -> None:
    records = [
        _rec(subject="A", status=APPROVED_STATUS, published="2024-01-01"),
        _rec(subject="A", status=DENIED_STATUS, published="2024-02-01"),
        _rec(subject="B", status=APPROVED_STATUS, published="2024-02-01"),
        _rec(subject="A", status=APPROVED_STATUS, published="2024-02-15"),
    ]
    spec = FilterSpec(
        subjects=frozenset({"A"}),
        outcome=OutcomeFilter.APPROVED,
        date_from=date(2024, 2, 1),
        date_to=date(2024, 2, 28),
    )
    assert apply_filters(records, spec) == [records[3]]


def test_filter_output_is_ordered_subsequence() -> None:
    records = [_rec(subject=s, published=f"2024-0{i % 9 + 1}-01") for i, s in enumerate("ABABCABC")]
    out = apply_filters(records, FilterSpec(subjects=frozenset({"A", "C"}), date_from=date(2024, 3, 1)))
    it = iter(records)
    assert all(any(r is candidate for candidate in it) for r in out)
    assert len(out) < len(records)


def test_unique_subjects_sorted_and_non_blank() -> None:
    records = [_rec(subject="b"), _rec(subject="A"), _rec(subject="  "), _rec(subject=""), _rec(subject="b")]
    assert unique_subjects(records) == ["A", "b"]
