"""Pydantic models for petition records, filters and aggregate snapshots.

`PetitionRecord` is the validated form of one CSV row. Its `outcome` is a
computed field classified from the free-text status, so the filter and
aggregation code only ever compares enum members and the two never disagree.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

APPROVED_STATUS = "Foi publicado o deferimento do processo ou da petição."
DENIED_STATUS = "Foi publicado o indeferimento do processo ou da petição."


class Outcome(str, Enum):
    """Decision outcome of a petition, normalized from its status text."""
    APPROVED = "approved"
    DENIED = "denied"
    OTHER = "other"


def classify_status(status: str | None) -> Outcome:
    """Map a raw status sentence onto an `Outcome` by exact string match."""
    if status == APPROVED_STATUS:
        return Outcome.APPROVED
    if status == DENIED_STATUS:
        return Outcome.DENIED
    return Outcome.OTHER


class PetitionRecord(BaseModel):
    """Schema for one petition row of the ANVISA export.

    Fields accept either the export's column names (aliases) or the
    attribute names. Every text field is kept as a string; blank and missing
    values become ``""``.

    Attributes:
        company_id: Company CNPJ.
        company_name: Company legal name, grouping key.
        process_number: Process identifier.
        petition_id: Petition (expediente) identifier.
        entry_date: Petition entry date as exported.
        subject: Subject description, grouping and filter key.
        status: Status sentence as exported.
        publication_date: ISO-8601 publication date, possibly blank or malformed.
        duration_days: Processing time in days as exported.
        outcome: Tagged outcome computed from `status` (read-only).
    """
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    company_id: str = Field("", alias="empresa_cnpj")
    company_name: str = Field("", alias="empresa_razaoSocial")
    process_number: str = Field("", alias="processo_numero")
    petition_id: str = Field("", alias="peticao_expediente")
    entry_date: str = Field("", alias="peticao_dataEntrada")
    subject: str = Field("", alias="assunto_descricao")
    status: str = Field("", alias="situacao_descricao")
    publication_date: str = Field("", alias="peticao_dataPublicacao")
    duration_days: str = Field("", alias="Tempo_Peticao")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def outcome(self) -> Outcome:
        """Tagged outcome, always consistent with `status`."""
        return classify_status(self.status)

    @field_validator(
        "company_id",
        "company_name",
        "process_number",
        "petition_id",
        "entry_date",
        "subject",
        "status",
        "publication_date",
        "duration_days",
        mode="before",
    )
    @classmethod
    def _blank_to_empty(cls, value: Any) -> Any:
        if value is None:
            return ""
        # pandas leaves NaN in object columns when NA coercion is on
        if isinstance(value, float) and value != value:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value


class OutcomeFilter(str, Enum):
    """Outcome restriction of a `FilterSpec`."""
    ANY = "any"
    APPROVED = "approved"
    DENIED = "denied"


class FilterSpec(BaseModel):
    """Filter selection applied to a record collection.

    Attributes:
        subjects: Subjects to keep. An empty set places no restriction.
        outcome: Outcome restriction (`any` keeps every record).
        date_from: Inclusive lower bound on the publication day.
        date_to: Inclusive upper bound on the publication day.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    subjects: frozenset[str] = frozenset()
    outcome: OutcomeFilter = OutcomeFilter.ANY
    date_from: date | None = None
    date_to: date | None = None


class TimelineBucket(BaseModel):
    """Outcome counts and mean duration for one calendar month or year."""
    model_config = ConfigDict(frozen=True, extra="forbid")
    approved_count: int = Field(0, ge=0)
    denied_count: int = Field(0, ge=0)
    mean_duration: float = 0.0


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class Trend(BaseModel):
    """Approval/denial share shift over the most recent months.

    Attributes:
        approval_trend: Direction of the approval share.
        denial_trend: Direction of the denial share.
        magnitude_percent: Absolute approval share shift, in percentage points.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")
    approval_trend: TrendDirection = TrendDirection.STABLE
    denial_trend: TrendDirection = TrendDirection.STABLE
    magnitude_percent: float = Field(0.0, ge=0)


class StatsSnapshot(BaseModel):
    """Aggregate statistics computed from one record collection.

    `records` holds the full, unfiltered input so callers can re-filter
    without reloading; every other field describes the records that were
    actually aggregated.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    total_count: int = Field(0, ge=0)
    approved_count: int = Field(0, ge=0)
    denied_count: int = Field(0, ge=0)
    average_duration_days: float = 0.0
    counts_by_company: dict[str, int] = Field(default_factory=dict)
    counts_by_subject: dict[str, int] = Field(default_factory=dict)
    durations_by_status: dict[str, list[float]] = Field(default_factory=dict)
    monthly_timeline: dict[str, TimelineBucket] = Field(default_factory=dict)
    yearly_timeline: dict[str, TimelineBucket] = Field(default_factory=dict)
    trend: Trend = Field(default_factory=Trend)
    records: list[PetitionRecord] = Field(default_factory=list)
