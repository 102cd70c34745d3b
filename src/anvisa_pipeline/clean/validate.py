"""Validation utilities for cleaned petition rows.

This module validates DataFrame rows against the Pydantic `PetitionRecord`
model and wires read → clean → validate into `load_records`.
"""
from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd
from pydantic import ValidationError

from anvisa_pipeline.clean.transform import clean_petitions_frame
from anvisa_pipeline.ingest.read_csv import read_petitions_csv
from anvisa_pipeline.models import PetitionRecord

log = logging.getLogger(__name__)


class EmptyDatasetError(RuntimeError):
    """Raised when a CSV export yields no valid petition record."""


def validate_frame(pdf: pd.DataFrame) -> tuple[list[PetitionRecord], int]:
    """Validate a DataFrame of petition rows using Pydantic.

    Args:
        pdf: Cleaned pandas DataFrame, one petition per row.

    Returns:
        A tuple of (list_of_validated_records, bad_count).
    """
    good: list[PetitionRecord] = []
    bad = 0

    for rec in pdf.to_dict(orient="records"):
        try:
            good.append(PetitionRecord.model_validate(rec))
        except ValidationError as exc:
            log.debug("Rejected row %r: %s", rec.get("processo_numero"), exc)
            bad += 1

    return good, bad


def load_records(path: Path) -> list[PetitionRecord]:
    """Read, clean and validate a petitions CSV file.

    Raises:
        FileNotFoundError: if `path` does not exist.
        EmptyDatasetError: if no row survives cleaning and validation.
    """
    pdf = clean_petitions_frame(read_petitions_csv(path))
    records, bad = validate_frame(pdf)

    log.info("Loaded %d records from %s (bad=%d)", len(records), path, bad)
    if not records:
        raise EmptyDatasetError(f"No valid records found in {path}")
    return records
