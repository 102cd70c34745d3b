"""Cleaning utilities for petition rows.

The output of `clean_petitions_frame` keeps only rows that carry the fields
the dashboard requires (company name, process number, status). Values are
passed through unchanged: status text is matched exactly against the outcome
sentences and company/subject strings are grouping keys as exported.
"""
from __future__ import annotations

import logging

import pandas as pd

log = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["empresa_razaoSocial", "processo_numero", "situacao_descricao"]


def clean_petitions_frame(pdf: pd.DataFrame) -> pd.DataFrame:
    """Drop rows with an empty required field.

    A field counts as present when it is a non-empty string; whitespace is
    not stripped, so a cell holding only spaces is kept as exported.

    Returns:
        Filtered DataFrame with a fresh index. Cell values are not modified.
    """
    log.info("Starting clean_petitions_frame on %d rows", len(pdf))
    pdf = pdf.copy()

    # -----------------------------
    # Missing cells read as blank
    # -----------------------------
    for col in pdf.columns:
        pdf[col] = pdf[col].fillna("").astype(str)

    # -----------------------------
    # Reject rows missing required fields
    # -----------------------------
    mask = pd.Series(True, index=pdf.index)
    for col in REQUIRED_COLUMNS:
        if col not in pdf.columns:
            log.warning("Required column %s is absent; no row can be kept", col)
            mask &= False
        else:
            mask &= pdf[col] != ""

    dropped = int((~mask).sum())
    if dropped:
        log.info("Dropped %d rows missing %s", dropped, REQUIRED_COLUMNS)

    return pdf[mask].reset_index(drop=True)
