"""CSV parsing for petition exports.

`read_petitions_csv` returns a pandas DataFrame in which every column is a
string and blank cells stay blank, leaving interpretation of dates and
durations to the record-level parsers.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

log = logging.getLogger(__name__)

EXPECTED_COLUMNS = [
    "empresa_cnpj",
    "empresa_razaoSocial",
    "processo_numero",
    "peticao_expediente",
    "peticao_dataEntrada",
    "assunto_descricao",
    "situacao_descricao",
    "peticao_dataPublicacao",
    "Tempo_Peticao",
]


def read_petitions_csv(path: Path, encoding: str = "utf-8") -> pd.DataFrame:
    """Parse a petitions CSV file into a string-typed DataFrame.

    Columns missing from the file are added as blank strings so downstream
    steps can rely on the full schema; extra columns are kept as-is.

    Args:
        path: CSV file with a header row.
        encoding: Text encoding of the file.

    Returns:
        pandas.DataFrame with at least the `EXPECTED_COLUMNS`.

    Raises:
        FileNotFoundError: if `path` does not exist.
    """
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    pdf = pd.read_csv(
        path,
        dtype=str,
        keep_default_na=False,
        encoding=encoding,
        skip_blank_lines=True,
    )

    missing = [c for c in EXPECTED_COLUMNS if c not in pdf.columns]
    if missing:
        log.warning("CSV %s is missing columns %s; filling with blanks", path, missing)
        for col in missing:
            pdf[col] = ""

    log.info("Parsed %d rows from %s", len(pdf), path)
    return pdf
