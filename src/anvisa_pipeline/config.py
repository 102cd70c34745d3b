"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads the pipeline's environment variables (optionally from a `.env` file at
the project root) and validates the typed ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
import os

from dotenv import load_dotenv

from anvisa_pipeline import __version__
from anvisa_pipeline.models import FilterSpec

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_SUBJECTS = (
    "SIMILAR - Registro de Medicamento Similar",
    "GENERICO - Registro de Medicamento",
)
DEFAULT_DATE_FROM = "2020-01-01"


@dataclass(frozen=True)
class Settings:
    """Container for pipeline configuration read from the environment.

    Attributes:
        data_url: Remote CSV export URL, if one is configured.
        data_dir: Local cache directory for downloaded exports.
        csv_path: CSV file read by the `subjects` and `summary` commands.
        user_agent: User-Agent header sent when downloading.
        default_subjects: Subjects preselected by the default filter.
        default_date_from: Lower date bound of the default filter.
        top_n: Number of companies/subjects listed in reports.
        partitions: Partition count for aggregation (1 = sequential).
    """
    data_url: str | None
    data_dir: Path
    csv_path: Path
    user_agent: str
    default_subjects: tuple[str, ...]
    default_date_from: date | None
    top_n: int
    partitions: int

    def default_filter(self) -> FilterSpec:
        """Return the filter the dashboard starts with."""
        return FilterSpec(
            subjects=frozenset(self.default_subjects),
            date_from=self.default_date_from,
        )


def _int_env(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise RuntimeError(f"{name} must be >= {minimum}, got {value}")
    return value


def _date_env(name: str, default: str) -> date | None:
    raw = os.getenv(name, default).strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an ISO date (YYYY-MM-DD), got {raw!r}") from None


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if a numeric or date variable cannot be parsed.
    """
    data_url = os.getenv("ANVISA_DATA_URL", "").strip() or None
    data_dir = Path(os.getenv("ANVISA_DATA_DIR", "data/anvisa_cache"))
    csv_path = Path(os.getenv("ANVISA_CSV_PATH", str(data_dir / "dados.csv")))
    user_agent = os.getenv("ANVISA_USER_AGENT", "").strip() or f"anvisa-pipeline/{__version__}"

    raw_subjects = os.getenv("ANVISA_DEFAULT_SUBJECTS")
    if raw_subjects is None:
        default_subjects = DEFAULT_SUBJECTS
    else:
        default_subjects = tuple(s.strip() for s in raw_subjects.split(";") if s.strip())

    return Settings(
        data_url=data_url,
        data_dir=data_dir,
        csv_path=csv_path,
        user_agent=user_agent,
        default_subjects=default_subjects,
        default_date_from=_date_env("ANVISA_DEFAULT_DATE_FROM", DEFAULT_DATE_FROM),
        top_n=_int_env("ANVISA_TOP_N", 10, minimum=1),
        partitions=_int_env("ANVISA_PARTITIONS", 1, minimum=1),
    )
