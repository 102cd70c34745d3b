from __future__ import annotations

import json
from pathlib import Path

import pytest

from anvisa_pipeline import cli
from anvisa_pipeline.ingest.read_csv import EXPECTED_COLUMNS
from anvisa_pipeline.models import APPROVED_STATUS, DENIED_STATUS

ROWS = [
    f'1,Acme,10,E1,2023-12-01,GENERICO - Registro de Medicamento,"{APPROVED_STATUS}",2024-01-15,10',
    f'2,Acme,11,E2,2024-01-01,GENERICO - Registro de Medicamento,"{APPROVED_STATUS}",2024-02-10,20',
    f'3,Beta,12,E3,2024-01-05,SIMILAR - Registro de Medicamento Similar,"{DENIED_STATUS}",2024-02-20,30',
    f'4,Gama,13,E4,2024-01-07,NOVO - Registro,"{APPROVED_STATUS}",sem data,',
    f'5,Delta,14,E5,2019-01-07,GENERICO - Registro de Medicamento,"{DENIED_STATUS}",2019-06-01,5',
]


@pytest.fixture
def csv_path(tmp_path: Path) -> Path:
    path = tmp_path / "dados.csv"
    path.write_text("\n".join([",".join(EXPECTED_COLUMNS), *ROWS]) + "\n", encoding="utf-8")
    return path


def _run(capsys: pytest.CaptureFixture[str], argv: list[str]) -> tuple[int, str]:
    args = cli.build_parser().parse_args(argv)
    handler = {"summary": cli.cmd_summary, "subjects": cli.cmd_subjects, "fetch": cli.cmd_fetch}[args.cmd]
    code = handler(args)
    return code, capsys.readouterr().out


def test_subjects_command(csv_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code, out = _run(capsys, ["subjects", "--csv", str(csv_path)])
    assert code == 0
    assert out.splitlines() == [
        "GENERICO - Registro de Medicamento",
        "NOVO - Registro",
        "SIMILAR - Registro de Medicamento Similar",
    ]


def test_summary_without_filter(csv_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code, out = _run(capsys, ["summary", "--csv", str(csv_path)])
    assert code == 0
    report = json.loads(out)
    overall = report["overall"]
    assert overall == report["filtered"]
    assert overall["total_count"] == 5
    assert overall["approved_count"] == 3
    assert overall["denied_count"] == 2
    assert overall["monthly_timeline"]["2024-01"]["approved_count"] == 1
    assert overall["monthly_timeline"]["2024-02"]["denied_count"] == 1
    assert list(overall["yearly_timeline"]) == ["2019", "2024"]
    assert overall["top_companies"] == {"Acme": 2, "Beta": 1, "Gama": 1, "Delta": 1}
    assert "records" not in overall


def test_summary_with_defaults_and_partitions(csv_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code, out = _run(capsys, ["summary", "--csv", str(csv_path), "--defaults", "--partitions", "2", "--top-n", "1"])
    assert code == 0
    report = json.loads(out)
    filtered = report["filtered"]
    # default subjects and the 2020-01-01 lower bound drop rows 4 and 5
    assert filtered["total_count"] == 3
    assert filtered["average_duration_days"] == 20.0
    assert filtered["top_companies"] == {"Acme": 2}
    assert report["filter"]["date_from"] == "2020-01-01"
    assert report["overall"]["total_count"] == 5


def test_summary_explicit_options_override_defaults(csv_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code, out = _run(
        capsys,
        ["summary", "--csv", str(csv_path), "--defaults", "--outcome", "denied", "--date-from", "2019-01-01"],
    )
    assert code == 0
    filtered = json.loads(out)["filtered"]
    assert filtered["total_count"] == 2
    assert filtered["approved_count"] == 0


def test_summary_missing_csv_returns_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code, out = _run(capsys, ["summary", "--csv", str(tmp_path / "missing.csv")])
    assert code == 1
    assert out == ""


def test_fetch_requires_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ANVISA_DATA_URL", raising=False)
    args = cli.build_parser().parse_args(["fetch"])
    with pytest.raises(RuntimeError):
        cli.cmd_fetch(args)


@pytest.mark.parametrize("option", ["--top-n", "--partitions"])
@pytest.mark.parametrize("value", ["0", "-1", "two"])
def test_summary_rejects_non_positive_counts(option: str, value: str) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.build_parser().parse_args(["summary", option, value])
    assert exc.value.code == 2


def test_summary_count_options_default_to_none() -> None:
    args = cli.build_parser().parse_args(["summary", "--top-n", "1"])
    assert args.top_n == 1
    assert args.partitions is None
