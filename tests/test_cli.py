import json

import pytest

from finboard import __version__
from finboard.cli import main


def make_sheet(date, total_asset=100.0) -> dict:
    """Helper to build a canonical balance sheet record."""
    return {
        "date": date,
        "total_asset": total_asset,
        "asset_breakdown": [{"name": "Cash", "value": total_asset}],
        "total_liability": 40.0,
        "liability_breakdown": [],
        "total_equity": 60.0,
        "equity_breakdown": [],
        "net_income": 10.0,
    }


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Temporary working directory holding a balance sheets file (no config)."""
    sheets = [make_sheet("2023-03-31"), make_sheet("2023-06-30", total_asset=200.0)]
    (tmp_path / "sheets.json").write_text(json.dumps(sheets), encoding="utf-8")
    (tmp_path / "tx.csv").write_text(
        "date,amount,type\n2023-06-30,10,credit\n2023-06-15,4,debit\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_version(capsys) -> None:
    main(["--version"])

    assert capsys.readouterr().out.strip() == f"finboard version {__version__}"


def test_dates_command(workspace, capsys) -> None:
    main(["--balance-sheets", "sheets.json", "dates"])

    assert capsys.readouterr().out.splitlines() == ["2023-06-30", "2023-03-31"]


def test_dates_command_json(workspace, capsys) -> None:
    main(["--balance-sheets", "sheets.json", "--display-mode", "json", "dates"])

    assert json.loads(capsys.readouterr().out) == ["2023-06-30", "2023-03-31"]


def test_nearest_command_table(workspace, capsys) -> None:
    main(["--balance-sheets", "sheets.json", "nearest", "2023-07-01"])

    out = capsys.readouterr().out
    assert "=== Statement 2023-06-30 ===" in out
    assert "$200.00" in out
    assert "Current Ratio" in out


def test_report_command_defaults_to_latest_statement(workspace, capsys) -> None:
    main(["--balance-sheets", "sheets.json", "report"])

    out = capsys.readouterr().out
    assert out.startswith("# Q2 2023 Financial Report")
    assert "## Financial Ratios" in out


def test_process_command_json(workspace, capsys) -> None:
    main(
        [
            "--balance-sheets",
            "sheets.json",
            "--transactions",
            "tx.csv",
            "--display-mode",
            "json",
            "process",
            "--date",
            "2023-06-30",
            "--interval",
            "allDates",
        ]
    )

    payload = json.loads(capsys.readouterr().out)
    assert payload["availableDates"] == ["2023-06-30", "2023-03-31"]
    assert payload["targetSheet"]["date"] == "2023-06-30"
    assert payload["interval"] == "allDates"
    # allDates reaches five years back from the target
    assert len(payload["relatedTransactions"]) == 2


def test_charts_command_table(workspace, capsys) -> None:
    main(["--balance-sheets", "sheets.json", "--display-mode", "table", "charts"])

    out = capsys.readouterr().out
    assert "Applied interval: allDates" in out
    assert "=== Major financials ===" in out
    assert "Mar 2023" in out


def test_both_mode_writes_files(workspace, capsys) -> None:
    main(
        [
            "--balance-sheets",
            "sheets.json",
            "--display-mode",
            "both",
            "--output",
            "out",
            "report",
        ]
    )

    out_dir = workspace / "out"
    assert len(list(out_dir.glob("report_*.json"))) == 1
    assert len(list(out_dir.glob("report_*.md"))) == 1
    assert "Wrote" in capsys.readouterr().out


def test_config_file_is_picked_up(workspace, capsys) -> None:
    (workspace / "finboard_config.toml").write_text(
        '[data]\nbalance_sheets = "sheets.json"\n\n[display]\nmode = "json"\n',
        encoding="utf-8",
    )

    main(["dates"])

    assert json.loads(capsys.readouterr().out) == ["2023-06-30", "2023-03-31"]


def test_missing_balance_sheets_is_a_usage_error(workspace) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["dates"])
    assert exc.value.code == 2

    with pytest.raises(SystemExit):
        main(["--balance-sheets", "missing.json", "dates"])


def test_strict_mode_reports_unrecognized_sheets(workspace) -> None:
    (workspace / "bad.json").write_text(json.dumps([{"foo": "bar"}]), encoding="utf-8")

    with pytest.raises(SystemExit):
        main(["--balance-sheets", "bad.json", "--strict", "process"])
