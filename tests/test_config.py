import pytest

from finboard.config import default_app_config, load_app_config


def write_config(tmp_path, content: str):
    """Helper to write a TOML config file in a temporary directory."""
    path = tmp_path / "finboard_config.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_full_config_resolves_paths(tmp_path) -> None:
    path = write_config(
        tmp_path,
        """
[data]
balance_sheets = "data/sheets.json"
transactions = "data/tx.csv"

[reporting]
currency = "eur"
report_interval = "yearToDate"
chart_interval = "5years"

[normalizer]
strict = true
substitute_zero_totals = false

[display]
mode = "json"
ratio_decimals = 3
output_dir = "out"

[logging]
level = "debug"
""",
    )

    cfg = load_app_config(str(path))

    assert cfg.data.balance_sheets == (tmp_path / "data" / "sheets.json").resolve()
    assert cfg.data.transactions == (tmp_path / "data" / "tx.csv").resolve()
    assert cfg.reporting.currency == "EUR"
    assert cfg.reporting.report_interval == "yearToDate"
    assert cfg.reporting.chart_interval == "5years"
    assert cfg.reporting.dashboard_interval == "last30days"
    assert cfg.normalizer.strict is True
    assert cfg.normalizer.substitute_zero_totals is False
    assert cfg.display_mode == "json"
    assert cfg.ratio_decimals == 3
    assert cfg.output_dir == (tmp_path / "out").resolve()
    assert cfg.log_level == "DEBUG"


def test_empty_config_uses_defaults(tmp_path) -> None:
    path = write_config(tmp_path, "")

    cfg = load_app_config(str(path))
    defaults = default_app_config()

    assert cfg.data.balance_sheets is None
    assert cfg.reporting == defaults.reporting
    assert cfg.normalizer == defaults.normalizer
    assert cfg.display_mode == "markdown"
    assert cfg.log_level == "WARNING"


def test_default_file_is_read_from_current_directory(tmp_path, monkeypatch) -> None:
    write_config(tmp_path, '[display]\nmode = "table"\n')
    monkeypatch.chdir(tmp_path)

    assert load_app_config().display_mode == "table"


@pytest.mark.parametrize(
    "content",
    [
        '[display]\nmode = "html"\n',
        '[reporting]\nreport_interval = "fortnight"\n',
        '[logging]\nlevel = "LOUD"\n',
        "this is = = not toml",
    ],
)
def test_invalid_config_raises_value_error(tmp_path, content) -> None:
    path = write_config(tmp_path, content)

    with pytest.raises(ValueError):
        load_app_config(str(path))


def test_missing_config_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "nope.toml"))
