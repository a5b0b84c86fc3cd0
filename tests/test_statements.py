import copy

import pytest

import finboard.statements as statements
from finboard.statements import (
    Statement,
    StatementShape,
    StatementShapeError,
    classify_statement,
    default_statement,
    normalize_statement,
    normalize_statement_with_warnings,
    normalize_statements_with_warnings,
)


def make_canonical(**overrides) -> dict:
    """Helper to build a canonical balance sheet record."""
    raw = {
        "date": "2023-06-30",
        "total_asset": 100.0,
        "asset_breakdown": [{"name": "Cash", "value": 100.0}],
        "total_liability": 40.0,
        "liability_breakdown": [{"name": "Accounts Payable", "value": 40.0}],
        "total_equity": 60.0,
        "equity_breakdown": [{"name": "Common Stock", "value": 60.0}],
        "net_income": 10.0,
    }
    raw.update(overrides)
    return raw


def make_report_json(asset=200000, liability=85000, equity=115000) -> dict:
    """Helper to build a record holding a nested report_json object."""
    return {
        "date": "2023-06-30",
        "report_json": {
            "assets": [
                {
                    "name": "Total Assets",
                    "value": asset,
                    "sub_items": [{"name": "Cash", "value": asset}],
                }
            ],
            "liabilities": [
                {"name": "Total Liabilities", "value": liability, "sub_items": []}
            ],
            "equity": [
                {
                    "name": "Total Equity",
                    "value": equity,
                    "sub_items": [
                        {"name": "Common Stock", "value": 97000},
                        {"name": "Net Income", "value": 18000},
                    ],
                }
            ],
        },
    }


def codes(warnings) -> list[str]:
    return [w.code for w in warnings]


@pytest.mark.parametrize(
    "raw, expected",
    [
        (make_canonical(), StatementShape.CANONICAL),
        (make_report_json(), StatementShape.REPORT_JSON),
        ({"asset_breakdown": [{"name": "Cash", "value": 1}]}, StatementShape.BREAKDOWN),
        ({"date": "2023-06-30"}, StatementShape.UNRECOGNIZED),
        (None, StatementShape.UNRECOGNIZED),
        ("a string", StatementShape.UNRECOGNIZED),
    ],
)
def test_classify_statement(raw, expected) -> None:
    assert classify_statement(raw) is expected


def test_canonical_record_keeps_its_values() -> None:
    statement, warnings = normalize_statement_with_warnings(make_canonical())

    assert statement.date == "2023-06-30"
    assert statement.total_asset == 100.0
    assert statement.total_liability == 40.0
    assert statement.total_equity == 60.0
    assert statement.net_income == 10.0
    assert statement.asset_breakdown[0].name == "Cash"
    assert statement.ratios.current_ratio == pytest.approx(2.5)
    assert codes(warnings) == ["ratios_computed"]


def test_canonical_record_carries_over_partial_ratios() -> None:
    statement = normalize_statement(make_canonical(ratios={"current_ratio": 9.9}))

    assert statement.ratios.current_ratio == pytest.approx(9.9)
    assert statement.ratios.debt_ratio == pytest.approx(0.4)


def test_canonical_record_without_date_stays_undated() -> None:
    raw = make_canonical()
    del raw["date"]

    statement, warnings = normalize_statement_with_warnings(raw)

    assert statement.date is None
    assert statement.timestamp is None
    assert "missing_date" in codes(warnings)


def test_non_numeric_total_becomes_zero_with_warning() -> None:
    statement, warnings = normalize_statement_with_warnings(
        make_canonical(total_asset="abc")
    )

    assert statement.total_asset == 0.0
    assert "non_numeric_value" in codes(warnings)
    # The zero total is replaced by 1 for the ratios only
    assert statement.ratios.debt_ratio == pytest.approx(40.0)


def test_report_json_record() -> None:
    statement = normalize_statement(make_report_json())

    assert statement.total_asset == 200000.0
    assert statement.total_liability == 85000.0
    assert statement.total_equity == 115000.0
    assert statement.net_income == 18000.0
    assert [item.name for item in statement.equity_breakdown] == [
        "Common Stock",
        "Net Income",
    ]


def test_report_json_zero_totals_are_substituted() -> None:
    statement, warnings = normalize_statement_with_warnings(
        make_report_json(asset=0, liability=0, equity=0)
    )

    assert statement.total_asset == 1.0
    assert statement.total_liability == 1.0
    assert statement.total_equity == 1.0
    assert codes(warnings).count("total_substituted") == 3
    assert statement.ratios.current_ratio == pytest.approx(1.0)


def test_zero_totals_without_substitution_give_undefined_ratios() -> None:
    statement = normalize_statement(
        make_report_json(asset=0, liability=0, equity=0),
        substitute_zero_totals=False,
    )

    assert statement.total_asset == 0.0
    assert statement.ratios.current_ratio is None
    assert statement.ratios.return_on_equity is None
    assert statement.ratios.debt_ratio is None


def test_breakdown_record_sums_items_and_finds_net_income() -> None:
    raw = {
        "date": "2023-09-30",
        "asset_breakdown": [
            {"name": "Cash", "value": 80000},
            {"name": "Inventory", "value": "60000"},
        ],
        "liability_breakdown": [{"name": "Accounts Payable", "value": 40000}],
        "equity_breakdown": [
            {"name": "Common Stock", "value": 80000},
            {"name": "Net Income", "value": 20000},
        ],
    }

    statement = normalize_statement(raw)

    assert statement.total_asset == 140000.0
    assert statement.total_liability == 40000.0
    assert statement.total_equity == 100000.0
    assert statement.net_income == 20000.0


def test_breakdown_record_prefers_top_level_values() -> None:
    raw = {
        "date": "2023-09-30",
        "total_asset": 500,
        "net_income": 7,
        "asset_breakdown": [{"name": "Cash", "value": 100}],
        "equity_breakdown": [{"name": "Net Income", "value": 3}],
    }

    statement = normalize_statement(raw)

    assert statement.total_asset == 500.0
    assert statement.net_income == 7.0
    # No liabilities at all: substituted
    assert statement.total_liability == 1.0


def test_breakdown_record_without_date_is_dated_today(monkeypatch) -> None:
    monkeypatch.setattr(statements, "_today", lambda: "2024-02-29")

    statement, warnings = normalize_statement_with_warnings(
        {"asset_breakdown": [{"name": "Cash", "value": 10}]}
    )

    assert statement.date == "2024-02-29"
    assert "missing_date" in codes(warnings)


def test_unparsable_date_is_kept_raw() -> None:
    statement, warnings = normalize_statement_with_warnings(
        {"date": "someday", "asset_breakdown": [{"name": "Cash", "value": 10}]}
    )

    assert statement.date == "someday"
    assert statement.timestamp is None
    assert "invalid_date" in codes(warnings)


def test_unrecognized_record_falls_back_to_default(monkeypatch) -> None:
    monkeypatch.setattr(statements, "_today", lambda: "2024-02-29")

    statement, warnings = normalize_statement_with_warnings({"foo": "bar"})

    assert statement == default_statement("2024-02-29")
    assert codes(warnings) == ["unrecognized_shape"]


def test_unrecognized_record_keeps_its_date() -> None:
    statement = normalize_statement({"date": "2023-03-31"})

    assert statement.date == "2023-03-31"
    assert statement.total_asset == 150000.0


def test_null_record_gives_default_statement() -> None:
    statement, warnings = normalize_statement_with_warnings(None)

    assert statement.total_asset == 150000.0
    assert codes(warnings) == ["null_statement"]


def test_strict_mode_raises_on_unrecognized_shape() -> None:
    with pytest.raises(StatementShapeError):
        normalize_statement({"foo": "bar"}, strict=True)

    # Recognized shapes are unaffected by strict mode
    assert normalize_statement(make_canonical(), strict=True).total_asset == 100.0


def test_default_statement_figures() -> None:
    statement = default_statement("2023-01-01")

    assert statement.total_asset == 150000.0
    assert statement.total_liability == 60000.0
    assert statement.total_equity == 90000.0
    assert statement.net_income == 15000.0
    assert sum(item.value for item in statement.asset_breakdown) == 150000.0
    assert statement.ratios.current_ratio == pytest.approx(2.5)
    assert statement.ratios.net_profit_margin == pytest.approx(0.1)


def test_normalization_is_idempotent_and_pure() -> None:
    raw = make_report_json()
    snapshot = copy.deepcopy(raw)

    once = normalize_statement(raw)
    twice = normalize_statement(once)
    again = normalize_statement(once.as_raw())

    assert raw == snapshot
    assert twice is once
    assert isinstance(again, Statement)
    assert again == once


def test_normalize_many_collects_warnings_in_order() -> None:
    result, warnings = normalize_statements_with_warnings(
        [make_canonical(), None, {"foo": "bar"}]
    )

    assert len(result) == 3
    assert codes(warnings) == ["ratios_computed", "null_statement", "unrecognized_shape"]


def test_serialized_report_json_uses_top_level_totals() -> None:
    raw = {
        "date": "2023-06-30",
        "report_json": "{}",
        "total_asset": 500,
        "total_liability": 200,
        "total_equity": 300,
        "net_income": 25,
    }

    assert classify_statement(raw) is StatementShape.REPORT_JSON

    statement, warnings = normalize_statement_with_warnings(raw)

    assert statement.total_asset == 500.0
    assert statement.total_liability == 200.0
    assert statement.total_equity == 300.0
    assert statement.net_income == 25.0
    assert statement.ratios.current_ratio == pytest.approx(2.5)
    assert "malformed_report_json" in codes(warnings)
    assert "unrecognized_shape" not in codes(warnings)


def test_empty_report_json_object_is_still_report_json() -> None:
    raw = {"date": "2023-06-30", "report_json": {}, "total_asset": 500}

    assert classify_statement(raw) is StatementShape.REPORT_JSON
    assert normalize_statement(raw).total_asset == 500.0
