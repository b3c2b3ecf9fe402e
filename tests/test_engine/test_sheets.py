from __future__ import annotations

import copy
from typing import Any

import pytest

from option_inquiry.config import SheetsConfig
from option_inquiry.engine.sheets import (
    SheetRow,
    column_matches,
    find_quoted_column,
    find_quoted_price,
    find_underlying,
    parse_number,
)
from option_inquiry.models.quote import OptionSide, Structure, Tenor

VANILLA = "香草看涨报价"


def test_column_matches_applies_include_exclude_and_any_of() -> None:
    assert column_matches("1m( 90call )", include=("1m", "call"), any_of=("80", "90", "95"))
    assert not column_matches("1m( 90call )", include=("1m",), exclude=("call",))
    assert not column_matches("2m( 90call )", include=("1m", "call"))
    assert not column_matches("1m( 100call )", include=("1m", "call"), any_of=("103", "105", "110"))


def test_parse_number_handles_messy_cells() -> None:
    assert parse_number("1,234.5") == 1234.5
    assert parse_number(" 2.5 ") == 2.5
    assert parse_number(3) == 3.0
    assert parse_number("n/a") is None
    assert parse_number("") is None
    assert parse_number(None) is None
    assert parse_number(True) is None
    assert parse_number(float("nan")) is None


def test_sheet_row_exposes_columns_in_insertion_order() -> None:
    row = SheetRow({"b": 1, "a": "", "c": "x"})

    assert row.columns == ["b", "a", "c"]
    assert row.first_present(["a", "c"]) == "x"
    assert row.positive_number(["a", "c", "b"]) == 1.0
    assert row.text("missing") == ""


def test_find_underlying_prefers_reference_sheet(quote_tables: dict[str, list[dict[str, Any]]]) -> None:
    info = find_underlying(quote_tables, "000001")

    assert info.name == "平安银行"
    assert info.spot_price == pytest.approx(11.2)


def test_find_underlying_skips_unusable_price_columns(quote_tables: dict[str, list[dict[str, Any]]]) -> None:
    info = find_underlying(quote_tables, "300750")

    assert info.name == "宁德时代"
    assert info.spot_price == pytest.approx(180.5)


def test_find_underlying_falls_back_to_vanilla_sheet(quote_tables: dict[str, list[dict[str, Any]]]) -> None:
    info = find_underlying(quote_tables, "600519")

    assert info.name == "贵州茅台"
    assert info.spot_price == pytest.approx(1500.0)


def test_find_underlying_synthesizes_missing_security() -> None:
    info = find_underlying({}, "600000")

    assert info.name == "股票600000"
    assert info.spot_price == pytest.approx(104.0)


def test_find_underlying_fills_missing_name_and_price() -> None:
    tables = {"7095": [{"证券代码": 600000}]}

    info = find_underlying(tables, "600000")

    assert info.name == "未知"
    assert info.spot_price == pytest.approx(104.0)


def test_find_underlying_honours_configured_sheet_names() -> None:
    tables = {"ref": [{"代码": "000002", "标的": "万科A", "最新价": "7.5"}]}

    assert find_underlying(tables, "000002", SheetsConfig(reference="ref")).spot_price == pytest.approx(7.5)
    assert find_underlying(tables, "000002").name == "股票000002"


@pytest.mark.parametrize(
    ("side", "structure", "expected"),
    [
        (OptionSide.CALL, Structure.ATM, "1m(Exp.25/08/04)"),
        (OptionSide.CALL, Structure.ITM, "1m( 90call )"),
        (OptionSide.CALL, Structure.OTM, "1m( 110call )"),
        (OptionSide.PUT, Structure.ATM, "1m( 100put )"),
        (OptionSide.PUT, Structure.ITM, "1m( 105put )"),
        (OptionSide.PUT, Structure.OTM, "1m( 95put )"),
        (OptionSide.CALL, Structure.CUSTOM, None),
    ],
)
def test_find_quoted_column_by_side_and_structure(
    quote_tables: dict[str, list[dict[str, Any]]],
    side: OptionSide,
    structure: Structure,
    expected: str | None,
) -> None:
    row = SheetRow(quote_tables[VANILLA][0])

    assert find_quoted_column(row, Tenor.M1, side, structure) == expected


def test_find_quoted_column_requires_tenor_token(quote_tables: dict[str, list[dict[str, Any]]]) -> None:
    row = SheetRow(quote_tables[VANILLA][0])

    assert find_quoted_column(row, Tenor.M6, OptionSide.CALL, Structure.ATM) is None


def test_find_quoted_price_returns_matching_cell(quote_tables: dict[str, list[dict[str, Any]]]) -> None:
    price = find_quoted_price(quote_tables, "600519", Tenor.M1, OptionSide.CALL, Structure.ATM, sheet_name=VANILLA)

    assert price == pytest.approx(2.5)


@pytest.mark.parametrize("cell", ["n/a", 0, -1.5, "", None])
def test_find_quoted_price_treats_bad_cells_as_missing(cell: Any) -> None:
    tables = {VANILLA: [{"证券代码": "600519", "1m(Exp.25/08/04)": cell}]}

    assert find_quoted_price(tables, "600519", Tenor.M1, OptionSide.CALL, Structure.ATM, sheet_name=VANILLA) is None


def test_find_quoted_price_moves_past_anomalous_rows() -> None:
    tables = {
        VANILLA: [
            {"证券代码": "600519", "1m(Exp.25/08/04)": "--"},
            {"证券代码": "600519", "1m(Exp.25/09/04)": "1.75"},
        ]
    }

    price = find_quoted_price(tables, "600519", Tenor.M1, OptionSide.CALL, Structure.ATM, sheet_name=VANILLA)

    assert price == pytest.approx(1.75)


def test_lookups_do_not_mutate_tables(quote_tables: dict[str, list[dict[str, Any]]]) -> None:
    before = copy.deepcopy(quote_tables)

    find_underlying(quote_tables, "600519")
    find_quoted_price(quote_tables, "600519", Tenor.M1, OptionSide.PUT, Structure.OTM, sheet_name=VANILLA)

    assert quote_tables == before
