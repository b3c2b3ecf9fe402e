"""Lookups over ingested broker quote sheets.

Sheets arrive as ``{sheet name: [row, ...]}`` where each row maps a free-text
column header to a cell value. Headers are inconsistent across brokers, so
every lookup goes through synonym lists or :func:`column_matches`.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Iterator, Mapping, Sequence

from option_inquiry.config import SheetsConfig
from option_inquiry.engine.seed import synthetic_spot
from option_inquiry.models.quote import OptionSide, Structure, Tenor, UnderlyingInfo

logger = logging.getLogger(__name__)

Tables = Mapping[str, Sequence[Mapping[str, Any]]]

REFERENCE_CODE_COLUMNS: tuple[str, ...] = ("代码", "证券代码")
REFERENCE_NAME_COLUMNS: tuple[str, ...] = ("标的", "证券简称")
QUOTE_CODE_COLUMNS: tuple[str, ...] = ("证券代码",)
QUOTE_NAME_COLUMNS: tuple[str, ...] = ("证券简称",)
PRICE_COLUMNS: tuple[str, ...] = ("现价", "最新价", "收盘价", "price")

UNKNOWN_NAME = "未知"
SYNTHETIC_NAME_PREFIX = "股票"


def parse_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def column_matches(
    name: str,
    *,
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
    any_of: Sequence[str] = (),
) -> bool:
    """Substring test used for every fuzzy header match."""

    if any(token not in name for token in include):
        return False
    if any(token in name for token in exclude):
        return False
    if any_of and not any(token in name for token in any_of):
        return False
    return True


class SheetRow:
    """Read-only view over one ingested row."""

    __slots__ = ("_cells",)

    def __init__(self, cells: Mapping[str, Any]) -> None:
        self._cells = cells

    @property
    def columns(self) -> list[str]:
        return [str(key) for key in self._cells.keys()]

    def get(self, column: str) -> Any:
        return self._cells.get(column)

    def text(self, column: str) -> str:
        value = self._cells.get(column)
        if value is None:
            return ""
        return str(value).strip()

    def first_present(self, columns: Sequence[str]) -> Any:
        for column in columns:
            value = self._cells.get(column)
            if value not in (None, ""):
                return value
        return None

    def number(self, column: str) -> float | None:
        return parse_number(self._cells.get(column))

    def positive_number(self, columns: Sequence[str]) -> float | None:
        for column in columns:
            value = self.number(column)
            if value is not None and value > 0:
                return value
        return None

    def has_code(self, code: str, columns: Sequence[str]) -> bool:
        return any(self.text(column) == code for column in columns)

    def find_column(self, **rule: Sequence[str]) -> str | None:
        for column in self.columns:
            if column_matches(column, **rule):
                return column
        return None


def iter_rows(tables: Tables, sheet_name: str) -> Iterator[SheetRow]:
    rows = tables.get(sheet_name) or ()
    for row in rows:
        if isinstance(row, Mapping):
            yield SheetRow(row)


def find_underlying(tables: Tables, code: str, sheet_names: SheetsConfig | None = None) -> UnderlyingInfo:
    """Resolve name and spot for ``code``, synthesizing both when no sheet has it."""

    names = sheet_names or SheetsConfig()
    lookups = (
        (names.reference, REFERENCE_CODE_COLUMNS, REFERENCE_NAME_COLUMNS),
        (names.vanilla, QUOTE_CODE_COLUMNS, QUOTE_NAME_COLUMNS),
    )
    for sheet_name, code_columns, name_columns in lookups:
        for row in iter_rows(tables, sheet_name):
            if not row.has_code(code, code_columns):
                continue
            name = row.first_present(name_columns)
            spot = row.positive_number(PRICE_COLUMNS)
            if spot is None:
                logger.debug("no usable price for %s in sheet %s; using synthetic spot", code, sheet_name)
                spot = synthetic_spot(code)
            return UnderlyingInfo(name=str(name) if name is not None else UNKNOWN_NAME, spot_price=spot)

    logger.debug("underlying %s not found in any sheet; synthesizing", code)
    return UnderlyingInfo(name=f"{SYNTHETIC_NAME_PREFIX}{code}", spot_price=synthetic_spot(code))


@dataclass(frozen=True)
class ColumnRule:
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    any_of: tuple[str, ...] = ()


# Puts are in the money above spot, so their ITM/OTM strike tokens are reversed.
COLUMN_RULES: dict[tuple[OptionSide, Structure], ColumnRule] = {
    (OptionSide.CALL, Structure.ATM): ColumnRule(exclude=("call",)),
    (OptionSide.CALL, Structure.ITM): ColumnRule(include=("call",), any_of=("80", "90", "95")),
    (OptionSide.CALL, Structure.OTM): ColumnRule(include=("call",), any_of=("103", "105", "110")),
    (OptionSide.PUT, Structure.ATM): ColumnRule(include=("put",), exclude=("call",)),
    (OptionSide.PUT, Structure.ITM): ColumnRule(include=("put",), any_of=("103", "105", "110")),
    (OptionSide.PUT, Structure.OTM): ColumnRule(include=("put",), any_of=("90", "95", "97")),
}


def tenor_token(tenor: Tenor) -> str:
    return tenor.value.lower()


def find_quoted_column(row: SheetRow, tenor: Tenor, side: OptionSide, structure: Structure) -> str | None:
    rule = COLUMN_RULES.get((side, structure))
    if rule is None:
        return None
    return row.find_column(
        include=(tenor_token(tenor), *rule.include),
        exclude=rule.exclude,
        any_of=rule.any_of,
    )


def find_quoted_price(
    tables: Tables,
    code: str,
    tenor: Tenor,
    side: OptionSide,
    structure: Structure,
    *,
    sheet_name: str,
) -> float | None:
    """Return the first positive quoted price for the contract, if any sheet row has one."""

    for row in iter_rows(tables, sheet_name):
        if not row.has_code(code, QUOTE_CODE_COLUMNS):
            continue
        column = find_quoted_column(row, tenor, side, structure)
        if column is None:
            continue
        price = row.number(column)
        if price is None or price <= 0:
            logger.debug("ignoring unusable quote %r in column %s for %s", row.get(column), column, code)
            continue
        return price
    return None
