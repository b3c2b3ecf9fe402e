"""Load broker quote workbooks.

Two inputs are accepted: ``.xlsx``/``.xlsm`` workbooks as received from
brokers, and JSON exports mapping sheet name to either a list of row objects
(header already applied) or a raw 2-D grid. Grids carry title rows and merged
cells above the real header, so the header row is detected.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any
import zipfile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import TypeAdapter, ValidationError

from option_inquiry.engine.sheets import Tables
from option_inquiry.exceptions import ErrorCode, QuoteError

logger = logging.getLogger(__name__)

HEADER_SCAN_ROWS = 10
HEADER_MIN_CELLS = 5
EXCEL_SUFFIXES = (".xlsx", ".xlsm")

KEY_COLUMN_SYNONYMS: dict[str, tuple[str, ...]] = {
    "code": ("证券代码", "股票代码", "代码", "标的代码", "合约标的"),
    "name": ("证券名称", "股票名称", "名称", "标的名称", "合约标的名称", "证券简称"),
    "strike": ("行权价", "行权价格", "执行价", "执行价格", "strike price"),
    "option_type": ("期权类型", "看涨看跌", "方向", "call/put", "期权种类"),
    "expiry": ("到期日", "到期时间", "期限", "期权到期日", "到期"),
    "volatility": ("波动率", "隐含波动率", "iv", "历史波动率", "hv"),
    "option_price": ("期权价格", "期权费", "权利金", "价格", "报价"),
}

_RawWorkbook = dict[str, list[dict[str, Any] | list[Any]]]
_WORKBOOK_ADAPTER: TypeAdapter[_RawWorkbook] = TypeAdapter(_RawWorkbook)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def detect_header_row(grid: list[list[Any]]) -> int:
    for index, row in enumerate(grid[:HEADER_SCAN_ROWS]):
        if row and len(row) > HEADER_MIN_CELLS:
            return index
    return 0


def rows_from_grid(grid: list[list[Any]]) -> list[dict[str, Any]]:
    if not grid:
        return []
    header_index = detect_header_row(grid)
    headers = [None if _is_blank(cell) else str(cell).strip() for cell in grid[header_index]]
    records: list[dict[str, Any]] = []
    for raw in grid[header_index + 1 :]:
        if not raw or all(_is_blank(cell) for cell in raw):
            continue
        record: dict[str, Any] = {}
        for header, cell in zip(headers, raw):
            if header is None or _is_blank(cell):
                continue
            record[header] = cell
        if record:
            records.append(record)
    return records


def _normalize_sheet(rows: list[dict[str, Any] | list[Any]]) -> list[dict[str, Any]]:
    grid = [row for row in rows if isinstance(row, list)]
    if grid and len(grid) == len(rows):
        return rows_from_grid(grid)
    return [row for row in rows if isinstance(row, dict)]


def parse_workbook(data: Any) -> dict[str, list[dict[str, Any]]]:
    try:
        raw = _WORKBOOK_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise QuoteError(
            ErrorCode.INVALID_ARGS,
            "workbook must map sheet names to lists of rows",
            details={"errors": exc.error_count()},
        ) from exc
    return {str(name): _normalize_sheet(rows) for name, rows in raw.items()}


def _trim_row(row: tuple[Any, ...]) -> list[Any]:
    cells = list(row)
    while cells and _is_blank(cells[-1]):
        cells.pop()
    return cells


def read_excel(path: Path) -> dict[str, list[list[Any]]]:
    """Every worksheet as a grid of cell values (formulas resolved to cached values)."""

    workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        return {
            sheet.title: [_trim_row(row) for row in sheet.iter_rows(values_only=True)]
            for sheet in workbook.worksheets
        }
    finally:
        workbook.close()


def load_workbook(path: Path) -> dict[str, list[dict[str, Any]]]:
    if not path.exists():
        raise QuoteError(ErrorCode.INVALID_ARGS, f"workbook not found: {path}")
    try:
        if path.suffix.lower() in EXCEL_SUFFIXES:
            data: Any = read_excel(path)
        else:
            data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, zipfile.BadZipFile, InvalidFileException, KeyError) as exc:
        raise QuoteError(ErrorCode.INVALID_ARGS, f"unable to read workbook {path}: {exc}") from exc
    tables = parse_workbook(data)
    logger.info("loaded workbook %s with sheets %s", path, ", ".join(tables) or "(none)")
    return tables


def find_key_columns(columns: list[str]) -> dict[str, str]:
    found: dict[str, str] = {}
    lowered = [(column, column.lower()) for column in columns]
    for key, synonyms in KEY_COLUMN_SYNONYMS.items():
        for column, text in lowered:
            if any(synonym.lower() in text for synonym in synonyms):
                found[key] = column
                break
    return found


def describe_workbook(tables: Tables) -> list[dict[str, Any]]:
    summary: list[dict[str, Any]] = []
    for name, rows in tables.items():
        columns: list[str] = []
        for row in rows:
            for column in row.keys():
                if column not in columns:
                    columns.append(str(column))
        summary.append(
            {
                "sheet": name,
                "rows": len(rows),
                "columns": columns,
                "key_columns": find_key_columns(columns),
            }
        )
    return summary
