"""Quote and workbook inspection commands."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError
import typer

from option_inquiry.engine import QuoteSynthesizer
from option_inquiry.exceptions import ErrorCode, QuoteError
from option_inquiry.models.quote import OptionSide, ProductType, QuoteRequest, Structure, Tenor
from option_inquiry.workbook import describe_workbook, load_workbook
from option_inquiry_cli._common import build_typer, get_state, handle_error, print_output

logger = logging.getLogger(__name__)

app = build_typer("Option inquiry commands (`quote`, `sheets`).")


@app.command("quote", help="Quote an option contract against a broker workbook.")
def quote(
    ctx: typer.Context,
    code: str = typer.Argument(..., metavar="CODE", help="Underlying security code. Example: 600519"),
    workbook: Path | None = typer.Option(None, "--workbook", "-w", help="Quote workbook (.xlsx or JSON export)."),
    side: OptionSide = typer.Option(OptionSide.CALL, "--side", case_sensitive=False, help="call|put"),
    tenor: Tenor = typer.Option(Tenor.M1, "--tenor", case_sensitive=False, help="2W, 1M, 2M, 3M, 6M, 12M"),
    structure: Structure = typer.Option(Structure.ATM, "--structure", case_sensitive=False, help="atm|itm|otm|custom"),
    strike: float | None = typer.Option(None, "--strike", help="Strike price for --structure custom."),
    strike_ratio: float | None = typer.Option(None, "--strike-ratio", help="Informational strike ratio (percent of spot)."),
    expiry: str | None = typer.Option(None, "--expiry", help="YYYY-MM-DD expiry for --structure custom."),
    product: ProductType = typer.Option(ProductType.VANILLA, "--product", case_sensitive=False, help="vanilla|snowball"),
) -> None:
    state = get_state(ctx)
    try:
        request = _build_request(
            code=code,
            side=side,
            tenor=tenor,
            structure=structure,
            strike=strike,
            strike_ratio=strike_ratio,
            expiry=expiry,
            product=product,
        )
        tables = load_workbook(workbook) if workbook is not None else {}
        result = QuoteSynthesizer(tables, config=state.config).quote(request)
        print_output(result.model_dump(mode="json"), state=state)
    except QuoteError as exc:
        handle_error(exc, state=state)
    except Exception as exc:
        logger.exception("quote command failed for %s", code)
        handle_error(
            QuoteError(ErrorCode.INTERNAL_ERROR, f"quote failed: {exc}", details={"type": type(exc).__name__}),
            state=state,
        )


@app.command("sheets", help="Summarise the sheets and key columns of a workbook.")
def sheets(
    ctx: typer.Context,
    workbook: Path = typer.Argument(..., metavar="FILE", help="Quote workbook (.xlsx or JSON export)."),
) -> None:
    state = get_state(ctx)
    try:
        tables = load_workbook(workbook)
        print_output(describe_workbook(tables), state=state)
    except QuoteError as exc:
        handle_error(exc, state=state)


def _build_request(
    *,
    code: str,
    side: OptionSide,
    tenor: Tenor,
    structure: Structure,
    strike: float | None,
    strike_ratio: float | None,
    expiry: str | None,
    product: ProductType,
) -> QuoteRequest:
    try:
        return QuoteRequest(
            underlying_code=code,
            side=side,
            tenor=tenor,
            structure=structure,
            custom_strike=strike,
            custom_strike_ratio=strike_ratio,
            custom_expiry=expiry,
            product=product,
        )
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise QuoteError(
            ErrorCode.INVALID_ARGS,
            f"invalid quote request: {', '.join(fields) or 'unknown field'}",
            details={"fields": fields},
        ) from exc
