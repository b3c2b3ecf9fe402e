"""Quote synthesis entry points.

:class:`QuoteSynthesizer` is the strict path: it raises :class:`QuoteError`
for rejected requests. :func:`synthesize` wraps it and turns every failure
into ``None`` so callers only ever see a complete result or an absence.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
import logging
from typing import Any, Mapping

from pydantic import ValidationError

from option_inquiry.config import AppConfig
from option_inquiry.engine import greeks
from option_inquiry.engine.contract import ContractTerms, FixedRatio, policy_for
from option_inquiry.engine.panel import (
    anchored_panel,
    panel_average,
    panel_implied_volatility,
    synthetic_panel,
)
from option_inquiry.engine.seed import seed
from option_inquiry.engine.sheets import Tables, find_quoted_price, find_underlying
from option_inquiry.exceptions import ErrorCode, QuoteError
from option_inquiry.models.quote import (
    BrokerQuote,
    OptionQuoteResult,
    ProductType,
    QuoteRequest,
    UnderlyingInfo,
)

logger = logging.getLogger(__name__)

BID_FACTOR = 0.95
ASK_FACTOR = 1.05


def display_counters(request: QuoteRequest) -> tuple[int, int]:
    """Volume and open interest for display only; stable per code, tenor and side."""

    counter_seed = seed(f"{request.underlying_code}{request.tenor.value}{request.side.value}")
    volume = 100 + (counter_seed * 7919) % 5000
    open_interest = 500 + (counter_seed * 104729) % 10000
    return volume, open_interest


class QuoteSynthesizer:
    def __init__(self, tables: Tables, *, config: AppConfig | None = None) -> None:
        if not isinstance(tables, Mapping):
            raise QuoteError(
                ErrorCode.NOT_FOUND,
                "quote sheets are missing or malformed",
                details={"type": type(tables).__name__},
            )
        self._tables = tables
        self._cfg = config or AppConfig()

    def quote(
        self,
        request: QuoteRequest,
        *,
        today: date | None = None,
        now: datetime | None = None,
    ) -> OptionQuoteResult:
        if request.product == ProductType.SNOWBALL:
            raise QuoteError(
                ErrorCode.UNSUPPORTED_PRODUCT,
                f"product type '{request.product.value}' is not supported",
                details={"sheet": self._cfg.sheets.snowball},
                suggestion="Request a vanilla option instead.",
            )

        policy = policy_for(request)
        if policy is None:
            raise QuoteError(
                ErrorCode.INVALID_REQUEST,
                "custom structure requires a strike",
                details={"underlying_code": request.underlying_code},
                suggestion="Pass `--strike` with `--structure custom`.",
            )

        stamp = now or datetime.now(UTC)
        day = today or stamp.date()

        underlying = find_underlying(self._tables, request.underlying_code, self._cfg.sheets)
        terms = policy.resolve(underlying.spot_price, request.tenor, day)

        panel: list[BrokerQuote] | None = None
        if isinstance(policy, FixedRatio):
            quoted = find_quoted_price(
                self._tables,
                request.underlying_code,
                request.tenor,
                request.side,
                policy.structure,
                sheet_name=self._cfg.sheets.vanilla,
            )
            if quoted is not None:
                panel = anchored_panel(
                    quoted,
                    code=request.underlying_code,
                    tenor=request.tenor,
                    side=request.side,
                    ratio=terms.ratio,
                )
            else:
                logger.debug("no quoted price for %s; synthesizing panel", request.underlying_code)

        if panel is None:
            panel = synthetic_panel(
                code=request.underlying_code,
                spot=underlying.spot_price,
                strike=terms.strike,
                tenor=request.tenor,
                side=request.side,
            )

        return self._assemble(request, underlying, terms, panel, stamp)

    def _assemble(
        self,
        request: QuoteRequest,
        underlying: UnderlyingInfo,
        terms: ContractTerms,
        panel: list[BrokerQuote],
        stamp: datetime,
    ) -> OptionQuoteResult:
        last = panel_average(panel)
        volume, open_interest = display_counters(request)
        return OptionQuoteResult(
            underlying_code=request.underlying_code,
            underlying_name=underlying.name,
            spot_price=underlying.spot_price,
            side=request.side,
            tenor=request.tenor,
            strike=terms.strike,
            moneyness_ratio=round(terms.ratio, 4),
            expiry=terms.expiry,
            bid=round(last * BID_FACTOR, 4),
            ask=round(last * ASK_FACTOR, 4),
            last=last,
            delta=greeks.delta(request.side, terms.ratio),
            gamma=greeks.gamma(request.tenor, terms.ratio),
            theta=greeks.theta(request.tenor, terms.ratio, request.side),
            vega=greeks.vega(request.tenor, terms.ratio),
            implied_volatility=panel_implied_volatility(panel),
            volume=volume,
            open_interest=open_interest,
            quote_source=self._cfg.quote.source_label,
            quote_timestamp=stamp.isoformat(),
            broker_panel=panel,
        )


def _request_code(request: Any) -> str:
    if isinstance(request, QuoteRequest):
        return request.underlying_code
    if isinstance(request, Mapping):
        return str(request.get("underlying_code", "?"))
    return "?"


def synthesize(
    tables: Tables,
    request: QuoteRequest | Mapping[str, Any],
    *,
    today: date | None = None,
    now: datetime | None = None,
    config: AppConfig | None = None,
) -> OptionQuoteResult | None:
    """Quote ``request`` against ``tables``; ``None`` means the quote is unavailable.

    ``request`` may be a :class:`QuoteRequest` or a plain mapping of its
    fields. Output is repeatable for the same inputs except
    ``quote_timestamp``, which follows the wall clock unless ``now`` is given.
    """

    code = _request_code(request)
    try:
        parsed = QuoteRequest.model_validate(request)
        return QuoteSynthesizer(tables, config=config).quote(parsed, today=today, now=now)
    except ValidationError as exc:
        logger.warning("quote request for %s rejected: %d invalid field(s)", code, exc.error_count())
        return None
    except QuoteError as exc:
        logger.warning("quote unavailable for %s: %s (%s)", code, exc.message, exc.code.value)
        return None
    except Exception:
        logger.exception("quote synthesis failed for %s", code)
        return None
