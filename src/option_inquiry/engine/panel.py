"""Per-broker quote panels with deterministic spread between brokers."""

from __future__ import annotations

from dataclasses import dataclass
import re

from option_inquiry.engine import greeks
from option_inquiry.engine.seed import seed
from option_inquiry.models.quote import BrokerQuote, OptionSide, Tenor


@dataclass(frozen=True)
class Broker:
    broker_id: str
    color: str
    base_iv: float


BROKER_ROSTER: tuple[Broker, ...] = (
    Broker("YAQZ", "#E74C3C", 4.31),
    Broker("YHQZ", "#3498DB", 4.95),
    Broker("ZXZZ", "#2ECC71", 4.34),
    Broker("ZSQH", "#F39C12", 5.33),
    Broker("ZJ", "#9B59B6", 3.08),
    Broker("GJQZ", "#F1C40F", 4.70),
)

_PERCENT_RE = re.compile(r"(\d+\.\d+)")


def _combined_seed(code_seed: int, broker: Broker) -> int:
    return (code_seed + seed(broker.broker_id)) % 1000


def _price_variance(combined: int) -> float:
    return 0.85 + (combined / 1000) * 0.3


def _iv_noise(combined: int) -> float:
    return 0.9 + (combined % 100) / 500


def _quote(broker: Broker, price: float, iv: float) -> BrokerQuote:
    return BrokerQuote(
        broker_id=broker.broker_id,
        price=round(price, 4),
        implied_volatility=f"{iv:.2f}%",
        display_color=broker.color,
    )


def anchored_panel(
    base_price: float,
    *,
    code: str,
    tenor: Tenor,
    side: OptionSide,
    ratio: float,
) -> list[BrokerQuote]:
    """Spread a real quoted price across the roster."""

    code_seed = seed(code)
    skew = greeks.iv_skew_factor(ratio, side)
    term_iv = greeks.term_iv_factor(tenor)
    panel: list[BrokerQuote] = []
    for index, broker in enumerate(BROKER_ROSTER):
        combined = _combined_seed(code_seed, broker)
        price = base_price * _price_variance(combined)
        iv = (4.0 + index % 3) * skew * term_iv * _iv_noise(combined)
        panel.append(_quote(broker, price, iv))
    return panel


def theoretical_base_price(*, code: str, spot: float, strike: float, tenor: Tenor, side: OptionSide) -> float:
    """Intrinsic value for in-the-money strikes, a seeded time value otherwise."""

    ratio = strike / spot * 100
    term_price = greeks.term_price_factor(tenor)
    if side == OptionSide.CALL:
        in_the_money = ratio < 100
        intrinsic = (spot - strike) / spot
    else:
        in_the_money = ratio > 100
        intrinsic = (strike - spot) / spot
    if in_the_money:
        return max(max(0.0, intrinsic) * term_price * 0.8, 0.01)
    return (max(5, seed(code) % 15) / 1000) * spot * term_price


def _moneyness_adjustment(side: OptionSide, ratio: float) -> float:
    if greeks.is_deep_itm(side, ratio):
        return 1.2
    if greeks.is_deep_otm(side, ratio):
        return 0.8
    return 1.0


def synthetic_panel(
    *,
    code: str,
    spot: float,
    strike: float,
    tenor: Tenor,
    side: OptionSide,
) -> list[BrokerQuote]:
    """Build a full panel when no broker sheet quotes the contract."""

    code_seed = seed(code)
    ratio = strike / spot * 100 if strike > 0 and spot > 0 else 100.0
    base_price = theoretical_base_price(code=code, spot=spot, strike=strike, tenor=tenor, side=side)
    skew = greeks.iv_skew_factor(ratio, side)
    term_iv = greeks.term_iv_factor(tenor)
    adjustment = _moneyness_adjustment(side, ratio)
    panel: list[BrokerQuote] = []
    for broker in BROKER_ROSTER:
        combined = _combined_seed(code_seed, broker)
        price = base_price * _price_variance(combined) * adjustment
        iv = broker.base_iv * term_iv * skew * _iv_noise(combined)
        panel.append(_quote(broker, price, iv))
    return panel


def panel_average(panel: list[BrokerQuote]) -> float:
    if not panel:
        return 0.0
    return round(sum(quote.price for quote in panel) / len(panel), 4)


def _parse_percent(text: str) -> float:
    match = _PERCENT_RE.search(text)
    return float(match.group(1)) if match else 0.0


def panel_implied_volatility(panel: list[BrokerQuote]) -> str:
    if not panel:
        return "0.00%"
    values = [_parse_percent(quote.implied_volatility) for quote in panel]
    return f"{sum(values) / len(values):.2f}%"
