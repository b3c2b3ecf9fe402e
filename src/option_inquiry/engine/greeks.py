"""Table-driven option sensitivities and volatility multipliers.

Nothing here is derived from a pricing model. Each function is a fixed
lookup keyed on tenor, moneyness ratio (strike / spot x 100) and side, and
returns the same value for the same inputs.
"""

from __future__ import annotations

from option_inquiry.models.quote import OptionSide, Tenor

# (bound, delta, bound inclusive). The outer edges are strict (<80, >=120);
# an interior breakpoint belongs to the bucket below it. Puts mirror calls.
_CALL_DELTA_STEPS: tuple[tuple[float, float, bool], ...] = (
    (80, 0.95, False),
    (90, 0.85, True),
    (95, 0.70, True),
    (98, 0.60, True),
    (102, 0.50, True),
    (105, 0.40, True),
    (110, 0.30, True),
    (120, 0.15, False),
)
_CALL_DELTA_TAIL = 0.05

_PUT_DELTA_STEPS: tuple[tuple[float, float, bool], ...] = (
    (80, -0.05, False),
    (90, -0.15, True),
    (95, -0.30, True),
    (98, -0.40, True),
    (102, -0.50, True),
    (105, -0.60, True),
    (110, -0.70, True),
    (120, -0.85, False),
)
_PUT_DELTA_TAIL = -0.95

GAMMA_BASE: dict[str, float] = {"2W": 0.18, "1M": 0.15, "2M": 0.12, "3M": 0.09, "6M": 0.06, "12M": 0.03}
THETA_BASE: dict[str, float] = {"2W": -0.05, "1M": -0.04, "2M": -0.03, "3M": -0.025, "6M": -0.015, "12M": -0.01}
VEGA_BASE: dict[str, float] = {"2W": 0.12, "1M": 0.15, "2M": 0.18, "3M": 0.21, "6M": 0.25, "12M": 0.30}
TERM_IV_FACTOR: dict[str, float] = {"2W": 0.85, "1M": 1.0, "2M": 1.1, "3M": 1.2, "6M": 1.35, "12M": 1.5}
TERM_PRICE_FACTOR: dict[str, float] = {"2W": 0.5, "1M": 1.0, "2M": 1.5, "3M": 1.8, "6M": 2.5, "12M": 3.5}

DEFAULT_GAMMA_BASE = 0.10
DEFAULT_THETA_BASE = -0.02
DEFAULT_VEGA_BASE = 0.20

_CALL_SKEW_STEPS: tuple[tuple[float, float], ...] = ((90, 1.3), (95, 1.15), (105, 1.0), (110, 1.1))
_PUT_SKEW_STEPS: tuple[tuple[float, float], ...] = ((90, 1.35), (95, 1.2), (105, 1.0), (110, 1.15))
_SKEW_TAIL = 1.25


def _tenor_key(tenor: Tenor | str) -> str:
    return tenor.value if isinstance(tenor, Tenor) else str(tenor)


def _step(value: float, steps: tuple[tuple[float, float], ...], tail: float) -> float:
    for upper, result in steps:
        if value < upper:
            return result
    return tail


def proximity_factor(ratio: float) -> float:
    """Damping applied as the strike moves away from spot."""

    distance = abs(ratio - 100)
    if distance <= 2:
        return 1.0
    if distance <= 5:
        return 0.9
    if distance <= 10:
        return 0.7
    return 0.5


def delta(side: OptionSide, ratio: float) -> float:
    steps, tail = (
        (_CALL_DELTA_STEPS, _CALL_DELTA_TAIL) if side == OptionSide.CALL else (_PUT_DELTA_STEPS, _PUT_DELTA_TAIL)
    )
    for bound, value, inclusive in steps:
        if ratio < bound or (inclusive and ratio == bound):
            return value
    return tail


def gamma(tenor: Tenor | str, ratio: float = 100) -> float:
    base = GAMMA_BASE.get(_tenor_key(tenor), DEFAULT_GAMMA_BASE)
    return round(base * proximity_factor(ratio), 4)


def is_deep_itm(side: OptionSide, ratio: float) -> bool:
    if side == OptionSide.CALL:
        return ratio < 80
    return ratio > 120


def is_deep_otm(side: OptionSide, ratio: float) -> bool:
    if side == OptionSide.CALL:
        return ratio > 120
    return ratio < 80


def theta(tenor: Tenor | str, ratio: float = 100, side: OptionSide = OptionSide.CALL) -> float:
    base = THETA_BASE.get(_tenor_key(tenor), DEFAULT_THETA_BASE)
    # Deep in-the-money decay flips to a small carry.
    if is_deep_itm(side, ratio):
        return round(abs(base) * 0.1, 4)
    return round(base * proximity_factor(ratio), 4)


def vega(tenor: Tenor | str, ratio: float = 100) -> float:
    base = VEGA_BASE.get(_tenor_key(tenor), DEFAULT_VEGA_BASE)
    return round(base * proximity_factor(ratio), 4)


def iv_skew_factor(ratio: float, side: OptionSide) -> float:
    """Volatility smile multiplier; 1.0 on the 95-105 plateau."""

    if side == OptionSide.CALL:
        return _step(ratio, _CALL_SKEW_STEPS, _SKEW_TAIL)
    return _step(ratio, _PUT_SKEW_STEPS, _SKEW_TAIL)


def term_iv_factor(tenor: Tenor | str) -> float:
    return TERM_IV_FACTOR.get(_tenor_key(tenor), 1.0)


def term_price_factor(tenor: Tenor | str) -> float:
    return TERM_PRICE_FACTOR.get(_tenor_key(tenor), 1.0)
