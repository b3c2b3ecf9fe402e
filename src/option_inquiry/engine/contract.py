"""Strike, moneyness and expiry resolution for a requested structure."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from option_inquiry.models.quote import QuoteRequest, Structure, Tenor

STRUCTURE_RATIOS: dict[Structure, float] = {
    Structure.ATM: 100.0,
    Structure.ITM: 90.0,
    Structure.OTM: 110.0,
}
DEFAULT_RATIO = 100.0

_TENOR_MONTHS: dict[str, int] = {"1M": 1, "2M": 2, "3M": 3, "6M": 6, "12M": 12}


def moneyness_ratio_for(structure: Structure) -> float:
    # Calls and puts share the ratio; the greeks decide which side is in the money.
    return STRUCTURE_RATIOS.get(structure, DEFAULT_RATIO)


def strike_from(spot: float, structure: Structure) -> float:
    return round(spot * moneyness_ratio_for(structure) / 100, 2)


def _add_months(start: date, months: int) -> date:
    # Overflowing days roll into the following month (Jan 31 + 1M -> Mar 3).
    index = start.month - 1 + months
    first = date(start.year + index // 12, index % 12 + 1, 1)
    return first + timedelta(days=start.day - 1)


def expiry_from(tenor: Tenor | str, today: date) -> str:
    key = tenor.value if isinstance(tenor, Tenor) else str(tenor)
    if key == "2W":
        expiry = today + timedelta(days=14)
    elif key in _TENOR_MONTHS:
        expiry = _add_months(today, _TENOR_MONTHS[key])
    else:
        expiry = today
    return expiry.isoformat()


@dataclass(frozen=True)
class ContractTerms:
    strike: float
    ratio: float
    expiry: str


@dataclass(frozen=True)
class FixedRatio:
    """ATM / ITM / OTM: strike follows spot at a fixed ratio."""

    structure: Structure

    @property
    def ratio(self) -> float:
        return moneyness_ratio_for(self.structure)

    @property
    def quotable(self) -> bool:
        return True

    def resolve(self, spot: float, tenor: Tenor, today: date) -> ContractTerms:
        return ContractTerms(
            strike=strike_from(spot, self.structure),
            ratio=self.ratio,
            expiry=expiry_from(tenor, today),
        )


@dataclass(frozen=True)
class CallerStrike:
    """Custom structure: the caller supplies the strike and optionally the expiry."""

    strike: float
    expiry: str | None = None

    @property
    def quotable(self) -> bool:
        return False

    def resolve(self, spot: float, tenor: Tenor, today: date) -> ContractTerms:
        return ContractTerms(
            strike=self.strike,
            ratio=self.strike / spot * 100,
            expiry=self.expiry or expiry_from(tenor, today),
        )


StructurePolicy = FixedRatio | CallerStrike


def policy_for(request: QuoteRequest) -> StructurePolicy | None:
    """Build the structure policy, or ``None`` when a custom request lacks its strike."""

    if request.structure == Structure.CUSTOM:
        if not request.custom_strike:
            return None
        return CallerStrike(strike=request.custom_strike, expiry=request.custom_expiry)
    return FixedRatio(request.structure)
