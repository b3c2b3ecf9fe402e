"""Option inquiry domain models."""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OptionSide(str, Enum):
    CALL = "call"
    PUT = "put"


class Tenor(str, Enum):
    W2 = "2W"
    M1 = "1M"
    M2 = "2M"
    M3 = "3M"
    M6 = "6M"
    M12 = "12M"


class Structure(str, Enum):
    ATM = "atm"
    ITM = "itm"
    OTM = "otm"
    CUSTOM = "custom"


class ProductType(str, Enum):
    VANILLA = "vanilla"
    SNOWBALL = "snowball"


class QuoteRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    underlying_code: str
    side: OptionSide
    tenor: Tenor
    structure: Structure = Structure.ATM
    custom_strike_ratio: float | None = Field(default=None, gt=0)
    custom_strike: float | None = Field(default=None, ge=0)
    custom_expiry: str | None = None
    product: ProductType = ProductType.VANILLA

    @field_validator("underlying_code")
    @classmethod
    def _strip_code(cls, value: str) -> str:
        code = value.strip()
        if not code:
            raise ValueError("underlying_code must not be empty")
        return code

    @field_validator("custom_expiry")
    @classmethod
    def _validate_expiry(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return date.fromisoformat(value.strip()).isoformat()


class UnderlyingInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    spot_price: float = Field(gt=0)


class BrokerQuote(BaseModel):
    model_config = ConfigDict(frozen=True)

    broker_id: str
    price: float = Field(ge=0)
    implied_volatility: str
    display_color: str


class OptionQuoteResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    underlying_code: str
    underlying_name: str
    spot_price: float
    side: OptionSide
    tenor: Tenor
    strike: float
    moneyness_ratio: float
    expiry: str
    bid: float
    ask: float
    last: float
    delta: float
    gamma: float
    theta: float
    vega: float
    implied_volatility: str
    volume: int
    open_interest: int
    quote_source: str
    quote_timestamp: str
    broker_panel: list[BrokerQuote] = Field(default_factory=list)
