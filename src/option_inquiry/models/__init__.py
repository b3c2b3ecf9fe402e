"""Option inquiry domain models."""

from option_inquiry.models.quote import (
    BrokerQuote,
    OptionQuoteResult,
    OptionSide,
    ProductType,
    QuoteRequest,
    Structure,
    Tenor,
    UnderlyingInfo,
)

__all__ = [
    "BrokerQuote",
    "OptionQuoteResult",
    "OptionSide",
    "ProductType",
    "QuoteRequest",
    "Structure",
    "Tenor",
    "UnderlyingInfo",
]
