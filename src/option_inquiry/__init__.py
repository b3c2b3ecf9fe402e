"""Option inquiry quote synthesis over broker quote sheets."""

from option_inquiry.engine import QuoteSynthesizer, synthesize
from option_inquiry.models import OptionQuoteResult, QuoteRequest

__all__ = ["OptionQuoteResult", "QuoteRequest", "QuoteSynthesizer", "synthesize"]
