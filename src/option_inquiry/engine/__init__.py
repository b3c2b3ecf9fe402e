"""Quote synthesis engine."""

from option_inquiry.engine.synthesizer import QuoteSynthesizer, synthesize

__all__ = ["QuoteSynthesizer", "synthesize"]
