"""Command-line interface for option inquiry."""
