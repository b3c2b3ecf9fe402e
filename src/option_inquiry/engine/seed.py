"""Deterministic seeds for reproducible synthetic values.

The seed is the sum of the string's code points. It collides freely
(``"AB"`` and ``"BA"`` share a seed) and is not a hash; every synthetic
price, volatility and counter downstream depends on it staying exactly this.
"""

from __future__ import annotations


def seed(identifier: str) -> int:
    return sum(ord(char) for char in identifier)


def synthetic_spot(code: str) -> float:
    """Stable stand-in spot price in [10, 109] for an unknown security."""

    return round(float(seed(code) % 100 + 10), 2)
