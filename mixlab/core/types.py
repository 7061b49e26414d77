"""Small shared helpers and type aliases for the core engine."""

from __future__ import annotations

from typing import Dict

#: Substance identifiers are plain interned strings such as ``"H2O"``.
Substance = str

#: Free-form named scalar signals (rainfall, trust, variation, heat...).
TagMap = Dict[str, float]


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp ``x`` into the closed interval ``[lo, hi]``."""
    return max(lo, min(hi, x))
