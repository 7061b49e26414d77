"""
Sparse mixture representation shared by every engine component.

A ``Mixture`` maps substance names to non-negative quantities. Absent
substances read as zero and any entry whose quantity drops to or below
``EPSILON`` is removed, so no zero or negative entries ever persist.

Mixtures behave as values: ``scale`` and ``merge`` always build a new
mixture and leave their operands untouched. ``add`` is the single in
place operation; the reactor and metabolism rely on it to accumulate
changes into their own working mixture during a step, while crafting
uses ``scale``/``merge`` so that registered item mixtures are never
mutated by a craft.
"""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional, Tuple

from .types import Substance

#: Quantities at or below this threshold are treated as absent.
EPSILON = 1e-9

#: Deltas smaller than this in magnitude are ignored by ``Mixture.add``.
DELTA_EPSILON = 1e-12


class Mixture:
    """Sparse, non-negative quantity map over named substances."""

    __slots__ = ("_q",)

    def __init__(self, quantities: Optional[Mapping[Substance, float]] = None):
        self._q: Dict[Substance, float] = {}
        if quantities:
            for key, value in quantities.items():
                value = float(value)
                if value > EPSILON:
                    self._q[key] = value

    # ------------------------------------------------------------------
    # Accessors

    def get(self, key: Substance) -> float:
        """Return the quantity of ``key`` or 0.0 when absent."""
        return self._q.get(key, 0.0)

    def total(self) -> float:
        return float(sum(self._q.values()))

    def keys(self):
        return self._q.keys()

    def values(self):
        return self._q.values()

    def items(self):
        return self._q.items()

    def sorted_items(self) -> Tuple[Tuple[Substance, float], ...]:
        """Return entries ordered by substance name."""
        return tuple(sorted(self._q.items()))

    def __len__(self) -> int:
        return len(self._q)

    def __iter__(self) -> Iterator[Substance]:
        return iter(self._q)

    def __contains__(self, key: object) -> bool:
        return key in self._q

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mixture):
            return self._q == other._q
        if isinstance(other, Mapping):
            return self._q == Mixture(other)._q
        return NotImplemented

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v:.6g}" for k, v in self.sorted_items())
        return f"Mixture({body})"

    # ------------------------------------------------------------------
    # Arithmetic

    def add(self, key: Substance, delta: float) -> None:
        """Add ``delta`` to ``key`` in place.

        Tiny deltas are ignored. If the resulting quantity is at or
        below ``EPSILON`` the entry is removed.
        """
        if abs(delta) < DELTA_EPSILON:
            return
        nxt = self._q.get(key, 0.0) + delta
        if nxt <= EPSILON:
            self._q.pop(key, None)
        else:
            self._q[key] = nxt

    def scale(self, factor: float) -> "Mixture":
        """Return a new mixture with every quantity multiplied by ``factor``."""
        out = Mixture()
        for key, value in self._q.items():
            nxt = value * factor
            if nxt > EPSILON:
                out._q[key] = nxt
        return out

    def merge(self, delta: "Mixture | Mapping[Substance, float]") -> "Mixture":
        """Return ``self`` with ``delta`` applied additively."""
        return merge(self, delta)

    def copy(self) -> "Mixture":
        out = Mixture()
        out._q = dict(self._q)
        return out

    def normalized(self) -> "Mixture":
        """Return proportions summing to one, or an empty mixture."""
        total = self.total()
        if total <= EPSILON:
            return Mixture()
        out = Mixture()
        for key, value in self._q.items():
            out._q[key] = value / total
        return out

    def approx_equal(self, other: "Mixture", tol: float = 0.01) -> bool:
        """Compare two mixtures entry by entry with an absolute tolerance."""
        for key in set(self._q) | set(other.keys()):
            if abs(self.get(key) - other.get(key)) > tol:
                return False
        return True

    # ------------------------------------------------------------------
    # Serialisation

    def to_dict(self) -> Dict[Substance, float]:
        return dict(self._q)

    @classmethod
    def from_dict(cls, d: Mapping[Substance, float]) -> "Mixture":
        return cls(d)


def merge(base: Mixture, delta: "Mixture | Mapping[Substance, float]") -> Mixture:
    """Return a new mixture equal to ``base`` plus ``delta``.

    Negative entries in ``delta`` subtract; an entry that cancels to
    ``EPSILON`` or below disappears from the result. Neither operand is
    modified.
    """
    out = base.copy()
    for key, value in delta.items():
        out.add(key, value)
    return out


def as_mixture(value: "Mixture | Mapping[Substance, float] | None") -> Mixture:
    """Coerce a plain mapping (or ``None``) into a ``Mixture``."""
    if value is None:
        return Mixture()
    if isinstance(value, Mixture):
        return value
    return Mixture(value)
