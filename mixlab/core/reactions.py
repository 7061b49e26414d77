"""
Reaction rules and their gating conditions.

A ``ReactionRule`` is an immutable stoichiometric transformation: input
quantities are consumed and output quantities produced in proportion to
an *extent* computed for each application. The extent is scaled by the
rule rate, the time step, a gating condition and the limiting reagent
ratio (Liebig's law of the minimum), so a rule can never drive one of
its required inputs negative.

Conditions are plain data (frozen dataclasses) rather than closures.
They are evaluated by ``evaluate_condition`` and can be serialised with
``condition_to_dict``/``condition_from_dict``, which keeps rule sets
data driven and replayable.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple, Union

from .mixture import Mixture, as_mixture
from .types import Substance, TagMap, clamp

#: Conditions are clamped to [0, CONDITION_MAX] before use.
CONDITION_MAX = 3.0


@dataclass
class ReactionContext:
    """Mutable state a rule is applied against.

    Attributes:
        mixture: Working mixture; rules mutate it in place via ``Mixture.add``.
        temperature: Optional ambient temperature (normalised units).
        ph: Optional acidity of the medium.
        catalysts: Mixture of catalysts present; never consumed.
        tags: Named continuous signals (rainfall, trust, heat, variation...).
    """
    mixture: Mixture
    temperature: Optional[float] = None
    ph: Optional[float] = None
    catalysts: Mixture = field(default_factory=Mixture)
    tags: TagMap = field(default_factory=dict)


# ----------------------------------------------------------------------
# Conditions


@dataclass(frozen=True)
class Always:
    """Condition that always evaluates to 1."""


@dataclass(frozen=True)
class TemperatureWindow:
    """Binary gate: 1 inside ``[lo, hi]``, 0 outside or when temperature is unknown."""
    lo: float
    hi: float


@dataclass(frozen=True)
class CatalystBoost:
    """Multiplier ``1 + strength * concentration`` clamped to [0, 3]."""
    substance: Substance
    strength: float


@dataclass(frozen=True)
class TagThreshold:
    """Smooth sigmoid gate over a named context tag (missing tag reads as 0)."""
    tag: str
    threshold: float
    slope: float = 10.0


@dataclass(frozen=True)
class AllOf:
    """Product of several conditions."""
    conditions: Tuple["Condition", ...] = ()


Condition = Union[Always, TemperatureWindow, CatalystBoost, TagThreshold, AllOf]

ALWAYS = Always()


def evaluate_condition(condition: Condition, ctx: ReactionContext) -> float:
    """Return the raw (unclamped) multiplier of ``condition`` for ``ctx``."""
    if isinstance(condition, Always):
        return 1.0
    elif isinstance(condition, TemperatureWindow):
        t = ctx.temperature
        if t is not None and condition.lo <= t <= condition.hi:
            return 1.0
        return 0.0
    elif isinstance(condition, CatalystBoost):
        boost = ctx.catalysts.get(condition.substance)
        return clamp(1.0 + condition.strength * boost, 0.0, CONDITION_MAX)
    elif isinstance(condition, TagThreshold):
        value = ctx.tags.get(condition.tag, 0.0)
        z = -condition.slope * (value - condition.threshold)
        # math.exp overflows past ~709; the sigmoid is already 0 there.
        if z > 700.0:
            return 0.0
        return 1.0 / (1.0 + math.exp(z))
    elif isinstance(condition, AllOf):
        result = 1.0
        for member in condition.conditions:
            result *= evaluate_condition(member, ctx)
        return result
    raise TypeError(f"unknown condition type: {type(condition).__name__}")


def condition_to_dict(condition: Condition) -> dict:
    """Serialise a condition to a plain dict with a ``kind`` key."""
    if isinstance(condition, Always):
        return {"kind": "always"}
    if isinstance(condition, TemperatureWindow):
        return {"kind": "temperature_window", "lo": condition.lo, "hi": condition.hi}
    if isinstance(condition, CatalystBoost):
        return {"kind": "catalyst_boost", "substance": condition.substance, "strength": condition.strength}
    if isinstance(condition, TagThreshold):
        return {"kind": "tag_threshold", "tag": condition.tag,
                "threshold": condition.threshold, "slope": condition.slope}
    if isinstance(condition, AllOf):
        return {"kind": "all_of", "conditions": [condition_to_dict(c) for c in condition.conditions]}
    raise TypeError(f"unknown condition type: {type(condition).__name__}")


def condition_from_dict(d: Mapping) -> Condition:
    """Inverse of ``condition_to_dict``."""
    kind = d.get("kind", "always")
    if kind == "always":
        return ALWAYS
    if kind == "temperature_window":
        return TemperatureWindow(float(d["lo"]), float(d["hi"]))
    if kind == "catalyst_boost":
        return CatalystBoost(d["substance"], float(d["strength"]))
    if kind == "tag_threshold":
        return TagThreshold(d["tag"], float(d["threshold"]), float(d.get("slope", 10.0)))
    if kind == "all_of":
        return AllOf(tuple(condition_from_dict(c) for c in d.get("conditions", ())))
    raise ValueError(f"unknown condition kind: {kind!r}")


# ----------------------------------------------------------------------
# Rules


class ReactionRule:
    """Immutable stoichiometric rule.

    ``inputs`` are consumed and ``outputs`` produced in proportion to the
    extent of each application. The rule holds no mutable state and may
    be shared freely between reactors, agents and threads.
    """

    __slots__ = ("_inputs", "_outputs", "_rate", "_condition", "_name")

    def __init__(
        self,
        inputs: Union[Mixture, Mapping[Substance, float]],
        outputs: Union[Mixture, Mapping[Substance, float]],
        rate: float,
        condition: Condition = ALWAYS,
        name: str = "",
    ):
        if rate < 0 or not math.isfinite(rate):
            raise ValueError(f"reaction rate must be a finite value >= 0, got {rate!r}")
        for label, quantities in (("input", inputs), ("output", outputs)):
            for key, value in quantities.items():
                if value < 0:
                    raise ValueError(f"{label} quantity for {key!r} must be >= 0, got {value!r}")
        object.__setattr__(self, "_inputs", as_mixture(inputs).copy())
        object.__setattr__(self, "_outputs", as_mixture(outputs).copy())
        object.__setattr__(self, "_rate", float(rate))
        object.__setattr__(self, "_condition", condition)
        object.__setattr__(self, "_name", name)

    def __setattr__(self, key, value):
        raise AttributeError("ReactionRule is immutable")

    @property
    def inputs(self) -> Mixture:
        return self._inputs.copy()

    @property
    def outputs(self) -> Mixture:
        return self._outputs.copy()

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def condition(self) -> Condition:
        return self._condition

    @property
    def name(self) -> str:
        return self._name

    def __repr__(self) -> str:
        label = self._name or "rule"
        return f"ReactionRule({label}: {self._inputs!r} -> {self._outputs!r}, rate={self._rate})"

    def gate(self, ctx: ReactionContext) -> float:
        """Return the condition multiplier clamped to [0, 3]."""
        return clamp(evaluate_condition(self._condition, ctx), 0.0, CONDITION_MAX)

    def limit(self, mixture: Mixture) -> float:
        """Return the limiting reagent ratio for ``mixture``.

        The ratio ``available / required`` is taken over every input with
        a positive requirement and the minimum is returned. A rule with no
        positive inputs has an infinite limit and never fires.
        """
        limit = math.inf
        for key, need in self._inputs.items():
            if need <= 0:
                continue
            limit = min(limit, mixture.get(key) / need)
        return limit

    def extent(self, ctx: ReactionContext, dt: float) -> float:
        """Return the extent this rule would apply to ``ctx`` over ``dt``."""
        cond = self.gate(ctx)
        if cond <= 0:
            return 0.0
        limit = self.limit(ctx.mixture)
        if not math.isfinite(limit) or limit <= 0:
            return 0.0
        extent = self._rate * dt * cond * limit
        return extent if extent > 0 else 0.0

    def apply(self, ctx: ReactionContext, dt: float) -> float:
        """Apply the rule to ``ctx.mixture`` in place and return the extent used.

        The extent is additionally capped at ``limit`` so that a large
        ``rate * dt`` product can never consume more of a reagent than is
        present.
        """
        extent = self.extent(ctx, dt)
        if extent <= 0:
            return 0.0
        extent = min(extent, self.limit(ctx.mixture))
        for key, need in self._inputs.items():
            ctx.mixture.add(key, -need * extent)
        for key, out in self._outputs.items():
            ctx.mixture.add(key, out * extent)
        return extent

    def mass_balance(self) -> float:
        """Return total output minus total input per unit extent."""
        return self._outputs.total() - self._inputs.total()

    def to_dict(self) -> dict:
        return {
            "name": self._name,
            "inputs": self._inputs.to_dict(),
            "outputs": self._outputs.to_dict(),
            "rate": self._rate,
            "condition": condition_to_dict(self._condition),
        }

    @classmethod
    def from_dict(cls, d: Mapping) -> "ReactionRule":
        return cls(
            inputs=d.get("inputs", {}),
            outputs=d.get("outputs", {}),
            rate=float(d.get("rate", 0.0)),
            condition=condition_from_dict(d.get("condition", {"kind": "always"})),
            name=d.get("name", ""),
        )


def temperature_window(lo: float, hi: float) -> TemperatureWindow:
    return TemperatureWindow(lo, hi)


def catalyst_boost(substance: Substance, strength: float) -> CatalystBoost:
    return CatalystBoost(substance, strength)


def tag_threshold(tag: str, threshold: float, slope: float = 10.0) -> TagThreshold:
    return TagThreshold(tag, threshold, slope)


def all_of(*conditions: Condition) -> AllOf:
    return AllOf(tuple(conditions))


def rules_to_dicts(rules) -> list:
    return [rule.to_dict() for rule in rules]


def rules_from_dicts(items) -> list:
    return [ReactionRule.from_dict(d) for d in items]
