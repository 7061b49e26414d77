"""
Reactor: multi-step execution of an ordered rule list.

The reactor is the one driver behind every call site of the engine.
World synthesis and crafting call ``Reactor.run`` on an item mixture;
metabolism applies the same ``step`` to an agent's stomach pool. A run
copies the starting mixture into a private ``ReactionContext`` and then
applies every rule, in order, once per step. Runs are bounded
(``steps * len(rules)`` rule applications) and contain no randomness,
so identical inputs always yield bit-identical outputs; any desired
variation must be passed in as a context tag by the caller.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence, Union

from .config import DEFAULT_CONFIG, EngineConfig
from .mixture import Mixture, as_mixture
from .reactions import ReactionContext, ReactionRule
from .types import Substance, TagMap

logger = logging.getLogger(__name__)

MixtureLike = Union[Mixture, Mapping[Substance, float]]


class Reactor:
    """Applies a fixed, ordered list of rules to mixtures.

    Attributes:
        rules: The rules applied each step, in order.
        cfg: Engine configuration supplying default ``steps`` and ``dt``.
        total_steps: Diagnostic counter of steps executed by this reactor.
    """

    def __init__(self, rules: Sequence[ReactionRule], config: Optional[EngineConfig] = None):
        self.rules = tuple(rules)
        self.cfg = config or DEFAULT_CONFIG
        self.total_steps = 0

    def step(self, ctx: ReactionContext, dt: float) -> float:
        """Apply every rule once to ``ctx`` and return the summed extent."""
        applied = 0.0
        for rule in self.rules:
            applied += rule.apply(ctx, dt)
        self.total_steps += 1
        return applied

    def run(
        self,
        mixture: MixtureLike,
        temperature: Optional[float] = None,
        catalysts: Optional[MixtureLike] = None,
        tags: Optional[TagMap] = None,
        steps: Optional[int] = None,
        dt: Optional[float] = None,
        ph: Optional[float] = None,
    ) -> Mixture:
        """Run the rule list against a private copy of ``mixture``.

        Args:
            mixture: Starting mixture. It is never modified.
            temperature: Optional context temperature for temperature gated rules.
            catalysts: Optional catalyst mixture; catalysts are not consumed.
            tags: Optional named signals (heat, wet, rainfall, variation...).
            steps: Number of steps; defaults to ``cfg.default_steps``.
            dt: Time per step; defaults to ``cfg.default_dt``.
            ph: Optional acidity of the medium.

        Returns:
            The resulting mixture.
        """
        steps = self.cfg.default_steps if steps is None else steps
        dt = self.cfg.default_dt if dt is None else dt
        if steps < 0:
            raise ValueError(f"steps must be >= 0, got {steps!r}")
        if dt < 0:
            raise ValueError(f"dt must be >= 0, got {dt!r}")

        ctx = ReactionContext(
            mixture=as_mixture(mixture).copy(),
            temperature=temperature,
            ph=ph,
            catalysts=as_mixture(catalysts).copy(),
            tags=dict(tags or {}),
        )
        applied = 0.0
        for _ in range(int(steps)):
            applied += self.step(ctx, dt)
        logger.debug(
            "reactor run: %d steps x %d rules, dt=%.3f, total extent %.4f",
            steps, len(self.rules), dt, applied,
        )
        return ctx.mixture


def run_reactor(
    mixture: MixtureLike,
    rules: Sequence[ReactionRule],
    temperature: Optional[float] = None,
    catalysts: Optional[MixtureLike] = None,
    tags: Optional[TagMap] = None,
    steps: Optional[int] = None,
    dt: Optional[float] = None,
    config: Optional[EngineConfig] = None,
) -> Mixture:
    """Functional form of ``Reactor(rules).run(...)``."""
    return Reactor(rules, config).run(
        mixture, temperature=temperature, catalysts=catalysts, tags=tags, steps=steps, dt=dt
    )
