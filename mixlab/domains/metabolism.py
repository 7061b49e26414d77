"""
Metabolism - per-agent chemistry pools, absorption and macro state.

Each agent carries three mixtures: a ``stomach`` that receives ingested
items, a ``body`` that holds absorbed substances, and a ``blood`` pool
reserved for hosts that model circulation. A metabolism tick:

1. merges any newly ingested mixture into the stomach,
2. runs the body rule list against the stomach for ``dt`` (temperature
   and pH read from the body, body enzymes ``ENZ_*`` act as catalysts),
3. moves ``clamp(0.1 * dt, 0, 0.5)`` of what remains in the stomach into
   the body,
4. derives a ``MacroSnapshot`` from the body.

The snapshot is a pure function of the body mixture and is recomputed
every tick; it is cached on the chemistry only for convenience.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from ..core.config import DEFAULT_CONFIG, EngineConfig
from ..core.mixture import Mixture, as_mixture, merge
from ..core.reactions import ReactionContext, ReactionRule
from ..core.reactor import Reactor
from ..core.types import TagMap, clamp
from . import substances as S

logger = logging.getLogger(__name__)

#: Body mixture given to agents that have no chemistry yet.
DEFAULT_BODY = {S.GLU: 0.5, S.H2O: 0.5, S.O2: 0.5, S.TEMP: 0.5, S.PH: 0.5}

#: Body substances reported by ``simulate_ingestion``.
ESSENTIAL_KEYS = (S.ATP, S.H2O, S.O2, S.GLU, S.PH, S.TEMP)

#: Minimum delta of an essential substance before a note is emitted.
NOTE_THRESHOLD = 0.05


@dataclass(frozen=True)
class MacroSnapshot:
    """Bounded physiological summary of a body mixture. All fields lie in [0, 1]."""
    energy: float
    pain: float
    mood: float
    focus: float
    hunger_signal: float
    thirst_signal: float
    stress: float

    def to_dict(self) -> Dict[str, float]:
        return dict(self.__dict__)


@dataclass
class AgentChemistry:
    """Mutable chemistry pools owned by one agent."""
    body: Mixture = field(default_factory=lambda: Mixture(DEFAULT_BODY))
    stomach: Mixture = field(default_factory=Mixture)
    blood: Mixture = field(default_factory=Mixture)
    last_macro: Optional[MacroSnapshot] = None

    def copy(self) -> "AgentChemistry":
        return AgentChemistry(
            body=self.body.copy(),
            stomach=self.stomach.copy(),
            blood=self.blood.copy(),
            last_macro=self.last_macro,
        )


def derive_macro_snapshot(body: Mixture) -> MacroSnapshot:
    """Derive the seven macro fields from ``body`` by fixed linear combinations."""
    glu = body.get(S.GLU)
    inflam = body.get(S.INFLAM)
    ser = body.get(S.SER)
    water = body.get(S.H2O)
    dopa = body.get(S.DOPA)
    stress_chems = body.get(S.STRESS) + body.get(S.CORT) + body.get(S.ADREN)

    return MacroSnapshot(
        energy=clamp(0.5 + 0.05 * glu - 0.03 * inflam, 0.0, 1.0),
        pain=clamp(0.06 * inflam, 0.0, 1.0),
        mood=clamp(0.5 + 0.04 * ser - 0.02 * inflam - 0.02 * stress_chems, 0.0, 1.0),
        focus=clamp(0.5 + 0.04 * dopa - 0.03 * stress_chems, 0.0, 1.0),
        hunger_signal=clamp(0.5 + 0.03 - 0.06 * glu, 0.0, 1.0),
        thirst_signal=clamp(0.5 + 0.03 - 0.08 * water, 0.0, 1.0),
        stress=clamp(stress_chems, 0.0, 1.0),
    )


def ingest(chemistry: AgentChemistry, mixture: Mapping[str, float], amount: float = 1.0) -> None:
    """Merge ``amount`` servings of ``mixture`` into the stomach."""
    chemistry.stomach = merge(chemistry.stomach, as_mixture(mixture).scale(amount))


def enzyme_catalysts(body: Mixture) -> Mixture:
    """Body entries prefixed ``ENZ_``; they catalyse digestion without being consumed."""
    return Mixture({k: v for k, v in body.items() if k.startswith(S.ENZYME_PREFIX)})


class Metabolism:
    """Applies a body rule list to agent chemistry, one tick at a time.

    Attributes:
        reactor: Reactor wrapping the body rules.
        cfg: Engine configuration (absorption rate and cap).
    """

    def __init__(self, rules: Sequence[ReactionRule], config: Optional[EngineConfig] = None):
        self.cfg = config or DEFAULT_CONFIG
        self.reactor = Reactor(rules, self.cfg)

    def absorbed_fraction(self, dt: float) -> float:
        return clamp(self.cfg.absorption_rate * dt, 0.0, self.cfg.absorption_cap)

    def tick(
        self,
        chemistry: AgentChemistry,
        dt: float,
        ingested: Optional[Mapping[str, float]] = None,
        tags: Optional[TagMap] = None,
    ) -> MacroSnapshot:
        """Advance ``chemistry`` by ``dt`` in place and return the new snapshot."""
        if dt < 0:
            raise ValueError(f"dt must be >= 0, got {dt!r}")
        if ingested:
            ingest(chemistry, ingested)

        ctx = ReactionContext(
            mixture=chemistry.stomach.copy(),
            temperature=chemistry.body.get(S.TEMP),
            ph=chemistry.body.get(S.PH),
            catalysts=enzyme_catalysts(chemistry.body),
            tags=dict(tags or {}),
        )
        self.reactor.step(ctx, dt)

        fraction = self.absorbed_fraction(dt)
        absorbed = ctx.mixture.scale(fraction)
        chemistry.stomach = ctx.mixture.scale(1.0 - fraction)
        chemistry.body = merge(chemistry.body, absorbed)

        macro = derive_macro_snapshot(chemistry.body)
        chemistry.last_macro = macro
        return macro


def tick_metabolism(
    chemistry: AgentChemistry,
    rules: Sequence[ReactionRule],
    dt: float,
    ingested: Optional[Mapping[str, float]] = None,
    tags: Optional[TagMap] = None,
    config: Optional[EngineConfig] = None,
) -> MacroSnapshot:
    """Functional form of ``Metabolism(rules).tick(...)``."""
    return Metabolism(rules, config).tick(chemistry, dt, ingested=ingested, tags=tags)


@dataclass
class IngestionReport:
    """Outcome of simulating an item passing through a body."""
    before: MacroSnapshot
    after: MacroSnapshot
    essential_delta: Dict[str, float]
    notes: List[str]

    def macro_delta(self) -> Dict[str, float]:
        before = self.before.to_dict()
        return {k: v - before[k] for k, v in self.after.to_dict().items()}


def simulate_ingestion(
    body: Mixture,
    item_mix: Mapping[str, float],
    rules: Sequence[ReactionRule],
    steps: Optional[int] = None,
    dt: Optional[float] = None,
    config: Optional[EngineConfig] = None,
) -> IngestionReport:
    """Run a private metabolism on copies of ``body`` with ``item_mix`` in the stomach.

    Nothing passed in is modified. The report carries the macro snapshot
    before and after, the change in each essential substance and short
    notes describing notable effects.
    """
    cfg = config or DEFAULT_CONFIG
    steps = cfg.ingestion_sim_steps if steps is None else steps
    dt = cfg.ingestion_sim_dt if dt is None else dt

    before = derive_macro_snapshot(body)
    working = AgentChemistry(body=body.copy(), stomach=as_mixture(item_mix).copy())
    metabolism = Metabolism(rules, cfg)
    for _ in range(steps):
        metabolism.tick(working, dt)
    after = derive_macro_snapshot(working.body)

    delta = {key: working.body.get(key) - body.get(key) for key in ESSENTIAL_KEYS}
    notes: List[str] = []
    if delta[S.H2O] > NOTE_THRESHOLD:
        notes.append("hydrating")
    if delta[S.H2O] < -NOTE_THRESHOLD:
        notes.append("dehydrating")
    if delta[S.ATP] > NOTE_THRESHOLD:
        notes.append("energy potential increased")
    if delta[S.O2] < -NOTE_THRESHOLD:
        notes.append("oxygen consumed")
    if delta[S.PH] < -NOTE_THRESHOLD:
        notes.append("acidifying")
    if delta[S.PH] > NOTE_THRESHOLD:
        notes.append("alkalizing")
    logger.debug("ingestion simulated over %d steps: %s", steps, ", ".join(notes) or "no notable effect")
    return IngestionReport(before=before, after=after, essential_delta=delta, notes=notes)
