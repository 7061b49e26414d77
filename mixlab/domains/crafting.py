"""
Crafting pipeline and world synthesis.

A craft combines the mixtures of several input items (weighted), runs
the result through a reactor configured by a process preset, and
registers the product as a new item. The single random input of a
craft is the ``variation`` tag, drawn from the caller's random source;
the reactor itself stays deterministic.

Two scoring helpers are provided for hosts that feed results back into
recipe memory. They live on separate scales:
``score_ingestion`` works from a simulated metabolism run, while
``score_material`` works from static analyzer traits. Scores from one
should only be compared with scores from the same function.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence

import numpy as np

from ..core.config import EngineConfig
from ..core.entropy import RandomSource
from ..core.mixture import Mixture, as_mixture, merge
from ..core.reactions import ReactionRule
from ..core.reactor import Reactor
from ..core.types import TagMap
from .analyzer import MixAnalysis, intent_target_tag
from .items import ItemDefinition, ItemRegistry
from .metabolism import IngestionReport

logger = logging.getLogger(__name__)

#: Context tag carrying the per-craft random draw.
VARIATION_TAG = "variation"


@dataclass(frozen=True)
class ProcessPreset:
    """Reactor settings for one crafting process. ``None`` means reactor default."""
    temperature: Optional[float] = None
    tags: Dict[str, float] = field(default_factory=dict)
    steps: Optional[int] = None
    dt: Optional[float] = None
    catalysts: Dict[str, float] = field(default_factory=dict)

    # Unhashable: tags and catalysts are dicts.
    __hash__ = None


PROCESS_PRESETS: Dict[str, ProcessPreset] = {
    "forge": ProcessPreset(temperature=0.9, tags={"heat": 1.0}, steps=8, dt=0.8),
    "cook": ProcessPreset(temperature=0.65, tags={"heat": 0.6, "wet": 0.2}, steps=6, dt=0.6),
    "brew": ProcessPreset(temperature=0.55, tags={"wet": 1.0}, steps=10, dt=0.5),
    "refine": ProcessPreset(temperature=0.75, tags={"heat": 0.8, "oxidize": 0.5}, steps=7, dt=0.7),
}


def process_options(process: str) -> ProcessPreset:
    """Preset for ``process``; unknown processes get an empty preset."""
    return PROCESS_PRESETS.get(process, ProcessPreset())


def normalize_weights(count: int, weights: Optional[Sequence[float]] = None) -> np.ndarray:
    """Non-negative weights summing to one.

    Negative weights count as zero. A missing list, a list of the wrong
    length, or one whose weights are all zero gives equal weighting.
    """
    if count <= 0:
        return np.zeros(0)
    if weights is None or len(weights) != count:
        w = np.ones(count)
    else:
        w = np.clip(np.asarray(weights, dtype=float), 0.0, None)
    total = w.sum()
    if total <= 0:
        w = np.ones(count)
        total = float(count)
    return w / total


def combine_mixes(items: Sequence[ItemDefinition], weights: Optional[Sequence[float]] = None) -> Mixture:
    """Scale each item's mixture by its normalised weight and merge them all."""
    combined = Mixture()
    for item, w in zip(items, normalize_weights(len(items), weights)):
        combined = merge(combined, item.mixture.scale(float(w)))
    return combined


def craft_once(
    random: RandomSource,
    registry: ItemRegistry,
    rules: Sequence[ReactionRule],
    inputs: Sequence[ItemDefinition],
    process: str,
    label_hint: str = "",
    weights: Optional[Sequence[float]] = None,
    config: Optional[EngineConfig] = None,
) -> Optional[str]:
    """Craft one item from ``inputs`` and return its new id.

    Args:
        random: Caller's random source; exactly one ``next()`` draw is taken.
        registry: Registry the product is spawned into.
        rules: Reaction rules applied by the process.
        inputs: Input item definitions. An empty list declines the craft.
        process: Process name selecting a preset (forge, cook, brew, refine).
        label_hint: Label for the product; defaults to ``"<process> craft"``.
        weights: Optional per-input weights.
        config: Engine configuration for the reactor.

    Returns:
        The id of the new item, or None when there is nothing to craft with.
    """
    if not inputs:
        return None
    combined = combine_mixes(inputs, weights)
    preset = process_options(process)
    variation = random.next()
    tags = dict(preset.tags)
    tags[VARIATION_TAG] = variation

    product = Reactor(rules, config).run(
        combined,
        temperature=preset.temperature,
        catalysts=preset.catalysts,
        tags=tags,
        steps=preset.steps,
        dt=preset.dt,
    )
    label = label_hint or f"{process} craft"
    item_id = registry.spawn_from_mix(label, product)
    logger.info(
        "crafted %s via %s from %s (variation %.3f)",
        item_id, process, ", ".join(item.id for item in inputs), variation,
    )
    return item_id


def synthesize(
    random: RandomSource,
    registry: ItemRegistry,
    rules: Sequence[ReactionRule],
    base: Mapping[str, float],
    climate: Optional[TagMap] = None,
    label: str = "natural resource",
    temperature: Optional[float] = None,
    steps: Optional[int] = None,
    dt: Optional[float] = None,
    config: Optional[EngineConfig] = None,
) -> str:
    """Procedurally generate an item by weathering ``base`` under world rules.

    ``climate`` supplies open-ended world signals such as ``rainfall``;
    a ``variation`` draw is added to them as for a craft.
    """
    tags = dict(climate or {})
    tags[VARIATION_TAG] = random.next()
    product = Reactor(rules, config).run(
        as_mixture(base), temperature=temperature, tags=tags, steps=steps, dt=dt,
    )
    item_id = registry.spawn_from_mix(label, product)
    logger.debug("synthesized %s under %s", item_id, tags)
    return item_id


# ----------------------------------------------------------------------
# Scoring


def score_ingestion(report: IngestionReport) -> float:
    """Score an edible product by what it did to a simulated body.

    Rewards gains in energy, mood, focus, ATP and water; penalises pain
    and stress. Roughly centred on zero.
    """
    d = report.macro_delta()
    ess = report.essential_delta
    score = (
        d["energy"] + d["mood"] + 0.5 * d["focus"]
        - d["pain"] - d["stress"]
        + 0.5 * ess.get("ATP", 0.0) + 0.5 * ess.get("H2O", 0.0)
    )
    return float(score)


def score_material(analysis: MixAnalysis, intent: str) -> float:
    """Score a non-edible product from its static traits.

    One point for carrying the tag the intent asks for, plus trait terms:
    metalness for tools and materials, calories or hydration for
    provisions. Mineral impurities and stray reactivity always cost.
    """
    traits = analysis.traits
    score = 1.0 if analysis.has_tag(intent_target_tag(intent)) else 0.0
    if intent in ("tool", "material"):
        score += traits["metalness"]
    elif intent == "food":
        score += traits["calories"]
    elif intent == "drink":
        score += traits["hydration"]
    score -= 0.5 * traits["mineralness"] + 0.25 * traits["reactivity"]
    return float(score)

