"""
Mixture analyzer: classification, traits, naming and signatures.

Given any mixture the analyzer produces the fields an item carries in
the rest of the game: a set of tags, continuous traits, a canonical and
a display name, and a signature string. Everything is a deterministic
function of the mixture's normalised proportions, so two mixtures with
the same proportions (whatever their scale or insertion order) analyse
identically. Recipe memory relies on that for signature matching.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.config import DEFAULT_CONFIG, EngineConfig
from ..core.mixture import EPSILON, Mixture
from . import substances as S

#: Signature of a mixture with no substance above EPSILON.
EMPTY_SIGNATURE = "empty"

#: Separator between ``name:value`` parts of a signature.
SIGNATURE_SEPARATOR = "|"

METAL_KEYS = (S.IRON, S.FE, S.CU, S.SN, S.AU, S.STEEL, S.BRONZE, S.PIG_IRON)
ORE_PREFIX = "ORE_"
STONE_KEYS = (S.SILICA, S.MINERAL_DUST)
FOOD_KEYS = (S.GLU, S.FRUCT, S.UMAMI, S.FAT, S.PROTEIN)
FUEL_KEYS = (S.CARBON, S.COAL, S.ORE_COAL)
REACTIVE_KEYS = (S.OXIDIZER, S.PH_ACID, S.PH_BASE, S.CHELATOR)

CALORIE_KEYS = (S.GLU, S.FRUCT, S.FAT, S.PROTEIN)
MINERAL_KEYS = (S.SILICA, S.MINERAL_DUST, S.SALT, S.SLAG)
METALNESS_KEYS = METAL_KEYS + (S.ORE_FE, S.ORE_CU, S.ORE_SN, S.ORE_AU, S.ORE_COAL)

ORE_NAMES = {
    S.ORE_FE: "Iron Ore",
    S.ORE_CU: "Copper Ore",
    S.ORE_SN: "Tin Ore",
    S.ORE_AU: "Gold Ore",
}

METAL_NAMES = {
    S.FE: "Iron",
    S.IRON: "Iron",
    S.PIG_IRON: "Iron",
    S.STEEL: "Steel",
    S.CU: "Copper",
    S.SN: "Tin",
    S.AU: "Gold",
    S.BRONZE: "Bronze",
    S.ORE_FE: "Iron",
    S.ORE_CU: "Copper",
    S.ORE_SN: "Tin",
    S.ORE_AU: "Gold",
}
METAL_CANDIDATES = tuple(METAL_NAMES)


@dataclass(frozen=True)
class IntentTags:
    """Tags tied to a crafting intent.

    Attributes:
        target: Tag a finished product for this intent should carry.
        ingredients: Tags searched, one ingredient each, when no learned
            recipe applies.
    """
    target: str
    ingredients: Tuple[str, ...]


INTENTS: Dict[str, IntentTags] = {
    "tool": IntentTags("tool", ("metal", "fuel")),
    "material": IntentTags("material", ("ore", "fuel")),
    "food": IntentTags("food", ("food",)),
    "drink": IntentTags("drink", ("drink",)),
    "fuel": IntentTags("fuel", ("fuel",)),
}


def intent_target_tag(intent: str) -> str:
    """Tag a product for ``intent`` should carry; unknown intents name the tag directly."""
    found = INTENTS.get(intent)
    return found.target if found is not None else intent


def intent_ingredient_tags(intent: str) -> Tuple[str, ...]:
    found = INTENTS.get(intent)
    return found.ingredients if found is not None else (intent,)


@dataclass(frozen=True)
class MixAnalysis:
    """Result of analysing a mixture."""
    tags: Tuple[str, ...]
    traits: Dict[str, float]
    canonical_name: str
    display_name: str
    signature: str

    # Unhashable: traits is a dict.
    __hash__ = None

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


def normalize_mix(mixture: Mixture) -> Mixture:
    """Drop entries at or below EPSILON and scale the rest to sum to one."""
    filtered = Mixture({k: v for k, v in mixture.items() if v > EPSILON})
    return filtered.normalized()


def _proportion(normalized: Mixture, keys: Iterable[str]) -> float:
    return sum(normalized.get(k) for k in keys)


def _any_above(normalized: Mixture, keys: Iterable[str], threshold: float) -> bool:
    return any(normalized.get(k) > threshold for k in keys)


def _dominant(normalized: Mixture, keys: Iterable[str]) -> Optional[str]:
    best: Optional[str] = None
    best_value = 0.0
    for k in keys:
        value = normalized.get(k)
        if value > best_value:
            best, best_value = k, value
    return best


class MixtureAnalyzer:
    """Tags, traits, names and signatures for mixtures.

    Thresholds come from ``EngineConfig``: ``tag_threshold`` for tag
    membership and ``signature_precision`` for signature quantisation.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.cfg = config or DEFAULT_CONFIG

    # ------------------------------------------------------------------
    # Signature

    def signature(self, mixture: Mixture) -> str:
        """Canonical string for the proportions of ``mixture``.

        Entries are sorted by substance name and quantised to
        ``signature_precision`` decimal places (halves round up), so insertion order and
        overall scale never change the result.
        """
        normalized = normalize_mix(mixture)
        if not normalized:
            return EMPTY_SIGNATURE
        places = self.cfg.signature_precision
        q = 10 ** places
        parts = [
            f"{key}:{math.floor(value * q + 0.5) / q:.{places}f}"
            for key, value in normalized.sorted_items()
        ]
        return SIGNATURE_SEPARATOR.join(parts)

    # ------------------------------------------------------------------
    # Tags and traits

    def tags(self, normalized: Mixture) -> List[str]:
        threshold = self.cfg.tag_threshold
        ore_keys = [k for k in normalized.keys() if k.startswith(ORE_PREFIX)]

        ore = _any_above(normalized, ore_keys, threshold)
        metal = _any_above(normalized, METAL_KEYS, threshold)
        fiber_share = normalized.get(S.FIBER)
        resin_share = normalized.get(S.RESIN)
        wood = resin_share > 0.1 or (fiber_share > 0.25 and resin_share > 0.05)
        fiber = fiber_share > threshold
        stone = not ore and _any_above(normalized, STONE_KEYS, threshold)
        food = _any_above(normalized, FOOD_KEYS, threshold)
        drink = normalized.get(S.H2O) > 0.2
        fuel = _any_above(normalized, FUEL_KEYS, threshold)
        reactive = _any_above(normalized, REACTIVE_KEYS, threshold)
        balancing = normalized.get(S.PH_BUFFER) > threshold

        tags: List[str] = []
        if ore:
            tags.append("ore")
        if metal:
            tags.append("metal")
        if wood:
            tags.append("wood")
        elif fiber:
            tags.append("fiber")
        if stone:
            tags.append("stone")
        if food:
            tags.append("food")
        if drink:
            tags.append("drink")
        if fuel:
            tags.append("fuel")
        if reactive:
            tags.append("reactive")
        if balancing:
            tags.append("balancing")
        if food or wood:
            tags.append("organic")
        if ore or stone or metal:
            tags.append("inorganic")
        if normalized.get(S.FORGED) > threshold:
            tags.extend(["forged", "tool"])
        if normalized.get(S.REFINED) > threshold:
            tags.extend(["refined", "material"])
        return tags

    def traits(self, normalized: Mixture) -> Dict[str, float]:
        """Continuous traits as unclamped sums of normalised proportions."""
        oxidizing = normalized.get(S.OXIDIZER)
        acidity = normalized.get(S.PH_ACID)
        basicity = normalized.get(S.PH_BASE)
        chelating = normalized.get(S.CHELATOR)
        osmotic = normalized.get(S.SALT)
        return {
            "hydration": normalized.get(S.H2O),
            "calories": _proportion(normalized, CALORIE_KEYS),
            "bitterness": normalized.get(S.BITTER),
            "umami": normalized.get(S.UMAMI),
            "mineralness": _proportion(normalized, MINERAL_KEYS),
            "metalness": _proportion(normalized, METALNESS_KEYS),
            "oxidizing_power": oxidizing,
            "acidity_potential": acidity,
            "basicity_potential": basicity,
            "chelating_power": chelating,
            "buffering_power": normalized.get(S.PH_BUFFER),
            "osmotic_load": osmotic,
            "reactivity": oxidizing + acidity + basicity + chelating + osmotic,
        }

    # ------------------------------------------------------------------
    # Naming

    def canonical_name(self, normalized: Mixture, tags: List[str], traits: Dict[str, float]) -> str:
        threshold = self.cfg.tag_threshold
        metallic = "metal" in tags or "ore" in tags
        dominant_metal = _dominant(normalized, METAL_CANDIDATES)
        metal_name = METAL_NAMES.get(dominant_metal, "Metal") if dominant_metal else "Metal"

        if normalized.get(S.FORGED) > threshold and metallic:
            return f"{metal_name} Tool"
        if normalized.get(S.REFINED) > threshold and metallic:
            return f"{metal_name} Ingot" if dominant_metal else "Refined Metal"
        if "ore" in tags:
            ore_keys = sorted(k for k in normalized.keys() if k.startswith(ORE_PREFIX))
            dominant_ore = _dominant(normalized, ore_keys)
            return ORE_NAMES.get(dominant_ore, "Ore")
        if "wood" in tags:
            return "Wood"
        if "stone" in tags:
            return "Stone"
        if "drink" in tags:
            return "Water" if traits["hydration"] > 0.7 else "Drink"
        if "food" in tags:
            return "Food"
        if "fuel" in tags:
            return "Fuel"
        return "Material"

    @staticmethod
    def qualifiers(tags: List[str], traits: Dict[str, float]) -> List[str]:
        out: List[str] = []
        if traits["mineralness"] > 0.35 and "drink" in tags:
            out.append("brackish")
        if traits["mineralness"] > 0.35 and ("ore" in tags or "metal" in tags):
            out.append("impure")
        if traits["calories"] > 0.45 and "food" in tags:
            out.append("nutritious")
        if traits["reactivity"] > 0.35:
            out.append("reactive")
        return out

    # ------------------------------------------------------------------

    def analyze(self, mixture: Mixture) -> MixAnalysis:
        normalized = normalize_mix(mixture)
        tags = self.tags(normalized)
        traits = self.traits(normalized)
        canonical = self.canonical_name(normalized, tags, traits)
        qualifiers = self.qualifiers(tags, traits)
        display = f"{canonical} ({', '.join(qualifiers)})" if qualifiers else canonical
        return MixAnalysis(
            tags=tuple(tags),
            traits=traits,
            canonical_name=canonical,
            display_name=display,
            signature=self.signature(mixture),
        )


_DEFAULT_ANALYZER = MixtureAnalyzer()


def analyze_mix(mixture: Mixture) -> MixAnalysis:
    return _DEFAULT_ANALYZER.analyze(mixture)


def mix_signature(mixture: Mixture) -> str:
    return _DEFAULT_ANALYZER.signature(mixture)
