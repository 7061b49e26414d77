"""
Recipe memory - per-agent store of crafts that worked.

A learned recipe is keyed by ``(intent, process, input signatures)``.
Signatures come from the analyzer, so any item whose mixture has the
same proportions satisfies a slot, whatever its id. Remembering a key
that already exists keeps whichever entry scored higher, together with
that entry's weights.

Recall is read-only: it scans candidates for an ``(intent, process)``
pair best score first and returns the first one whose slots can all be
filled from the agent's inventory and a shared stockpile. Nothing is
reserved or removed; the caller decides what to take once it commits to
the craft.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Sequence, Tuple

from ..core.entropy import RandomSource
from .analyzer import intent_ingredient_tags
from .items import ItemDefinition, ItemId, ItemRegistry, Stockpile

if TYPE_CHECKING:
    from .agent import Agent

logger = logging.getLogger(__name__)

RecipeKey = Tuple[str, str, Tuple[str, ...]]


@dataclass
class LearnedRecipe:
    intent: str
    process: str
    signatures: Tuple[str, ...]
    score: float
    weights: Optional[Tuple[float, ...]] = None

    @property
    def key(self) -> RecipeKey:
        return (self.intent, self.process, self.signatures)

    def to_dict(self) -> Dict:
        return {
            "intent": self.intent,
            "process": self.process,
            "signatures": list(self.signatures),
            "score": self.score,
            "weights": list(self.weights) if self.weights is not None else None,
        }


@dataclass
class RecipePick:
    """Ingredients chosen for a craft and where each one comes from."""
    inputs: List[ItemDefinition]
    sources: List[str]
    weights: Optional[Tuple[float, ...]] = None
    recipe: Optional[LearnedRecipe] = None

    @property
    def learned(self) -> bool:
        return self.recipe is not None


def _find_slot(signature: str, store: Stockpile, registry: ItemRegistry,
               reserved: Dict[ItemId, float]) -> Optional[ItemDefinition]:
    for item_id in store:
        if store.get(item_id) - reserved.get(item_id, 0) < 1:
            continue
        item = registry.get(item_id)
        if item is not None and item.signature == signature:
            return item
    return None


class RecipeMemory:
    """Owned list of learned recipes with linear-scan lookup."""

    def __init__(self, recipes: Optional[Sequence[LearnedRecipe]] = None):
        self._recipes: List[LearnedRecipe] = list(recipes or ())

    def __len__(self) -> int:
        return len(self._recipes)

    def __iter__(self) -> Iterator[LearnedRecipe]:
        return iter(self._recipes)

    # ------------------------------------------------------------------
    # Updates

    def remember(self, intent: str, process: str, signatures: Sequence[str], score: float,
                 weights: Optional[Sequence[float]] = None) -> LearnedRecipe:
        """Upsert a recipe and return the entry now stored under its key."""
        key = (intent, process, tuple(signatures))
        w = tuple(float(x) for x in weights) if weights is not None else None
        for existing in self._recipes:
            if existing.key == key:
                if score > existing.score:
                    existing.score = float(score)
                    existing.weights = w
                    logger.info("improved recipe %s/%s to score %.3f", intent, process, score)
                return existing
        recipe = LearnedRecipe(intent, process, key[2], float(score), w)
        self._recipes.append(recipe)
        logger.info("learned recipe %s/%s with %d inputs (score %.3f)",
                    intent, process, len(recipe.signatures), score)
        return recipe

    def forget(self, intent: str, process: str, signatures: Optional[Sequence[str]] = None) -> int:
        """Drop recipes for ``(intent, process)``, or just one signature set. Returns the count removed."""
        sigs = tuple(signatures) if signatures is not None else None
        keep = [
            r for r in self._recipes
            if not (r.intent == intent and r.process == process and (sigs is None or r.signatures == sigs))
        ]
        removed = len(self._recipes) - len(keep)
        self._recipes = keep
        return removed

    # ------------------------------------------------------------------
    # Queries

    def candidates(self, intent: str, process: str) -> List[LearnedRecipe]:
        """Recipes for ``(intent, process)``, best score first."""
        matching = [r for r in self._recipes if r.intent == intent and r.process == process]
        return sorted(matching, key=lambda r: r.score, reverse=True)

    def best(self, intent: str, process: str) -> Optional[LearnedRecipe]:
        found = self.candidates(intent, process)
        return found[0] if found else None

    def recall(self, intent: str, process: str, inventory: Stockpile, stockpile: Stockpile,
               registry: ItemRegistry) -> Optional[RecipePick]:
        """First recipe whose every slot can be filled, best score first.

        Slots are filled in order, from ``inventory`` before ``stockpile``.
        A unit counted for one slot is not offered to a later slot.
        """
        for recipe in self.candidates(intent, process):
            reserved: Dict[str, Dict[ItemId, float]] = {"inventory": {}, "stockpile": {}}
            inputs: List[ItemDefinition] = []
            sources: List[str] = []
            for signature in recipe.signatures:
                for source, store in (("inventory", inventory), ("stockpile", stockpile)):
                    item = _find_slot(signature, store, registry, reserved[source])
                    if item is not None:
                        reserved[source][item.id] = reserved[source].get(item.id, 0) + 1
                        inputs.append(item)
                        sources.append(source)
                        break
                else:
                    break
            if len(inputs) == len(recipe.signatures):
                return RecipePick(inputs, sources, recipe.weights, recipe)
        return None

    def to_dict(self) -> List[Dict]:
        return [r.to_dict() for r in self._recipes]


# ----------------------------------------------------------------------
# Agent-level helpers


def remember_recipe(agent: "Agent", intent: str, process: str, inputs: Sequence[ItemDefinition],
                    score: float, weights: Optional[Sequence[float]] = None) -> LearnedRecipe:
    """Record that crafting ``inputs`` for ``intent`` via ``process`` scored ``score``."""
    signatures = [item.signature for item in inputs]
    return agent.recipes.remember(intent, process, signatures, score, weights)


def heuristic_pick(intent: str, inventory: Stockpile, stockpile: Stockpile, registry: ItemRegistry,
                   random: RandomSource) -> Optional[RecipePick]:
    """One ingredient per tag the intent asks for, inventory first.

    Returns None unless every tag finds an ingredient.
    """
    tags = intent_ingredient_tags(intent)
    reserved: Dict[str, Dict[ItemId, float]] = {"inventory": {}, "stockpile": {}}
    inputs: List[ItemDefinition] = []
    sources: List[str] = []
    for tag in tags:
        for source, store in (("inventory", inventory), ("stockpile", stockpile)):
            item = store.pick_by_tag(registry, tag, random, exclude=reserved[source])
            if item is not None:
                reserved[source][item.id] = reserved[source].get(item.id, 0) + 1
                inputs.append(item)
                sources.append(source)
                break
        else:
            return None
    return RecipePick(inputs, sources)


def pick_learned_recipe(agent: "Agent", intent: str, process: str, stockpile: Stockpile,
                        registry: ItemRegistry, random: RandomSource) -> Optional[RecipePick]:
    """Ingredients for a craft: a learned recipe if one is satisfiable, else a tag search."""
    pick = agent.recipes.recall(intent, process, agent.inventory, stockpile, registry)
    if pick is not None:
        logger.debug("%s recalled %s/%s (score %.3f)", agent.id, intent, process, pick.recipe.score)
        return pick
    return heuristic_pick(intent, agent.inventory, stockpile, registry, random)
