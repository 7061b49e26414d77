"""
Item registry and quantity stores.

Items are defined by their mixture, not by a static template: the
registry maps an item id to an ``ItemDefinition`` whose tags, traits,
names and signature are derived by the analyzer when the item is
registered. The registry is append-only by id and owns the counter used
to mint ids for crafted and synthesised items.

``Stockpile`` is the quantity map (item id -> count) used both for the
shared stockpile at a location and for an agent's inventory. Shortages
are a normal outcome: ``remove`` reports failure by returning ``False``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from ..core.entropy import RandomSource
from ..core.mixture import Mixture, as_mixture, merge
from .analyzer import MixtureAnalyzer

logger = logging.getLogger(__name__)

ItemId = str


@dataclass(frozen=True)
class ItemDefinition:
    """An item id, its label and mixture, plus analyzer-derived fields."""
    id: ItemId
    name: str
    mixture: Mixture
    tags: Tuple[str, ...] = ()
    traits: Dict[str, float] = field(default_factory=dict)
    canonical_name: str = ""
    display_name: str = ""
    signature: str = ""

    # Unhashable: mixture and traits are mutable containers.
    __hash__ = None

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


def _slug(label: str) -> str:
    return re.sub(r"\s+", "-", label.strip().lower()) or "item"


class ItemRegistry:
    """Registry mapping item ids to analysed item definitions.

    Attributes:
        analyzer: Analyzer applied to every registered mixture.
        counter: Number of items minted by ``spawn_from_mix`` so far.
    """

    def __init__(self, seed_items: Optional[Iterable[Tuple[ItemId, str, Mapping[str, float]]]] = None,
                 analyzer: Optional[MixtureAnalyzer] = None):
        self.analyzer = analyzer or MixtureAnalyzer()
        self._items: Dict[ItemId, ItemDefinition] = {}
        self.counter = 0
        for item_id, name, mix in seed_items or ():
            self.register(item_id, name, mix)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def register(self, item_id: ItemId, name: str, mixture: Mapping[str, float]) -> ItemId:
        """Analyse ``mixture`` and store it under ``item_id``."""
        mix = as_mixture(mixture).copy()
        analysis = self.analyzer.analyze(mix)
        self._items[item_id] = ItemDefinition(
            id=item_id,
            name=name,
            mixture=mix,
            tags=analysis.tags,
            traits=dict(analysis.traits),
            canonical_name=analysis.canonical_name,
            display_name=analysis.display_name,
            signature=analysis.signature,
        )
        return item_id

    def spawn_from_mix(self, label: str, mixture: Mapping[str, float]) -> ItemId:
        """Register a new item under a fresh ``<label-slug>-<n>`` id."""
        self.counter += 1
        item_id = f"{_slug(label)}-{self.counter}"
        self.register(item_id, label, mixture)
        logger.debug("spawned item %s (%s)", item_id, self._items[item_id].display_name)
        return item_id

    def get(self, item_id: ItemId) -> Optional[ItemDefinition]:
        """Return a copy of the item definition, or None when unknown."""
        item = self._items.get(item_id)
        if item is None:
            return None
        return replace(item, mixture=item.mixture.copy(), traits=dict(item.traits))

    def get_mix(self, item_id: ItemId) -> Optional[Mixture]:
        item = self._items.get(item_id)
        return item.mixture.copy() if item is not None else None

    def merge_item_mix(self, item_id: ItemId, delta: Mapping[str, float]) -> bool:
        """Apply ``delta`` to an item's mixture in place.

        Analyzer fields are left as they were; callers that need fresh
        tags must re-register or re-analyse the item.
        """
        item = self._items.get(item_id)
        if item is None:
            return False
        self._items[item_id] = replace(item, mixture=merge(item.mixture, delta))
        return True

    def list(self) -> List[ItemDefinition]:
        return [self.get(item_id) for item_id in self._items]

    def ids(self) -> List[ItemId]:
        return list(self._items)


class Stockpile:
    """Quantity map keyed by item id, used for stockpiles and inventories."""

    def __init__(self, quantities: Optional[Mapping[ItemId, float]] = None):
        self._q: Dict[ItemId, float] = {}
        for item_id, qty in (quantities or {}).items():
            self.add(item_id, qty)

    def get(self, item_id: ItemId) -> float:
        return self._q.get(item_id, 0.0)

    def has(self, item_id: ItemId, qty: float = 1) -> bool:
        return self._q.get(item_id, 0.0) >= qty

    def add(self, item_id: ItemId, qty: float = 1) -> None:
        if qty <= 0:
            return
        self._q[item_id] = self._q.get(item_id, 0.0) + qty

    def remove(self, item_id: ItemId, qty: float = 1) -> bool:
        """Remove ``qty`` units; return False (and change nothing) on shortage."""
        if qty <= 0:
            return True
        if not self.has(item_id, qty):
            return False
        nxt = self._q[item_id] - qty
        if nxt <= 0:
            del self._q[item_id]
        else:
            self._q[item_id] = nxt
        return True

    def items(self):
        return self._q.items()

    def __iter__(self) -> Iterator[ItemId]:
        return iter(self._q)

    def __len__(self) -> int:
        return len(self._q)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._q

    def to_dict(self) -> Dict[ItemId, float]:
        return dict(self._q)

    def pick_by_tag(self, registry: ItemRegistry, tag: str, random: RandomSource,
                    exclude: Optional[Mapping[ItemId, float]] = None) -> Optional[ItemDefinition]:
        """Choose a stocked item carrying ``tag``, or None if there is none.

        ``exclude`` maps item ids to units already reserved by the caller;
        an item is only a candidate while at least one unit remains.
        """
        exclude = exclude or {}
        candidates = [
            item for item in registry.list()
            if item.has_tag(tag) and self.get(item.id) - exclude.get(item.id, 0) >= 1
        ]
        if not candidates:
            return None
        return random.choice(candidates)


Inventory = Stockpile


def get_poi_stockpile(stockpiles: Dict[str, Stockpile], poi_id: str) -> Stockpile:
    """Return the stockpile for ``poi_id``, creating an empty one if needed."""
    if poi_id not in stockpiles:
        stockpiles[poi_id] = Stockpile()
    return stockpiles[poi_id]


SEED_ITEMS: Tuple[Tuple[ItemId, str, Dict[str, float]], ...] = (
    ("berry-red", "Red Berry", {"GLU": 0.6, "FRUCT": 0.4, "SWEET": 0.2, "H2O": 0.5}),
    ("ore-iron", "Iron Ore", {"ORE_FE": 1, "MINERAL_DUST": 0.1}),
    ("ore-copper", "Copper Ore", {"ORE_CU": 1, "MINERAL_DUST": 0.1}),
    ("ore-tin", "Tin Ore", {"ORE_SN": 1, "MINERAL_DUST": 0.1}),
    ("water-flask", "Canteen", {"H2O": 1}),
    ("raw-wood", "Wood", {"FIBER": 0.6, "RESIN": 0.3, "H2O": 0.2}),
    ("raw-stone", "Stone", {"SILICA": 0.5, "MINERAL_DUST": 0.4}),
    ("raw-coal", "Coal", {"CARBON": 0.5, "ORE_COAL": 0.5, "COAL": 0.3}),
    ("raw-salt", "Salt", {"SALT": 0.8}),
    ("raw-water", "Water", {"H2O": 1}),
    ("raw-meat", "Meat", {"PROTEIN": 0.6, "FAT": 0.2, "H2O": 0.3}),
)


def create_seed_registry(analyzer: Optional[MixtureAnalyzer] = None) -> ItemRegistry:
    """Registry pre-populated with the stock raw materials."""
    return ItemRegistry(SEED_ITEMS, analyzer=analyzer)
