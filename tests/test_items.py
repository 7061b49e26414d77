"""
Tests for the domains.items module.

This module tests the item registry and the stockpile quantity map.
"""

import unittest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mixlab.core.entropy import EntropySource
from mixlab.domains.items import ItemRegistry, Stockpile, create_seed_registry, get_poi_stockpile


class TestItemRegistry(unittest.TestCase):
    """Tests for ItemRegistry."""

    def setUp(self):
        self.registry = create_seed_registry()

    def test_seed_items_analysed(self):
        """Test that seed items carry analyzer fields."""
        water = self.registry.get("water-flask")
        self.assertEqual(water.signature, "H2O:1.000")
        self.assertTrue(water.has_tag("drink"))
        self.assertEqual(self.registry.get("ore-iron").canonical_name, "Iron Ore")
        self.assertIn("raw-wood", self.registry)

    def test_get_unknown(self):
        """Test that unknown ids return None."""
        self.assertIsNone(self.registry.get("nope"))
        self.assertIsNone(self.registry.get_mix("nope"))

    def test_get_returns_copy(self):
        """Test that callers cannot mutate registered mixtures."""
        item = self.registry.get("water-flask")
        item.mixture.add("SALT", 1.0)
        self.assertNotIn("SALT", self.registry.get_mix("water-flask"))

    def test_spawn_ids(self):
        """Test the slug and counter id scheme."""
        first = self.registry.spawn_from_mix("Iron Bar", {"IRON": 1.0})
        second = self.registry.spawn_from_mix("Iron Bar", {"IRON": 1.0})
        self.assertEqual(first, "iron-bar-1")
        self.assertEqual(second, "iron-bar-2")
        self.assertEqual(self.registry.counter, 2)
        self.assertEqual(self.registry.get(first).name, "Iron Bar")

    def test_merge_item_mix(self):
        """Test in-place mixture updates without re-analysis."""
        self.assertFalse(self.registry.merge_item_mix("nope", {"H2O": 1.0}))
        self.assertTrue(self.registry.merge_item_mix("water-flask", {"SALT": 1.0}))
        item = self.registry.get("water-flask")
        self.assertAlmostEqual(item.mixture.get("SALT"), 1.0)
        self.assertEqual(item.signature, "H2O:1.000")

    def test_definitions_unhashable(self):
        """Test that item definitions compare by value and refuse hashing."""
        item = self.registry.get("water-flask")
        self.assertEqual(item, self.registry.get("water-flask"))
        with self.assertRaises(TypeError):
            hash(item)

    def test_list(self):
        """Test listing in registration order."""
        registry = ItemRegistry([("a", "A", {"H2O": 1}), ("b", "B", {"SALT": 1})])
        self.assertEqual([item.id for item in registry.list()], ["a", "b"])
        self.assertEqual(len(registry), 2)


class TestStockpile(unittest.TestCase):
    """Tests for Stockpile."""

    def setUp(self):
        self.stock = Stockpile({"ore-iron": 2, "raw-coal": 1})

    def test_remove_shortage(self):
        """Test that a shortage returns False and changes nothing."""
        self.assertFalse(self.stock.remove("ore-iron", 3))
        self.assertEqual(self.stock.get("ore-iron"), 2)
        self.assertFalse(self.stock.remove("missing"))

    def test_remove_to_zero_drops_entry(self):
        """Test that emptied entries disappear."""
        self.assertTrue(self.stock.remove("raw-coal"))
        self.assertNotIn("raw-coal", self.stock)

    def test_add_and_has(self):
        """Test adding quantities and ignoring non-positive additions."""
        self.stock.add("ore-iron", 3)
        self.stock.add("ore-tin", 0)
        self.assertTrue(self.stock.has("ore-iron", 5))
        self.assertNotIn("ore-tin", self.stock)

    def test_pick_by_tag(self):
        """Test tag based selection, exclusions and the empty case."""
        registry = create_seed_registry()
        src = EntropySource(base_seed=1)
        self.assertIn(self.stock.pick_by_tag(registry, "ore", src).id, ("ore-iron", "raw-coal"))
        self.assertEqual(self.stock.pick_by_tag(registry, "ore", src, exclude={"raw-coal": 1}).id, "ore-iron")
        self.assertIsNone(self.stock.pick_by_tag(registry, "drink", src))
        self.assertIsNone(self.stock.pick_by_tag(registry, "fuel", src, exclude={"raw-coal": 1}))

    def test_poi_stockpile(self):
        """Test lazy creation of per-location stockpiles."""
        stockpiles = {}
        pile = get_poi_stockpile(stockpiles, "camp")
        pile.add("raw-wood", 1)
        self.assertIs(get_poi_stockpile(stockpiles, "camp"), pile)


if __name__ == "__main__":
    unittest.main()
