"""
Tests for the domains.analyzer module.

This module tests tags, traits, naming and signature stability.
"""

import unittest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mixlab.core.config import EngineConfig
from mixlab.core.mixture import Mixture
from mixlab.domains.analyzer import (
    EMPTY_SIGNATURE, MixtureAnalyzer, analyze_mix, intent_ingredient_tags, intent_target_tag,
    mix_signature,
)


class TestSignature(unittest.TestCase):
    """Tests for mixture signatures."""

    def test_water(self):
        """Test the signature of pure water."""
        self.assertEqual(mix_signature(Mixture({"H2O": 1})), "H2O:1.000")

    def test_empty(self):
        """Test the sentinel for an empty mixture."""
        self.assertEqual(mix_signature(Mixture()), EMPTY_SIGNATURE)

    def test_insertion_order_irrelevant(self):
        """Test that entry order does not affect the signature."""
        a = Mixture({"A": 1.0, "B": 2.0, "C": 0.5})
        b = Mixture({"C": 0.5, "A": 1.0, "B": 2.0})
        self.assertEqual(mix_signature(a), mix_signature(b))

    def test_scale_irrelevant(self):
        """Test that scalar multiples share a signature."""
        a = Mixture({"ORE_FE": 1.0, "MINERAL_DUST": 0.1})
        self.assertEqual(mix_signature(a), mix_signature(a.scale(7.5)))

    def test_sorted_and_quantised(self):
        """Test the sorted name:value format with three decimals."""
        self.assertEqual(mix_signature(Mixture({"B": 1.0, "A": 2.0})), "A:0.667|B:0.333")

    def test_halves_round_up(self):
        """Test that a proportion exactly halfway between steps rounds up."""
        self.assertEqual(mix_signature(Mixture({"A": 1.0, "B": 15.0})), "A:0.063|B:0.938")

    def test_precision_from_config(self):
        """Test a coarser signature precision."""
        analyzer = MixtureAnalyzer(EngineConfig(signature_precision=1))
        self.assertEqual(analyzer.signature(Mixture({"B": 1.0, "A": 2.0})), "A:0.7|B:0.3")


class TestAnalysis(unittest.TestCase):
    """Tests for tags, traits and names."""

    def test_water(self):
        """Test that pure water is a drink named Water."""
        result = analyze_mix(Mixture({"H2O": 1}))
        self.assertIn("drink", result.tags)
        self.assertEqual(result.canonical_name, "Water")
        self.assertEqual(result.display_name, "Water")
        self.assertAlmostEqual(result.traits["hydration"], 1.0)

    def test_ore(self):
        """Test an iron ore sample."""
        result = analyze_mix(Mixture({"ORE_FE": 1, "MINERAL_DUST": 0.1}))
        self.assertIn("ore", result.tags)
        self.assertIn("inorganic", result.tags)
        self.assertNotIn("stone", result.tags)
        self.assertEqual(result.canonical_name, "Iron Ore")
        self.assertGreater(result.traits["metalness"], 0.9)

    def test_wood(self):
        """Test that resin and fibre make wood, which is organic."""
        result = analyze_mix(Mixture({"FIBER": 0.6, "RESIN": 0.3, "H2O": 0.2}))
        self.assertIn("wood", result.tags)
        self.assertNotIn("fiber", result.tags)
        self.assertIn("organic", result.tags)
        self.assertEqual(result.canonical_name, "Wood")

    def test_stone(self):
        """Test a stone sample."""
        result = analyze_mix(Mixture({"SILICA": 0.5, "MINERAL_DUST": 0.4}))
        self.assertIn("stone", result.tags)
        self.assertEqual(result.canonical_name, "Stone")

    def test_forged_tool(self):
        """Test that a forged marker on metal names a tool."""
        result = analyze_mix(Mixture({"IRON": 0.9, "FORGED": 0.1}))
        for tag in ("metal", "forged", "tool"):
            self.assertIn(tag, result.tags)
        self.assertEqual(result.canonical_name, "Iron Tool")

    def test_refined_ingot(self):
        """Test that a refined marker on metal names an ingot."""
        result = analyze_mix(Mixture({"CU": 0.9, "REFINED": 0.1}))
        self.assertIn("material", result.tags)
        self.assertEqual(result.canonical_name, "Copper Ingot")

    def test_brackish_drink(self):
        """Test qualifiers on salty water."""
        result = analyze_mix(Mixture({"H2O": 0.5, "SALT": 0.5}))
        self.assertEqual(result.canonical_name, "Drink")
        self.assertEqual(result.display_name, "Drink (brackish, reactive)")

    def test_nutritious_food(self):
        """Test a calorie dense food."""
        result = analyze_mix(Mixture({"GLU": 1.0, "FAT": 0.5}))
        self.assertIn("food", result.tags)
        self.assertEqual(result.display_name, "Food (nutritious)")

    def test_fallback_name(self):
        """Test an unclassified mixture."""
        result = analyze_mix(Mixture({"N2": 1.0}))
        self.assertEqual(result.tags, ())
        self.assertEqual(result.canonical_name, "Material")

    def test_analysis_unhashable(self):
        """Test that analyses compare by value and refuse hashing."""
        a = analyze_mix(Mixture({"H2O": 1}))
        self.assertEqual(a, analyze_mix(Mixture({"H2O": 2})))
        with self.assertRaises(TypeError):
            hash(a)

    def test_empty_mixture(self):
        """Test analysing an empty mixture."""
        result = analyze_mix(Mixture())
        self.assertEqual(result.signature, EMPTY_SIGNATURE)
        self.assertEqual(result.canonical_name, "Material")
        self.assertEqual(result.traits["hydration"], 0.0)



class TestIntents(unittest.TestCase):
    """Tests for the intent tag table."""

    def test_known_intent(self):
        """Test the target and ingredient tags of a tool."""
        self.assertEqual(intent_target_tag("tool"), "tool")
        self.assertEqual(intent_ingredient_tags("tool"), ("metal", "fuel"))

    def test_unknown_intent_names_tag(self):
        """Test that an unknown intent is used as the tag itself."""
        self.assertEqual(intent_target_tag("balancing"), "balancing")
        self.assertEqual(intent_ingredient_tags("balancing"), ("balancing",))


if __name__ == "__main__":
    unittest.main()
