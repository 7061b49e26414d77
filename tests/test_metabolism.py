"""
Tests for the domains.metabolism module.

This module tests macro snapshot derivation, the metabolism tick with
stomach to body absorption, and the ingestion simulation.
"""

import unittest
import sys
import os

import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mixlab.core.mixture import Mixture
from mixlab.domains.metabolism import (
    AgentChemistry, Metabolism, derive_macro_snapshot, ingest, simulate_ingestion,
    tick_metabolism,
)
from mixlab.domains.substances import REACTIONS_BODY


class TestMacroSnapshot(unittest.TestCase):
    """Tests for derive_macro_snapshot."""

    def test_default_body(self):
        """Test the snapshot of the default body."""
        macro = derive_macro_snapshot(AgentChemistry().body)
        self.assertAlmostEqual(macro.energy, 0.525)
        self.assertAlmostEqual(macro.hunger_signal, 0.5)
        self.assertAlmostEqual(macro.thirst_signal, 0.49)
        self.assertAlmostEqual(macro.pain, 0.0)
        self.assertAlmostEqual(macro.stress, 0.0)

    def test_inflammation_hurts(self):
        """Test that inflammation raises pain and lowers energy and mood."""
        calm = derive_macro_snapshot(Mixture({"GLU": 1.0}))
        sore = derive_macro_snapshot(Mixture({"GLU": 1.0, "INFLAM": 5.0}))
        self.assertGreater(sore.pain, calm.pain)
        self.assertLess(sore.energy, calm.energy)
        self.assertLess(sore.mood, calm.mood)

    def test_bounded_under_extremes(self):
        """Test that every field stays in [0, 1] for random extreme bodies."""
        rng = np.random.default_rng(42)
        keys = ["GLU", "H2O", "INFLAM", "SER", "DOPA", "STRESS", "CORT", "ADREN"]
        for _ in range(200):
            body = Mixture({k: float(10 ** rng.uniform(-3, 6)) for k in keys if rng.random() < 0.7})
            for value in derive_macro_snapshot(body).to_dict().values():
                self.assertGreaterEqual(value, 0.0)
                self.assertLessEqual(value, 1.0)


class TestMetabolismTick(unittest.TestCase):
    """Tests for the metabolism tick."""

    def setUp(self):
        self.chem = AgentChemistry()

    def test_absorption_fraction(self):
        """Test that a tenth of the stomach moves to the body per unit dt."""
        tick_metabolism(self.chem, [], 1.0, ingested={"SALT": 1.0})
        self.assertAlmostEqual(self.chem.body.get("SALT"), 0.1)
        self.assertAlmostEqual(self.chem.stomach.get("SALT"), 0.9)

    def test_absorption_capped(self):
        """Test that at most half the stomach is absorbed in one tick."""
        ingest(self.chem, {"SALT": 1.0})
        tick_metabolism(self.chem, [], 20.0)
        self.assertAlmostEqual(self.chem.body.get("SALT"), 0.5)
        self.assertAlmostEqual(self.chem.stomach.get("SALT"), 0.5)

    def test_ingest_amount(self):
        """Test that ingest scales by the number of servings."""
        ingest(self.chem, {"GLU": 0.5}, amount=2)
        self.assertAlmostEqual(self.chem.stomach.get("GLU"), 1.0)

    def test_last_macro_cached(self):
        """Test that the tick stores and returns the snapshot."""
        macro = tick_metabolism(self.chem, REACTIONS_BODY, 0.5)
        self.assertEqual(self.chem.last_macro, macro)

    def test_enzymes_catalyse(self):
        """Test that a body enzyme speeds glycolysis in the stomach."""
        plain = AgentChemistry()
        boosted = AgentChemistry(body=Mixture({"GLU": 0.5, "ENZ_X": 2.0}))
        for chem in (plain, boosted):
            tick_metabolism(chem, REACTIONS_BODY, 1.0, ingested={"GLU": 1.0, "O2": 1.0})
        atp = lambda c: c.body.get("ATP") + c.stomach.get("ATP")
        self.assertGreater(atp(boosted), atp(plain))
        self.assertAlmostEqual(boosted.body.get("ENZ_X"), 2.0)

    def test_negative_dt_rejected(self):
        """Test that a negative dt raises ValueError."""
        with self.assertRaises(ValueError):
            Metabolism(REACTIONS_BODY).tick(self.chem, -1.0)

    def test_many_ticks_stay_bounded(self):
        """Test boundedness over a long run with toxic intake."""
        for _ in range(100):
            macro = tick_metabolism(self.chem, REACTIONS_BODY, 1.0, ingested={"TOX_A": 5.0, "GLU": 3.0})
            for value in macro.to_dict().values():
                self.assertGreaterEqual(value, 0.0)
                self.assertLessEqual(value, 1.0)
        for value in self.chem.body.values():
            self.assertGreater(value, 0.0)


class TestSimulateIngestion(unittest.TestCase):
    """Tests for simulate_ingestion."""

    def test_water_is_hydrating(self):
        """Test that drinking water raises body water."""
        body = AgentChemistry().body
        report = simulate_ingestion(body, {"H2O": 1.0}, REACTIONS_BODY)
        self.assertGreater(report.essential_delta["H2O"], 0.05)
        self.assertIn("hydrating", report.notes)
        self.assertLess(report.after.thirst_signal, report.before.thirst_signal)

    def test_does_not_mutate_body(self):
        """Test that the caller's body is left alone."""
        body = AgentChemistry().body
        before = body.to_dict()
        simulate_ingestion(body, {"GLU": 1.0}, REACTIONS_BODY)
        self.assertEqual(body.to_dict(), before)

    def test_essential_keys_reported(self):
        """Test that every essential substance has a delta."""
        report = simulate_ingestion(Mixture(), {"N2": 1.0}, REACTIONS_BODY)
        self.assertEqual(set(report.essential_delta), {"ATP", "H2O", "O2", "GLU", "PH", "TEMP"})
        self.assertEqual(report.notes, [])


if __name__ == "__main__":
    unittest.main()
