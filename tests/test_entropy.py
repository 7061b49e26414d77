"""
Tests for the core.entropy module.

This module tests the caller-side random source used for craft
variation and ingredient choice.
"""

import unittest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mixlab.core.config import EngineConfig
from mixlab.core.entropy import EntropySource


class TestEntropySource(unittest.TestCase):
    """Tests for EntropySource."""

    def test_next_in_unit_interval(self):
        """Test that draws lie in [0, 1)."""
        src = EntropySource(base_seed=3)
        for _ in range(200):
            u = src.next()
            self.assertGreaterEqual(u, 0.0)
            self.assertLess(u, 1.0)

    def test_same_seed_same_sequence(self):
        """Test determinism across instances with the same seed."""
        a = EntropySource(base_seed=11)
        b = EntropySource(base_seed=11)
        self.assertEqual([a.next() for _ in range(10)], [b.next() for _ in range(10)])

    def test_different_seed_differs(self):
        """Test that seeds change the sequence."""
        a = EntropySource(base_seed=1)
        b = EntropySource(base_seed=2)
        self.assertNotEqual([a.next() for _ in range(5)], [b.next() for _ in range(5)])

    def test_choice_empty_raises(self):
        """Test that choosing from an empty sequence is an error."""
        with self.assertRaises(ValueError):
            EntropySource().choice([])

    def test_choice_returns_member(self):
        """Test that choice returns an element of the sequence."""
        src = EntropySource(base_seed=5)
        seq = ["a", "b", "c"]
        for _ in range(50):
            self.assertIn(src.choice(seq), seq)

    def test_next_int_range(self):
        """Test the closed integer range and the empty range error."""
        src = EntropySource(base_seed=9)
        for _ in range(100):
            self.assertIn(src.next_int(2, 4), (2, 3, 4))
        with self.assertRaises(ValueError):
            src.next_int(5, 4)

    def test_replay(self):
        """Test that a rewound source in replay mode repeats recorded draws."""
        src = EntropySource(base_seed=7, replay_mode=True)
        recorded = [src.next() for _ in range(4)]
        self.assertEqual(len(src.replay_log), 4)
        src.rewind()
        self.assertEqual([src.next() for _ in range(4)], recorded)

    def test_replay_log_records(self):
        """Test that recorded draws carry their checkpoint and index."""
        src = EntropySource(base_seed=7, replay_mode=True)
        value = src.next()
        src.choice(["a", "b"])
        self.assertEqual([(r.checkpoint_id, r.draw) for r in src.replay_log], [("next", 0), ("choice", 1)])
        self.assertEqual(src.replay_log[0].value, value)

    def test_from_config(self):
        """Test construction from an EngineConfig."""
        src = EntropySource.from_config(EngineConfig(base_seed=99))
        self.assertEqual(src.base_seed, 99)
        self.assertEqual(src.run_salt, 0)


if __name__ == "__main__":
    unittest.main()
