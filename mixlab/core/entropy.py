"""
Caller-side source of pseudorandomness with replay support.

The reactor itself never draws random numbers: any variation in a craft
or a world synthesis is injected as an explicit context tag by the
caller. This module provides the random source that callers hand to
the crafting pipeline and recipe recall. It satisfies the small
``RandomSource`` protocol (``next()`` in [0, 1) and ``choice(seq)``) so a
host may substitute its own generator.

Draws are derived from a blake2s hash of the base seed, an optional run
salt, a checkpoint label and a draw counter, which makes them stable
across Python interpreter sessions regardless of ``PYTHONHASHSEED``.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Protocol, Sequence, TypeVar

import numpy as np

from .config import EngineConfig

T = TypeVar("T")


class RandomSource(Protocol):
    """Minimal interface the engine expects from a random source."""

    def next(self) -> float: ...

    def choice(self, seq: Sequence[T]) -> T: ...


@dataclass
class EntropyRecord:
    """Record of a single entropy sample for replay support.

    Attributes:
        checkpoint_id: Identifier for the sampling checkpoint (e.g. "next" or "choice").
        draw: Index of the draw within this source.
        value: The sampled value in [0, 1).
    """
    checkpoint_id: str
    draw: int
    value: float


class EntropySource:
    """Centralised source of pseudorandomness with replay support.

    Attributes:
        base_seed: The base seed for deterministic generation.
        entropy_mode: If True, adds run-specific salt for variation.
        replay_mode: If True, records samples for later replay.
        run_salt: Random salt added when entropy_mode is True.
        replay_log: List of recorded samples when replay_mode is True.
        replay_cursor: Current position in replay_log during replay.
        draws: Number of samples drawn so far.
    """

    def __init__(self, base_seed: int = 42, entropy_mode: bool = False, replay_mode: bool = False):
        self.base_seed = base_seed
        self.entropy_mode = entropy_mode
        self.replay_mode = replay_mode
        self.run_salt: int = int(np.random.randint(0, 2**31 - 1)) if entropy_mode else 0
        self.replay_log: list[EntropyRecord] = []
        self.replay_cursor: int = 0
        self.draws: int = 0

    @classmethod
    def from_config(cls, config: EngineConfig) -> "EntropySource":
        return cls(config.base_seed, config.entropy_mode, config.replay_mode)

    def _derive_seed(self, checkpoint_id: str, draw: int) -> int:
        """Derive a deterministic 64-bit seed using blake2s."""
        h = hashlib.blake2s(digest_size=8)
        h.update(int(self.base_seed).to_bytes(8, byteorder='big', signed=True))
        h.update(int(self.run_salt).to_bytes(8, byteorder='big', signed=False))
        h.update(int(draw).to_bytes(8, byteorder='big', signed=False))
        h.update(checkpoint_id.encode('utf-8'))
        return int.from_bytes(h.digest(), byteorder='big', signed=False)

    def sample_uniform(self, checkpoint_id: str) -> float:
        """Return a uniform random sample in [0, 1).

        The sample is deterministic given the base seed, run salt,
        checkpoint id and draw index. When ``replay_mode`` is enabled and
        recorded samples remain, they are returned instead of generating
        new ones.
        """
        if self.replay_mode and self.replay_cursor < len(self.replay_log):
            rec = self.replay_log[self.replay_cursor]
            self.replay_cursor += 1
            self.draws += 1
            return rec.value

        seed = self._derive_seed(checkpoint_id, self.draws)
        rng = np.random.default_rng(seed)
        u = float(rng.random())

        if self.replay_mode:
            self.replay_log.append(EntropyRecord(checkpoint_id, self.draws, u))
            self.replay_cursor = len(self.replay_log)
        self.draws += 1
        return u

    def rewind(self) -> None:
        """Restart replay from the first recorded sample."""
        self.replay_cursor = 0
        self.draws = 0

    # ------------------------------------------------------------------
    # RandomSource protocol

    def next(self) -> float:
        return self.sample_uniform("next")

    def next_int(self, lo: int, hi: int) -> int:
        """Return an integer in the closed range ``[lo, hi]``."""
        if hi < lo:
            raise ValueError(f"empty integer range [{lo}, {hi}]")
        return lo + int(self.sample_uniform("next_int") * (hi - lo + 1))

    def choice(self, seq: Sequence[T]) -> T:
        """Pick one element of ``seq`` uniformly.

        Choosing from an empty sequence is a programmer error and raises
        ``ValueError``; callers must check for candidates first.
        """
        if len(seq) == 0:
            raise ValueError("cannot choose from an empty sequence")
        idx = int(self.sample_uniform("choice") * len(seq))
        return seq[min(idx, len(seq) - 1)]
