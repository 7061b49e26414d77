"""
Engine configuration definitions.

This module defines the configuration dataclass used to parameterise the
mixture engine. Configurations are defined with explicit defaults so
that test runs and game hosts can create an engine without supplying
values for every field. See ``EngineConfig`` for the top-level
configuration consumed by the reactor, metabolism and analyzer.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class EngineConfig:
    """Top level configuration for mixlab engine runs.

    Every component accepts an optional ``EngineConfig``; when omitted
    the module level ``DEFAULT_CONFIG`` is used. Hosts that want
    different absorption or reactor defaults construct their own
    instance and pass it down explicitly.
    """

    # Random seeds and entropy (caller-side only, never used by the reactor)
    base_seed: int = 42
    entropy_mode: bool = False  # if True, inject run salt for variation
    replay_mode: bool = False   # if True, record draws for exact replay

    # Reactor defaults
    default_steps: int = 10
    default_dt: float = 1.0

    # Metabolism: absorbed fraction per tick is clamp(rate * dt, 0, cap)
    absorption_rate: float = 0.1
    absorption_cap: float = 0.5

    # Ingestion simulation used for scoring edible crafts
    ingestion_sim_steps: int = 5
    ingestion_sim_dt: float = 0.5

    # Analyzer
    tag_threshold: float = 0.05
    signature_precision: int = 3

    # Absolute tolerance for floating point conservation checks
    conservation_tolerance: float = 0.01

    # Free-form extension slot for host specific tuning
    extras: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Return a dict representation of the configuration.

        Useful for logging the parameters of a run or interfacing with
        dynamic configuration loaders.
        """
        return self.__dict__.copy()


DEFAULT_CONFIG = EngineConfig()
