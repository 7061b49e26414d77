"""Core engine: mixtures, reaction rules, the reactor and the caller-side random source."""

from .config import DEFAULT_CONFIG, EngineConfig
from .entropy import EntropySource, RandomSource
from .mixture import EPSILON, Mixture, as_mixture, merge
from .reactions import (
    ALWAYS, AllOf, Always, CatalystBoost, Condition, ReactionContext,
    ReactionRule, TagThreshold, TemperatureWindow, all_of, catalyst_boost,
    evaluate_condition, tag_threshold, temperature_window,
)
from .reactor import Reactor, run_reactor
from .types import clamp
