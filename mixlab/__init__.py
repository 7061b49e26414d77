"""
Mixlab substance-mixture reaction and crafting engine.

Items, agent bodies and world resources are all described as sparse
mixtures of named substances. A small rule engine (stoichiometric
reactions gated by continuous conditions) transforms those mixtures, and
the same engine serves three call sites: world synthesis, crafting and
agent metabolism. Results are classified and named by the analyzer and
good crafts are remembered per agent.

The major subpackages are:

``mixlab.core``      Mixtures, reaction rules and conditions, the reactor,
                     configuration and the caller-side random source.
``mixlab.domains``   Substance vocabulary and stock rule sets, the
                     analyzer, item registry and stockpiles, metabolism,
                     crafting, recipe memory and the agent bundle.

Please see the individual modules for further documentation.
"""

__all__ = [
    "core",
    "domains",
]
