"""Per-agent mutable state touched by the engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from .items import Stockpile
from .memory import RecipeMemory
from .metabolism import AgentChemistry


@dataclass
class Agent:
    """An agent's inventory, chemistry pools and learned recipes.

    Writes to one agent must be serialised by the host; separate agents
    share nothing here and may be processed concurrently.
    """
    id: str
    name: str = ""
    inventory: Stockpile = field(default_factory=Stockpile)
    chemistry: AgentChemistry = field(default_factory=AgentChemistry)
    recipes: RecipeMemory = field(default_factory=RecipeMemory)
