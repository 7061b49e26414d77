"""Game-facing layers built on the core engine."""

from .agent import Agent
from .analyzer import (
    INTENTS, IntentTags, MixAnalysis, MixtureAnalyzer, analyze_mix, intent_ingredient_tags,
    intent_target_tag, mix_signature,
)
from .crafting import (
    PROCESS_PRESETS, ProcessPreset, combine_mixes, craft_once, process_options,
    score_ingestion, score_material, synthesize,
)
from .items import (
    Inventory, ItemDefinition, ItemRegistry, Stockpile, create_seed_registry,
    get_poi_stockpile,
)
from .memory import (
    LearnedRecipe, RecipeMemory, RecipePick, pick_learned_recipe, remember_recipe,
)
from .metabolism import (
    AgentChemistry, IngestionReport, MacroSnapshot, Metabolism, derive_macro_snapshot,
    ingest, simulate_ingestion, tick_metabolism,
)
from .substances import DEFAULT_LIBRARY, ReactionLibrary
