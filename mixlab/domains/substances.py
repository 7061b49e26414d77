"""
Substance vocabulary and the stock reaction libraries.

Substances are plain string keys. The names below are the ones the
analyzer, metabolism and stock rule sets give meaning to; hosts are free
to introduce more, they simply carry no built-in semantics.

Four rule sets are provided:

``REACTIONS_WORLD``   Open-ended world synthesis, gated by climate tags
                      such as ``rainfall``.
``REACTIONS_BODY``    Digestion and inflammation rules used by the
                      metabolism tick.
``REACTIONS_SOCIAL``  Bonding chemistry gated by a ``trust`` tag.
``REACTIONS_CRAFT``   Smelting, alloying, cooking, brewing and refining
                      rules used by the crafting presets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from ..core.reactions import (
    ReactionRule, all_of, catalyst_boost, tag_threshold, temperature_window,
)

# Environment and minerals
H2O = "H2O"
O2 = "O2"
CO2 = "CO2"
N2 = "N2"
HUMIDITY = "HUMIDITY"
SILICA = "SILICA"
SALT = "SALT"
MINERAL_DUST = "MINERAL_DUST"
SLAG = "SLAG"

# Ores, fuels and metals
ORE_FE = "ORE_FE"
ORE_CU = "ORE_CU"
ORE_SN = "ORE_SN"
ORE_AU = "ORE_AU"
ORE_COAL = "ORE_COAL"
CARBON = "CARBON"
COAL = "COAL"
IRON = "IRON"
FE = "FE"
CU = "CU"
SN = "SN"
AU = "AU"
PIG_IRON = "PIG_IRON"
BRONZE = "BRONZE"
STEEL = "STEEL"

# Organics and flavours
GLU = "GLU"
FRUCT = "FRUCT"
FAT = "FAT"
PROTEIN = "PROTEIN"
FIBER = "FIBER"
RESIN = "RESIN"
ETHANOL = "ETHANOL"
BITTER = "BITTER"
SWEET = "SWEET"
UMAMI = "UMAMI"

# Reactive agents
OXIDIZER = "OXIDIZER"
PH_ACID = "PH_ACID"
PH_BASE = "PH_BASE"
PH_BUFFER = "PH_BUFFER"
CHELATOR = "CHELATOR"

# Body chemistry
ATP = "ATP"
TOX_A = "TOX_A"
ANT_B = "ANT_B"
INFLAM = "INFLAM"
SER = "SER"
DOPA = "DOPA"
CORT = "CORT"
ADREN = "ADREN"
STRESS = "STRESS"
SOCIAL_BOND = "SOCIAL_BOND"
TEMP = "TEMP"
PH = "PH"
ENZ_X = "ENZ_X"
ENZ_METAL = "ENZ_METAL"

# Process markers left behind by crafting
FORGED = "FORGED"
REFINED = "REFINED"

#: Body entries with this prefix act as catalysts during metabolism.
ENZYME_PREFIX = "ENZ_"

SUBSTANCES: Tuple[str, ...] = (
    H2O, O2, CO2, N2, HUMIDITY, SILICA, SALT, MINERAL_DUST, SLAG,
    ORE_FE, ORE_CU, ORE_SN, ORE_AU, ORE_COAL, CARBON, COAL,
    IRON, FE, CU, SN, AU, PIG_IRON, BRONZE, STEEL,
    GLU, FRUCT, FAT, PROTEIN, FIBER, RESIN, ETHANOL, BITTER, SWEET, UMAMI,
    OXIDIZER, PH_ACID, PH_BASE, PH_BUFFER, CHELATOR,
    ATP, TOX_A, ANT_B, INFLAM, SER, DOPA, CORT, ADREN, STRESS, SOCIAL_BOND,
    TEMP, PH, ENZ_X, ENZ_METAL, FORGED, REFINED,
)


REACTIONS_WORLD: List[ReactionRule] = [
    ReactionRule({H2O: 0.5}, {HUMIDITY: 0.5}, rate=0.05,
                 condition=tag_threshold("rainfall", 0.6), name="condensation"),
    ReactionRule({MINERAL_DUST: 1, H2O: 0.2}, {SALT: 0.3}, rate=0.05, name="salt_leaching"),
]

REACTIONS_BODY: List[ReactionRule] = [
    ReactionRule({GLU: 1, O2: 1}, {ATP: 1, CO2: 1}, rate=0.2,
                 condition=catalyst_boost(ENZ_X, 0.5), name="glycolysis"),
    ReactionRule({FRUCT: 1, O2: 1}, {ATP: 0.8, CO2: 1}, rate=0.18, name="fructolysis"),
    ReactionRule({ATP: 1}, {}, rate=0.1, name="atp_spend"),
    ReactionRule({TOX_A: 1}, {INFLAM: 1}, rate=0.15, name="toxin_inflammation"),
    ReactionRule({ANT_B: 1, TOX_A: 1}, {}, rate=0.5, name="antidote"),
]

REACTIONS_SOCIAL: List[ReactionRule] = [
    ReactionRule({SER: 0.2, DOPA: 0.2}, {SOCIAL_BOND: 0.4}, rate=0.08,
                 condition=tag_threshold("trust", 0.5), name="bonding"),
]

REACTIONS_CRAFT: List[ReactionRule] = [
    # Smelting needs a hot furnace; carbon reduces the ore.
    ReactionRule({ORE_FE: 1, CARBON: 0.5}, {IRON: 0.8, SLAG: 0.2, CO2: 0.5}, rate=0.3,
                 condition=temperature_window(0.8, 1.5), name="smelt_iron"),
    ReactionRule({ORE_CU: 1, CARBON: 0.3}, {CU: 0.85, SLAG: 0.15, CO2: 0.3}, rate=0.3,
                 condition=temperature_window(0.7, 1.5), name="smelt_copper"),
    ReactionRule({ORE_SN: 1, CARBON: 0.3}, {SN: 0.85, SLAG: 0.15, CO2: 0.3}, rate=0.3,
                 condition=temperature_window(0.6, 1.5), name="smelt_tin"),
    ReactionRule({ORE_COAL: 1}, {CARBON: 0.8, MINERAL_DUST: 0.2}, rate=0.2,
                 condition=temperature_window(0.6, 1.5), name="coking"),
    ReactionRule({CU: 0.8, SN: 0.2}, {BRONZE: 1.0}, rate=0.25,
                 condition=temperature_window(0.7, 1.5), name="bronze_alloy"),
    ReactionRule({IRON: 1, CARBON: 0.1}, {STEEL: 1.1}, rate=0.1,
                 condition=all_of(temperature_window(0.85, 1.5), tag_threshold("heat", 0.9, slope=20)),
                 name="steel_alloy"),
    # Hammering under heat leaves a FORGED marker on workable metal.
    ReactionRule({IRON: 1}, {IRON: 0.9, FORGED: 0.1}, rate=0.1,
                 condition=tag_threshold("heat", 0.9), name="forge_iron"),
    ReactionRule({STEEL: 1}, {STEEL: 0.9, FORGED: 0.1}, rate=0.1,
                 condition=tag_threshold("heat", 0.9), name="forge_steel"),
    ReactionRule({BRONZE: 1}, {BRONZE: 0.9, FORGED: 0.1}, rate=0.1,
                 condition=tag_threshold("heat", 0.9), name="forge_bronze"),
    # Refining burns off slag and marks the metal as refined.
    ReactionRule({SLAG: 1}, {MINERAL_DUST: 0.4}, rate=0.3,
                 condition=tag_threshold("oxidize", 0.3), name="slag_burn"),
    ReactionRule({CU: 1}, {CU: 0.9, REFINED: 0.1}, rate=0.15,
                 condition=tag_threshold("oxidize", 0.3), name="refine_copper"),
    ReactionRule({IRON: 1}, {IRON: 0.9, REFINED: 0.1}, rate=0.15,
                 condition=tag_threshold("oxidize", 0.3), name="refine_iron"),
    # A good batch (high variation draw) fluxes extra slag away.
    ReactionRule({SLAG: 1}, {MINERAL_DUST: 0.5}, rate=0.1,
                 condition=all_of(tag_threshold("variation", 0.5), tag_threshold("heat", 0.5)),
                 name="flux"),
    # Kitchen chemistry
    ReactionRule({FRUCT: 1}, {GLU: 0.6, SWEET: 0.4}, rate=0.2,
                 condition=tag_threshold("heat", 0.5), name="caramelize"),
    ReactionRule({PROTEIN: 1}, {PROTEIN: 0.7, UMAMI: 0.3}, rate=0.2,
                 condition=tag_threshold("heat", 0.5), name="sear"),
    ReactionRule({TOX_A: 1}, {}, rate=0.3,
                 condition=tag_threshold("heat", 0.5), name="cook_out_toxins"),
    ReactionRule({H2O: 1}, {}, rate=0.05,
                 condition=tag_threshold("heat", 0.7), name="evaporate"),
    ReactionRule({GLU: 1, H2O: 0.5}, {ETHANOL: 0.4, CO2: 0.4, H2O: 0.5, BITTER: 0.1}, rate=0.15,
                 condition=all_of(temperature_window(0.4, 0.7), tag_threshold("wet", 0.6)),
                 name="ferment"),
]


@dataclass
class ReactionLibrary:
    """Named bundle of the rule sets a host wires into its call sites."""
    world: List[ReactionRule] = field(default_factory=lambda: list(REACTIONS_WORLD))
    body: List[ReactionRule] = field(default_factory=lambda: list(REACTIONS_BODY))
    social: List[ReactionRule] = field(default_factory=lambda: list(REACTIONS_SOCIAL))
    craft: List[ReactionRule] = field(default_factory=lambda: list(REACTIONS_CRAFT))

    def flatten(self) -> List[ReactionRule]:
        """World, body, social then craft rules as one ordered list."""
        return [*self.world, *self.body, *self.social, *self.craft]


DEFAULT_LIBRARY = ReactionLibrary()
