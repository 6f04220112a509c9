"""
D&D Beyond JSON schema constants and lookup tables.

These map DDB's internal IDs and field names to Foundry dnd5e equivalents.
Based on community reverse-engineering of the DDB character and proxy endpoints.
"""

import re

# ---------------------------------------------------------------------------
# API endpoints
# ---------------------------------------------------------------------------

DDB_API_BASE_URL = "https://character-service.dndbeyond.com/character/v5/character"
DDB_PROXY_URL = "https://proxy.ddb.mrprimate.co.uk"

# ---------------------------------------------------------------------------
# URL parsing
# ---------------------------------------------------------------------------

# Matches: https://www.dndbeyond.com/characters/12345678[/anything]
DDB_CHARACTER_URL_PATTERN = re.compile(
    r"(?:https?://)?(?:www\.)?dndbeyond\.com/characters/(\d+)"
)

# ---------------------------------------------------------------------------
# Number words (used when counting targets in spell text)
# ---------------------------------------------------------------------------

NUMBER_WORDS: dict[str, int] = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
    "thirteen": 13,
    "fourteen": 14,
    "fifteen": 15,
    "sixteen": 16,
    "seventeen": 17,
    "eighteen": 18,
    "nineteen": 19,
    "twenty": 20,
}

# ---------------------------------------------------------------------------
# Abilities (DDB stat id → Foundry ability key)
# ---------------------------------------------------------------------------

ABILITY_IDS: dict[int, str] = {
    1: "str",
    2: "dex",
    3: "con",
    4: "int",
    5: "wis",
    6: "cha",
}

CLASS_SPELLCASTING_ABILITY: dict[str, str] = {
    "Artificer": "int",
    "Bard": "cha",
    "Cleric": "wis",
    "Druid": "wis",
    "Paladin": "cha",
    "Ranger": "wis",
    "Sorcerer": "cha",
    "Warlock": "cha",
    "Wizard": "int",
}

# ---------------------------------------------------------------------------
# Spells
# ---------------------------------------------------------------------------

SPELL_SCHOOLS: dict[str, str] = {
    "abjuration": "abj",
    "conjuration": "con",
    "divination": "div",
    "enchantment": "enc",
    "evocation": "evo",
    "illusion": "ill",
    "necromancy": "nec",
    "transmutation": "trs",
}

# DDB component ids
COMPONENT_VOCAL = 1
COMPONENT_SOMATIC = 2
COMPONENT_MATERIAL = 3

# Class name → preparation mode for class spells
PREPARATION_MODES: dict[str, str] = {
    "Artificer": "prepared",
    "Bard": "always",
    "Cleric": "prepared",
    "Druid": "prepared",
    "Paladin": "prepared",
    "Ranger": "always",
    "Sorcerer": "always",
    "Warlock": "pact",
    "Wizard": "prepared",
}

# DDB attackType on spell definitions
ATTACK_TYPES: dict[int, str] = {
    1: "melee",
    2: "ranged",
}

# ---------------------------------------------------------------------------
# Activation, duration and resets
# ---------------------------------------------------------------------------

ACTIVATION_TYPES: dict[int, str] = {
    1: "action",
    2: "none",
    3: "bonus",
    4: "reaction",
    5: "special",
    6: "minute",
    7: "hour",
    8: "special",
}

# DDB limitedUse.resetType → Foundry recovery period
RESET_TYPES: dict[int, str] = {
    1: "sr",
    2: "lr",
    3: "day",
    4: "charges",
}

# DDB limitedUse operator for "multiply by"
OPERATOR_MULTIPLY = 2

# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

SOURCE_BOOKS: dict[int, str] = {
    1: "BR",
    2: "PHB",
    3: "DMG",
    5: "MM",
}

# ---------------------------------------------------------------------------
# Character sections that grant spells outside the class spell lists
# ---------------------------------------------------------------------------

SPELL_GRANT_SECTIONS: dict[str, str] = {
    "race": "race",
    "class": "classFeature",
    "feat": "feat",
    "item": "item",
}
