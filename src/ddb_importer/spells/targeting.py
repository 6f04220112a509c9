"""
Target and range inference for spells.

DDB only gives structured data for area spells (aoeType/aoeValue) and the
range origin. Everything else (how many creatures, whether a creature is
targeted at all, wall dimensions) is guessed from the description text.
Nothing here raises: when no pattern matches the defaults are returned.
"""

from __future__ import annotations

import re

from ..models import RangeSpec, SpellDescriptor, TargetSpec
from ..schema import NUMBER_WORDS

# "You touch a creature" style phrasing
CREATURE_PATTERN = re.compile(
    r"You touch a creature|You touch a willing creature|affecting one creature"
    r"|creature you touch|a creature you|creature( that)? you can see"
    r"|interrupt a creature|would strike a creature|creature of your choice"
    r"|creature or object within range|cause a creature|creature must be within range",
    re.IGNORECASE,
)

# "X of your choice within range" style phrasing
CREATURES_RANGE_PATTERN = re.compile(
    r"(humanoid|monster|creature|target)(s)? (or loose object )?(of your choice )?"
    r"(that )?(you can see )?within range",
    re.IGNORECASE,
)

NUM_CREATURES_PATTERN = re.compile(
    r"(\w*) (falling )?(willing )?(creature|target|monster|celestial|fiend|fey|corpses? of|humanoid)"
    r"(?!.*you have animated)",
    re.IGNORECASE,
)

HIGHER_LEVELS_PATTERN = re.compile(r"At Higher Levels", re.IGNORECASE)

THICK_PATTERN = re.compile(r" (\d+) foot (thick|wide)")
HEIGHT_PATTERN = re.compile(r" (\d+) foot (tall|high)")
WALL_LENGTH_PATTERN = re.compile(r" (\d+) feet long")

TEN_PANELS = "ten 10-foot-"
MIN_TEMPLATE_DIMENSION = 5


def targets_creature(description: str) -> bool:
    """Does the spell text describe targeting creatures?"""
    return bool(CREATURE_PATTERN.search(description) or CREATURES_RANGE_PATTERN.search(description))


def get_target_value(description: str) -> int | None:
    """Guess how many creatures a spell affects from its text.

    Looks for "<number word> creature(s)" style fragments, ignoring the
    "At Higher Levels" section and corpse-animation exceptions, and
    returns the largest number found.

    Example:
        >>> get_target_value("up to three creatures of your choice within range")
        3
    """
    higher = HIGHER_LEVELS_PATTERN.search(description)
    if higher:
        description = description[:higher.start()]

    values = [
        NUMBER_WORDS[match.group(1).lower()]
        for match in NUM_CREATURES_PATTERN.finditer(description)
        if match.group(1).lower() in NUMBER_WORDS
    ]
    return max(values) if values else None


def generate_range(descriptor: SpellDescriptor) -> RangeSpec:
    """Map the DDB range origin onto a Foundry range."""
    value = descriptor.range_value
    units: str | None = "ft"

    origin = descriptor.range_origin
    if origin == "Touch":
        value = None
        units = "touch"
    elif origin == "Self":
        value = None
        units = "self"
    elif origin == "None":
        value = None
        units = "none"
    elif origin in ("Ranged", "Feet"):
        units = "ft"
    elif origin == "Miles":
        units = "ml"
    elif origin in ("Sight", "Special"):
        units = "spec"
    elif origin == "Any":
        units = "any"
    elif origin is None:
        units = None

    return RangeSpec(value=value, units=units)


def infer_target(descriptor: SpellDescriptor) -> tuple[TargetSpec, RangeSpec]:
    """Infer the target block and range of a spell.

    Args:
        descriptor: The spell to inspect.

    Returns:
        Tuple of (target, range). Both are new objects on every call.
    """
    target = TargetSpec()
    spell_range = generate_range(descriptor)
    description = descriptor.description

    thick = THICK_PATTERN.search(description)
    if thick and int(thick.group(1)) > MIN_TEMPLATE_DIMENSION:
        target.template.width = int(thick.group(1))

    height = HEIGHT_PATTERN.search(description)
    if height and int(height.group(1)) > MIN_TEMPLATE_DIMENSION:
        target.template.height = int(height.group(1))

    # area spells carry their shape in structured data
    if descriptor.aoe_type and descriptor.aoe_value:
        target.template.size = int(descriptor.aoe_value)
        target.template.type = descriptor.aoe_type.lower()
        return target, spell_range

    creatures = targets_creature(description)
    if creatures:
        target.affects.count = get_target_value(description)

    origin = descriptor.range_origin
    if origin == "Touch":
        if creatures:
            target.affects.count = "1"
            target.affects.type = "creature"
    elif origin == "Self":
        damage_spell = descriptor.has_damage_modifier()
        if damage_spell and descriptor.range_value:
            # damage radius centred on the caster
            spell_range = RangeSpec(value=descriptor.range_value, units="ft")
            target.template.type = "radius"
        elif damage_spell:
            target.affects.type = "creature"
        else:
            target.affects.type = "self"
    elif origin == "None":
        target.affects.type = "none"
    elif origin in ("Ranged", "Feet", "Miles"):
        if creatures:
            target.affects.type = "creature"
    elif origin is None:
        target.affects.type = ""

    if "Wall" in descriptor.name:
        target.template.type = "wall"
        target.template.units = "ft"
        if TEN_PANELS in description:
            target.template.size = 100
        else:
            length = WALL_LENGTH_PATTERN.search(description)
            if length:
                target.template.size = int(length.group(1))

    return target, spell_range
