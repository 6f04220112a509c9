"""
Pick the activity type for a spell from its DDB flags and tags.
"""

from __future__ import annotations

from ..models import ActivityType, SpellDescriptor


def classify_activity(descriptor: SpellDescriptor) -> ActivityType | None:
    """Classify a spell by an ordered cascade, first match wins.

    Saving throws without attack rolls come first so damage saves are not
    treated as attacks; damage with an attack roll is an attack, damage
    alone is plain damage.

    Returns:
        The activity type, or None when no rule applies.
    """
    tags = descriptor.tags
    if descriptor.requires_saving_throw and not descriptor.requires_attack_roll:
        return ActivityType.SAVE
    if "Damage" in tags and descriptor.requires_attack_roll:
        return ActivityType.ATTACK
    if "Damage" in tags:
        return ActivityType.DAMAGE
    if "Healing" in tags:
        return ActivityType.HEAL
    if "Buff" in tags:
        return ActivityType.UTILITY
    return None


def resolve_activity_type(
    descriptor: SpellDescriptor,
    override: ActivityType | str | None = None,
    fallback: ActivityType | str | None = None,
) -> ActivityType | None:
    """Resolve the activity type for a spell.

    Args:
        descriptor: The spell being parsed.
        override: Type from an override table; wins outright when given.
        fallback: Type to use when neither the override nor the cascade applies.

    Returns:
        The activity type, or None for no activity.
    """
    if override is not None:
        return ActivityType(override)
    classified = classify_activity(descriptor)
    if classified is not None:
        return classified
    if fallback is not None:
        return ActivityType(fallback)
    return None
