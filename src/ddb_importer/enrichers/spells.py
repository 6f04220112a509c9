"""
Override tables for spells.
"""

from __future__ import annotations

from ..activities import basic_damage_part
from ..models import (
    ActivityHint,
    ActivityType,
    DocumentOverride,
    EffectChange,
    EffectHint,
    EffectMode,
)
from .base import BaseEnricher


def _bonus_all(value: str, keys: tuple[str, ...]) -> list[EffectChange]:
    return [EffectChange(key=key, value=value, mode=EffectMode.ADD) for key in keys]


ATTACK_BONUS_KEYS = (
    "system.bonuses.mwak.attack",
    "system.bonuses.rwak.attack",
    "system.bonuses.msak.attack",
    "system.bonuses.rsak.attack",
)


class SpellEnricher(BaseEnricher):
    """Overrides for spells parsed by DDBSpell."""

    NAME_HINTS = {
        "Tasha's Hideous Laughter": "Hideous Laughter",
        "Tenser's Floating Disk": "Floating Disk",
        "Bigby's Hand": "Arcane Hand",
    }

    ACTIVITY_HINTS = {
        "Aid": ActivityHint(type=ActivityType.UTILITY),
        "Bless": ActivityHint(type=ActivityType.UTILITY),
        "Find Familiar": ActivityHint(type=ActivityType.SUMMON),
        "Guidance": ActivityHint(type=ActivityType.UTILITY),
        "Hunter's Mark": ActivityHint(
            type=ActivityType.DAMAGE,
            data={
                "damage": {
                    "onSave": "none",
                    "parts": [basic_damage_part(number=1, denomination=6)],
                },
            },
        ),
        "Mage Armor": ActivityHint(type=ActivityType.UTILITY),
        "Magic Weapon": ActivityHint(type=ActivityType.ENCHANT),
        "Resistance": ActivityHint(type=ActivityType.UTILITY),
        "Shield": ActivityHint(
            type=ActivityType.UTILITY,
            activation_type="reaction",
            target_type="self",
        ),
        "Toll the Dead": ActivityHint(
            type=ActivityType.SAVE,
            data={
                "damage": {
                    "onSave": "none",
                    "parts": [
                        basic_damage_part(
                            number=1,
                            denomination=8,
                            types=["necrotic"],
                            scaling_mode="whole",
                            scaling_formula="",
                        ),
                    ],
                },
                "save": {"ability": "wis", "dc": {"calculation": "spellcasting", "formula": ""}},
            },
        ),
    }

    DOCUMENT_OVERRIDES = {
        "Hunter's Mark": DocumentOverride(data={"system.target.affects.count": "1"}),
        "Hex": DocumentOverride(data={"system.target.affects.count": "1"}),
        "Magic Weapon": DocumentOverride(data={"flags.ddbimporter.enchantment": True}),
    }

    EFFECT_HINTS = {
        "Aid": EffectHint(
            type="spell",
            transfer=False,
            changes=[EffectChange(key="system.attributes.hp.tempmax", value="5", mode=EffectMode.ADD)],
            data={"duration.seconds": 28800},
        ),
        "Bane": EffectHint(
            type="spell",
            transfer=False,
            changes=_bonus_all("-1d4", ATTACK_BONUS_KEYS + ("system.bonuses.abilities.save",)),
            data={"duration.rounds": 10},
        ),
        "Bless": EffectHint(
            type="spell",
            transfer=False,
            changes=_bonus_all("+1d4", ATTACK_BONUS_KEYS + ("system.bonuses.abilities.save",)),
            data={"duration.rounds": 10},
        ),
        "Guidance": EffectHint(
            type="spell",
            transfer=False,
            changes=[EffectChange(key="system.bonuses.abilities.check", value="+1d4", mode=EffectMode.ADD)],
            data={"duration.rounds": 10},
        ),
        "Mage Armor": EffectHint(
            type="spell",
            transfer=False,
            changes=[EffectChange(key="system.attributes.ac.calc", value="mage", mode=EffectMode.OVERRIDE, priority=5)],
            data={"duration.seconds": 28800},
        ),
        "Magic Weapon": EffectHint(
            type="enchant",
            name="Magic Weapon +1",
            transfer=False,
            changes=[
                EffectChange(key="name", value="{} (Magic Weapon)", mode=EffectMode.OVERRIDE),
                EffectChange(key="system.magicalBonus", value="1", mode=EffectMode.ADD),
            ],
        ),
        "Resistance": EffectHint(
            type="spell",
            transfer=False,
            changes=[EffectChange(key="system.bonuses.abilities.save", value="+1d4", mode=EffectMode.ADD)],
            data={"duration.rounds": 10},
        ),
        "Shield": EffectHint(
            type="spell",
            transfer=False,
            changes=[EffectChange(key="system.attributes.ac.bonus", value="+5", mode=EffectMode.ADD)],
            data={"duration.rounds": 1},
        ),
    }
