"""
Override tables for class, race and feat features.
"""

from __future__ import annotations

from ..activities import basic_damage_part
from ..models import (
    ActivityHint,
    ActivityType,
    AdditionalActivity,
    DocumentOverride,
    EffectChange,
    EffectHint,
)
from .base import BaseEnricher

SUPERIORITY_DIE = "@scale.fighter.combat-superiority-die"
MANEUVER_DC = "8 + @prof + max(@abilities.dex.mod, @abilities.str.mod)"


def _maneuver_save(ability: str, on_save: str = "none") -> ActivityHint:
    return ActivityHint(
        type=ActivityType.SAVE,
        data={
            "damage": {"onSave": on_save},
            "save": {
                "ability": ability,
                "dc": {"calculation": "", "formula": MANEUVER_DC},
            },
        },
    )


def _maneuver_damage(types: list[str] | None = None) -> ActivityHint:
    return ActivityHint(
        type=ActivityType.DAMAGE,
        data={
            "damage": {
                "onSave": "none",
                "parts": [basic_damage_part(custom_formula=SUPERIORITY_DIE, types=types or [])],
            },
        },
    )


def _superiority_bonus(key: str) -> EffectChange:
    return EffectChange(key=key, value=SUPERIORITY_DIE, priority=20)


def _renamed(name: str) -> DocumentOverride:
    return DocumentOverride(data={"name": name})


class FeatureEnricher(BaseEnricher):
    """Overrides for features parsed by DDBFeature."""

    ACTIVITY_HINTS = {
        "Divine Intervention": ActivityHint(
            type=ActivityType.UTILITY,
            roll={"prompt": False, "visible": False, "formula": "1d100", "name": "Implore Aid"},
        ),
        "Harness Divine Power": ActivityHint(
            type=ActivityType.UTILITY,
            activation_type="bonus",
            add_item_consume=True,
        ),
        "Hold Breath": ActivityHint(
            type=ActivityType.UTILITY,
            target_type="self",
            activation_type="special",
        ),
        "Lay on Hands: Healing Pool": ActivityHint(
            type=ActivityType.HEAL,
            name="Healing",
        ),
        "Maneuver: Ambush": ActivityHint(type=ActivityType.UTILITY),
        "Maneuver: Bait and Switch": ActivityHint(type=ActivityType.UTILITY),
        "Maneuver: Disarming Attack (Str.)": _maneuver_save("str"),
        "Maneuver: Distracting Strike": _maneuver_damage(),
        "Maneuver: Goading Attack (Str.)": _maneuver_save("wis"),
        "Maneuver: Lunging Attack": _maneuver_damage(),
        "Maneuver: Menacing Attack (Str.)": _maneuver_save("wis"),
        "Maneuver: Parry (Str.)": ActivityHint(
            type=ActivityType.UTILITY,
            roll={"prompt": False, "visible": False, "formula": SUPERIORITY_DIE, "name": "Reduce Damage Roll"},
        ),
        "Maneuver: Pushing Attack (Str.)": _maneuver_save("str"),
        "Maneuver: Precision Attack": ActivityHint(
            type=ActivityType.UTILITY,
            roll={"prompt": False, "visible": False, "formula": SUPERIORITY_DIE, "name": "Add to Attack Roll"},
        ),
        "Maneuver: Rally": ActivityHint(
            type=ActivityType.HEAL,
            data={
                "healing": {
                    "custom": {"enabled": True, "formula": SUPERIORITY_DIE},
                    "types": ["temphp"],
                },
            },
        ),
        "Maneuver: Riposte": _maneuver_damage(),
        "Maneuver: Sweeping Attack": _maneuver_damage(["bludgeoning", "piercing", "slashing"]),
        "Maneuver: Tactical Assessment": ActivityHint(
            type=ActivityType.CHECK,
            data={
                "name": "Roll Check (Apply Effect First)",
                "flags.ddbimporter.noeffect": True,
                "check": {
                    "associated": ["his", "inv", "ins"],
                    "ability": "",
                    "dc": {"calculation": "", "formula": ""},
                },
            },
        ),
        "Maneuver: Trip Attack (Str.)": _maneuver_save("str", on_save="full"),
        "Partially Amphibious": ActivityHint(
            type=ActivityType.UTILITY,
            target_type="self",
            activation_type="special",
            add_item_consume=True,
        ),
        "Second Wind": ActivityHint(
            type=ActivityType.HEAL,
            add_item_consume=True,
            target_type="self",
            data={
                "healing": {
                    "number": 1,
                    "denomination": 10,
                    "bonus": "@classes.fighter.levels",
                    "types": ["healing"],
                    "scaling": {"mode": "whole", "number": None, "formula": ""},
                },
            },
        ),
    }

    ADDITIONAL_ACTIVITIES = {
        "Maneuver: Tactical Assessment": [
            AdditionalActivity(
                name="Bonus Dice Effect",
                type=ActivityType.UTILITY,
                build={
                    "generate_target": False,
                    "generate_range": False,
                    "generate_activation": True,
                    "activation_override": {"type": "special", "value": 1, "condition": ""},
                },
            ),
        ],
    }

    DOCUMENT_OVERRIDES = {
        "Action Surge": DocumentOverride(remove_damage=True),
        "Arcane Propulsion Armor Gauntlet": DocumentOverride(data={"system.damage.bonus": "@mod"}),
        "Drake Companion": DocumentOverride(data={"system.uses.max": "", "system.uses.recovery": []}),
        "Epic Boon: Choose an Epic Boon feat": _renamed("Epic Boon"),
        "Harness Divine Power": DocumentOverride(
            data={"flags.ddbimporter.retainOriginalConsumption": True},
        ),
        "Lay on Hands: Healing Pool": _renamed("Lay on Hands"),
        "Maneuver: Disarming Attack (Str.)": _renamed("Maneuver: Disarming Attack"),
        "Maneuver: Goading Attack (Str.)": _renamed("Maneuver: Goading Attack"),
        "Maneuver: Menacing Attack (Str.)": _renamed("Maneuver: Menacing Attack"),
        "Maneuver: Parry (Str.)": _renamed("Maneuver: Parry"),
        "Maneuver: Pushing Attack (Str.)": _renamed("Maneuver: Pushing Attack"),
        "Maneuver: Trip Attack (Str.)": _renamed("Maneuver: Trip Attack"),
        "Partially Amphibious": DocumentOverride(
            data={
                "system.uses": {
                    "spent": 0,
                    "max": "1",
                    "recovery": [{"period": "lr", "type": "recoverAll"}],
                },
                "flags.midiProperties.toggleEffect": True,
            },
        ),
    }

    EFFECT_HINTS = {
        "Hold Breath": EffectHint(data={"duration.rounds": 600}),
        "Maneuver: Ambush": EffectHint(
            transfer=False,
            changes=[_superiority_bonus("system.attributes.init.bonus")],
        ),
        "Maneuver: Bait and Switch": EffectHint(
            transfer=False,
            changes=[_superiority_bonus("system.attributes.ac.bonus")],
        ),
        "Maneuver: Evasive Footwork": EffectHint(
            transfer=False,
            changes=[_superiority_bonus("system.attributes.ac.bonus")],
        ),
        "Maneuver: Tactical Assessment": EffectHint(
            name="Tactical Assessment Bonus",
            transfer=False,
            changes=[
                _superiority_bonus("system.skills.his.bonuses.check"),
                _superiority_bonus("system.skills.inv.bonuses.check"),
                _superiority_bonus("system.skills.ins.bonuses.check"),
            ],
        ),
        "Partially Amphibious": EffectHint(data={"duration.rounds": 600}),
    }
