"""
Builders for Foundry dnd5e activity documents.

An activity is one usable effect of an item: an attack roll, a saving
throw, healing, a utility roll and so on. Spells and features build their
activities through DDBActivity; the parsers decide which parts to generate.
"""

from __future__ import annotations

import copy
from typing import Any

from .models import ActivityType
from .utils import random_id


def basic_damage_part(
    number: int | None = None,
    denomination: int | None = None,
    bonus: str = "",
    types: list[str] | tuple[str, ...] = (),
    custom_formula: str | None = None,
    scaling_mode: str = "",
    scaling_number: int | None = None,
    scaling_formula: str = "",
) -> dict[str, Any]:
    """Build a damage or healing part.

    A custom formula replaces the dice fields when Foundry rolls the part.

    Example:
        >>> basic_damage_part(custom_formula="@scale.fighter.combat-superiority-die")["custom"]
        {'enabled': True, 'formula': '@scale.fighter.combat-superiority-die'}
    """
    return {
        "number": number,
        "denomination": denomination,
        "bonus": bonus,
        "types": list(types),
        "custom": {
            "enabled": custom_formula is not None,
            "formula": custom_formula or "",
        },
        "scaling": {
            "mode": scaling_mode,
            "number": scaling_number,
            "formula": scaling_formula,
        },
    }


class DDBActivity:
    """One activity attached to a spell or feature document.

    Args:
        activity_type: Which activity to build.
        document: The parent item document; activation, range, target and
            duration are read from its ``system`` block.
        name: Activity label. Empty names display the item name in Foundry.
    """

    def __init__(self, activity_type: ActivityType | str, document: dict, name: str | None = None):
        self.type = ActivityType(activity_type)
        self.document = document
        self.name = name
        self.data: dict[str, Any] = self._stub()

    def _stub(self) -> dict[str, Any]:
        return {
            "_id": random_id(),
            "type": self.type.value,
            "name": self.name or "",
            "img": None,
            "sort": 0,
            "activation": {"type": "", "value": None, "condition": "", "override": False},
            "consumption": {
                "targets": [],
                "scaling": {"allowed": False, "max": ""},
                "spellSlot": False,
            },
            "description": {"chatFlavor": ""},
            "duration": {"concentration": False, "value": "", "units": "inst", "special": "", "override": False},
            "effects": [],
            "range": {"value": None, "units": "", "special": "", "override": False},
            "target": {
                "template": {},
                "affects": {},
                "override": False,
                "prompt": True,
            },
            "uses": {"spent": 0, "max": "", "recovery": []},
        }

    @property
    def system(self) -> dict[str, Any]:
        return self.document.get("system", {})

    # -- generators ---------------------------------------------------------

    def _generate_activation(self, activation_override: dict | None) -> None:
        if activation_override:
            self.data["activation"] = {
                "type": activation_override.get("type", "action"),
                "value": activation_override.get("value", 1),
                "condition": activation_override.get("condition", ""),
                "override": True,
            }
            return
        activation = self.system.get("activation") or {}
        self.data["activation"].update({
            "type": activation.get("type", "action"),
            "value": activation.get("value", 1),
            "condition": activation.get("condition", ""),
        })

    def _generate_range(self) -> None:
        spell_range = self.system.get("range") or {}
        self.data["range"].update({
            "value": spell_range.get("value"),
            "units": spell_range.get("units") or "",
        })

    def _generate_target(self, target_type: str | None) -> None:
        target = copy.deepcopy(self.system.get("target") or {})
        self.data["target"]["template"] = target.get("template", {})
        self.data["target"]["affects"] = target.get("affects", {})
        self.data["target"]["prompt"] = target.get("prompt", True)
        if target_type:
            self.data["target"]["affects"]["type"] = target_type
            self.data["target"]["override"] = True

    def _generate_duration(self) -> None:
        duration = self.system.get("duration") or {}
        properties = self.system.get("properties") or []
        self.data["duration"].update({
            "value": duration.get("value", ""),
            "units": duration.get("units") or "inst",
            "concentration": "concentration" in properties,
        })

    def _generate_consumption(self) -> None:
        self.data["consumption"]["targets"].append({
            "type": "itemUses",
            "target": "",
            "value": "1",
            "scaling": {"mode": "", "formula": ""},
        })

    def _generate_attack(self, attack_type: str, classification: str) -> None:
        self.data["attack"] = {
            "ability": "",
            "bonus": "",
            "critical": {"threshold": None},
            "flat": False,
            "type": {
                "value": attack_type or "melee",
                "classification": classification,
            },
        }

    def _generate_save(self, ability: str, dc_formula: str) -> None:
        self.data["save"] = {
            "ability": ability,
            "dc": {
                "calculation": "" if dc_formula else "spellcasting",
                "formula": dc_formula,
            },
        }

    def _generate_damage(self, parts: list[dict] | None, on_save: str) -> None:
        parts = copy.deepcopy(parts or [])
        if self.type == ActivityType.ATTACK:
            self.data["damage"] = {
                "critical": {"bonus": ""},
                "includeBase": True,
                "parts": parts,
            }
        else:
            self.data["damage"] = {
                "critical": {"allow": False, "bonus": ""},
                "onSave": on_save,
                "parts": parts,
            }

    def _generate_healing(self, part: dict | None) -> None:
        self.data["healing"] = copy.deepcopy(part) if part else basic_damage_part(types=["healing"])

    def _generate_roll(self, roll: dict | None) -> None:
        self.data["roll"] = {"prompt": False, "visible": False, "formula": "", "name": ""}
        if roll:
            self.data["roll"].update(roll)

    def _generate_check(self, check: dict | None) -> None:
        self.data["check"] = {
            "associated": [],
            "ability": "",
            "dc": {"calculation": "", "formula": ""},
        }
        if check:
            self.data["check"].update(copy.deepcopy(check))

    def _generate_enchant(self) -> None:
        self.data["enchant"] = {"self": False}
        self.data["restrictions"] = {
            "allowMagical": False,
            "categories": [],
            "properties": [],
            "type": "",
        }

    def _generate_summon(self) -> None:
        self.data["summon"] = {"mode": "", "prompt": True}
        self.data["profiles"] = []
        self.data["creatureSizes"] = []
        self.data["creatureTypes"] = []
        self.data["match"] = {"attacks": False, "proficiency": False, "saves": False}

    def build(
        self,
        *,
        generate_activation: bool = True,
        generate_range: bool = True,
        generate_target: bool = True,
        generate_duration: bool = True,
        generate_consumption: bool = False,
        generate_spell_slot: bool = False,
        generate_attack: bool = False,
        generate_save: bool = False,
        generate_damage: bool = False,
        generate_healing: bool = False,
        generate_roll: bool = False,
        generate_check: bool = False,
        activation_override: dict | None = None,
        target_type: str | None = None,
        attack_type: str = "",
        attack_classification: str = "spell",
        save_ability: str = "",
        save_dc_formula: str = "",
        on_save: str = "half",
        damage_parts: list[dict] | None = None,
        healing_part: dict | None = None,
        roll: dict | None = None,
        check: dict | None = None,
    ) -> dict[str, Any]:
        """Fill in the activity and return its data."""
        if generate_activation:
            self._generate_activation(activation_override)
        if generate_range:
            self._generate_range()
        if generate_target:
            self._generate_target(target_type)
        if generate_duration:
            self._generate_duration()
        if generate_consumption:
            self._generate_consumption()
        self.data["consumption"]["spellSlot"] = generate_spell_slot

        if generate_attack:
            self._generate_attack(attack_type, attack_classification)
        if generate_save:
            self._generate_save(save_ability, save_dc_formula)
        if generate_damage:
            self._generate_damage(damage_parts, on_save)
        if generate_healing:
            self._generate_healing(healing_part)
        if generate_roll:
            self._generate_roll(roll)
        if generate_check:
            self._generate_check(check)

        if self.type == ActivityType.ENCHANT:
            self._generate_enchant()
        elif self.type == ActivityType.SUMMON:
            self._generate_summon()

        return self.data
