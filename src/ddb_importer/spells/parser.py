"""
Build Foundry dnd5e spell items from D&D Beyond spell payloads.

A DDB spell entry wraps the spell definition with character-specific data
(prepared state, limited uses, which class or feature granted it). The
parser reads both and assembles a spell document: properties, preparation,
activation, range and target, uses, one activity picked by the override
table or the classification cascade, effects, then document overrides.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from ..activities import DDBActivity, basic_damage_part
from ..config import ImporterSettings
from ..enrichers.custom import CustomOverrides
from ..enrichers.spells import SpellEnricher
from ..models import ActivityType, SpellDescriptor
from ..parsing import parse_activation, parse_source, parse_uses
from ..schema import (
    ABILITY_IDS,
    ATTACK_TYPES,
    COMPONENT_MATERIAL,
    COMPONENT_SOMATIC,
    COMPONENT_VOCAL,
    PREPARATION_MODES,
    SPELL_SCHOOLS,
)
from ..utils import get_property, named_id_stub
from .classification import resolve_activity_type
from .targeting import infer_target

logger = logging.getLogger("ddb-importer.spells")

MATERIAL_COST_PATTERN = re.compile(r"([\d.,]+)\s*gp")

DURATION_TYPES: dict[str, str] = {
    "instantaneous": "inst",
    "special": "spec",
    "until dispelled": "perm",
    "until dispelled or triggered": "perm",
}

HEALING_SUBTYPES: dict[str, str] = {
    "hit-points": "healing",
    "temporary-hit-points": "temphp",
}


class DDBSpell:
    """Parse one DDB spell entry into a Foundry spell document.

    Args:
        spell_data: DDB spell entry (``{"definition": {...}, ...}``).
        settings: Importer settings; defaults are used when omitted.
        is_generic: True for compendium munches, False for character spells.
        name_postfix: Appended to the generated document id.
        custom: User override tables.
    """

    def __init__(
        self,
        spell_data: dict,
        settings: ImporterSettings | None = None,
        is_generic: bool | None = None,
        name_postfix: str | None = None,
        custom: CustomOverrides | None = None,
    ):
        self.spell_data = spell_data
        self.definition: dict = spell_data.get("definition") or {}
        self.settings = settings or ImporterSettings()
        self.name_postfix = name_postfix
        self.descriptor = SpellDescriptor.from_ddb(self.definition)
        self.original_name = self.descriptor.name

        self.dndbeyond: dict = get_property(spell_data, "flags.ddbimporter.dndbeyond") or {}
        if is_generic is None:
            is_generic = bool(get_property(spell_data, "flags.ddbimporter.generic"))
        self.is_generic = is_generic
        self.add_spell_effects = self.settings.add_spell_effects(is_generic)

        self.limited_use = self.dndbeyond.get("limitedUse") or spell_data.get("limitedUse")
        self.force_material = bool(self.dndbeyond.get("forceMaterial"))
        self.klass: str | None = self.dndbeyond.get("class")
        self.lookup: str | None = self.dndbeyond.get("lookup")
        self.lookup_name: str = self.dndbeyond.get("lookupName") or ""
        self.ability: str | None = self.dndbeyond.get("ability")

        self.enricher = SpellEnricher(self.original_name, custom=custom)
        self.name = self.enricher.name_hint() or self.original_name
        self.activities: list[DDBActivity] = []
        self.data: dict[str, Any] = self._generate_data_stub()

    def _generate_data_stub(self) -> dict[str, Any]:
        return {
            "_id": named_id_stub(self.name, postfix=self.name_postfix),
            "name": self.name,
            "type": "spell",
            "img": None,
            "system": {
                "description": {"value": "", "chat": ""},
                "source": {},
                "activation": {},
                "duration": {},
                "level": 0,
                "school": "",
                "properties": [],
                "materials": {},
                "preparation": {},
                "range": {},
                "target": {},
                "uses": {},
                "ability": self.ability or "",
                "activities": {},
            },
            "effects": [],
            "flags": {
                "ddbimporter": {
                    "id": self.spell_data.get("id"),
                    "definitionId": self.definition.get("id"),
                    "entityTypeId": self.spell_data.get("entityTypeId"),
                    "dndbeyond": self.dndbeyond,
                    "originalName": self.original_name,
                    "sources": self.definition.get("sources") or [],
                    "tags": self.descriptor.tags,
                    "generic": self.is_generic,
                    "addSpellEffects": self.add_spell_effects,
                },
            },
        }

    @property
    def system(self) -> dict[str, Any]:
        return self.data["system"]

    # -- system fields ------------------------------------------------------

    def _generate_properties(self) -> None:
        components = self.definition.get("components") or []
        properties = self.system["properties"]
        if COMPONENT_VOCAL in components:
            properties.append("vocal")
        if COMPONENT_SOMATIC in components:
            properties.append("somatic")
        if COMPONENT_MATERIAL in components or self.force_material:
            properties.append("material")
        if self.definition.get("ritual"):
            properties.append("ritual")
        if self.definition.get("concentration"):
            properties.append("concentration")

    def _generate_materials(self) -> None:
        text = self.definition.get("componentsDescription") or ""
        if not text:
            self.system["materials"] = {"value": "", "consumed": False, "cost": 0, "supply": 0}
            return

        cost = 0
        match = MATERIAL_COST_PATTERN.search(text.lower())
        if match:
            digits = re.sub(r"[,.]", "", match.group(1))
            cost = int(digits) if digits else 0

        self.system["materials"] = {
            "value": text,
            "consumed": "consume" in text.lower(),
            "cost": cost,
            "supply": 0,
        }

    def _generate_class_preparation_mode(self) -> None:
        preparation = self.system["preparation"]
        class_mode = PREPARATION_MODES.get(self.klass or "")
        level = self.descriptor.level

        if (
            self.spell_data.get("restriction") == "As Ritual Only"
            or self.spell_data.get("castOnlyAsRitual")
            or self.spell_data.get("ritualCastingType") is not None
        ):
            preparation["mode"] = "ritual"
            preparation["prepared"] = False
        elif not self.spell_data.get("usesSpellSlot", True) and level != 0:
            # features such as Circle of Stars grant free casts of a spell
            preparation["mode"] = "innate"
        elif self.spell_data.get("alwaysPrepared"):
            preparation["mode"] = "always"
        elif class_mode:
            preparation["mode"] = class_mode

        # warlock cantrips stay regular spells so they list as cantrips
        if preparation["mode"] == "pact" and level == 0:
            preparation["mode"] = "prepared"
            preparation["prepared"] = True
        elif preparation["mode"] == "pact" and self.settings.pact_spells_prepared:
            preparation["prepared"] = True

    def _generate_preparation_mode(self) -> None:
        self.system["preparation"] = {
            "mode": "prepared",
            "prepared": bool(self.spell_data.get("alwaysPrepared") or self.spell_data.get("prepared")),
        }
        preparation = self.system["preparation"]
        level = self.descriptor.level
        uses_slot = self.spell_data.get("usesSpellSlot", True)

        if self.lookup == "classSpell" or (self.lookup == "classFeature" and self.klass):
            self._generate_class_preparation_mode()
        elif self.lookup == "race" and level != 0:
            preparation["mode"] = "always" if uses_slot else "innate"
        elif self.lookup_name.startswith("Mystic Arcanum"):
            # limited uses come from parse_uses
            preparation["mode"] = "pact"
            preparation["prepared"] = False
        elif self.lookup == "item" and level != 0:
            preparation["mode"] = "prepared"
            preparation["prepared"] = False
        else:
            always = not uses_slot and level != 0
            ritual_only = (
                self.spell_data.get("ritualCastingType") is not None
                or bool(self.spell_data.get("castOnlyAsRitual"))
            )
            if always and ritual_only:
                preparation["mode"] = "ritual"
                preparation["prepared"] = False
            elif always:
                preparation["mode"] = "atwill"
            if self.lookup == "classFeature" and self.spell_data.get("alwaysPrepared"):
                preparation["mode"] = "always"

    def _generate_description(self) -> None:
        self.system["description"] = {"value": self.descriptor.description, "chat": ""}

    def _generate_activation(self) -> None:
        activation = self.spell_data.get("activation") or self.definition.get("activation")
        self.system["activation"] = parse_activation(
            activation, condition=self.definition.get("castingTimeDescription") or ""
        )

    def _generate_duration(self) -> None:
        duration = self.definition.get("duration")
        if not duration:
            return
        if duration.get("durationUnit"):
            units = duration["durationUnit"].lower()
        else:
            duration_type = (duration.get("durationType") or "").lower()
            units = DURATION_TYPES.get(duration_type, duration_type[:4])
        interval = duration.get("durationInterval")
        self.system["duration"] = {
            "value": str(interval) if interval else "",
            "units": units,
        }

    def _generate_range_and_target(self) -> None:
        target, spell_range = infer_target(self.descriptor)
        self.system["range"] = spell_range.model_dump()
        self.system["target"] = target.model_dump()

    def _generate_uses(self) -> None:
        self.system["uses"] = parse_uses(self.limited_use, name=self.name)

    # -- activities ---------------------------------------------------------

    def _damage_parts(self) -> list[dict[str, Any]]:
        parts = []
        for mod in self.descriptor.modifiers:
            if mod.get("type") != "damage":
                continue
            die = mod.get("die") or {}
            higher = get_property(mod, "atHigherLevels.higherLevelDefinitions") or []
            scaling_number = get_property(higher[0], "dice.diceCount") if higher else None
            parts.append(basic_damage_part(
                number=die.get("diceCount"),
                denomination=die.get("diceValue"),
                bonus=str(die.get("fixedValue") or ""),
                types=[mod["subType"]] if mod.get("subType") else [],
                scaling_mode="whole" if higher and self.descriptor.level > 0 else "",
                scaling_number=scaling_number,
            ))
        return parts

    def _healing_part(self) -> dict[str, Any] | None:
        for mod in self.descriptor.modifiers:
            healing_type = HEALING_SUBTYPES.get(mod.get("subType", ""))
            if mod.get("type") != "bonus" or healing_type is None:
                continue
            die = mod.get("die") or {}
            return basic_damage_part(
                number=die.get("diceCount"),
                denomination=die.get("diceValue"),
                bonus=str(die.get("fixedValue") or ""),
                types=[healing_type],
            )
        return None

    def _attack_type(self) -> str:
        attack_type = ATTACK_TYPES.get(self.definition.get("attackType"))
        if attack_type:
            return attack_type
        return "melee" if self.system["range"].get("units") == "touch" else "ranged"

    def _build_options(self, activity_type: ActivityType) -> dict[str, Any]:
        options: dict[str, Any] = {
            "generate_spell_slot": self._uses_spell_slot(),
        }
        if activity_type == ActivityType.SAVE:
            description = self.descriptor.description.lower()
            options.update(
                generate_save=True,
                generate_damage=True,
                save_ability=ABILITY_IDS.get(self.definition.get("saveDcAbilityId"), ""),
                on_save="half" if "half as much damage" in description else "none",
                damage_parts=self._damage_parts(),
            )
        elif activity_type == ActivityType.ATTACK:
            options.update(
                generate_attack=True,
                generate_damage=True,
                attack_type=self._attack_type(),
                damage_parts=self._damage_parts(),
            )
        elif activity_type == ActivityType.DAMAGE:
            options.update(generate_damage=True, damage_parts=self._damage_parts())
        elif activity_type == ActivityType.HEAL:
            options.update(generate_healing=True, healing_part=self._healing_part())
        elif activity_type == ActivityType.CHECK:
            options.update(generate_check=True)
        return options

    def _uses_spell_slot(self) -> bool:
        if self.descriptor.level == 0:
            return False
        mode = self.system["preparation"].get("mode")
        return mode not in ("innate", "atwill") and self.spell_data.get("usesSpellSlot", True) is not False

    def get_activity(
        self,
        type_override: ActivityType | str | None = None,
        type_fallback: ActivityType | str | None = None,
    ) -> DDBActivity | None:
        """Build the activity for this spell.

        Args:
            type_override: Forced type; skips the classification cascade.
            type_fallback: Type used when the cascade finds nothing.

        Returns:
            The built activity, or None when no type applies.
        """
        activity_type = resolve_activity_type(self.descriptor, override=type_override, fallback=type_fallback)
        if activity_type is None or activity_type == ActivityType.NONE:
            return None
        activity = DDBActivity(activity_type, self.data)
        activity.build(**self._build_options(activity_type))
        return activity

    def _add_activity(self, activity: DDBActivity) -> str:
        self.activities.append(activity)
        self.system["activities"][activity.data["_id"]] = activity.data
        return activity.data["_id"]

    def _generate_activity(self) -> str | None:
        activity = self.get_activity(type_override=self.enricher.activity_type)
        logger.debug(
            f"Spell activity for {self.name}: {activity.type.value if activity else 'none'}"
        )
        activity_id = None
        if activity is not None:
            self.enricher.apply_activity_override(activity.data)
            activity_id = self._add_activity(activity)

        for extra in self.enricher.additional_activities():
            additional = DDBActivity(extra.type, self.data, name=extra.name)
            options = self._build_options(extra.type)
            options.update(extra.build)
            additional.build(**options)
            self._add_activity(additional)

        return activity_id

    def _apply_effects(self) -> None:
        if self.add_spell_effects:
            self.enricher.apply_effects(self.data)
        self.data["flags"]["ddbimporter"]["effectsApplied"] = True

    def parse(self) -> dict[str, Any]:
        """Assemble and return the spell document."""
        self.system["level"] = self.descriptor.level
        self.system["school"] = SPELL_SCHOOLS.get(self.descriptor.school.lower(), "")
        self.system["source"] = parse_source(self.definition)
        self._generate_properties()
        self._generate_materials()
        self._generate_preparation_mode()
        self._generate_description()
        self._generate_activation()
        self._generate_duration()
        self._generate_range_and_target()
        self._generate_uses()

        self._generate_activity()
        self._apply_effects()
        self.enricher.apply_document_override(self.data)

        logger.debug(f"Parsed spell {self.name}")
        return self.data


def parse_spell(spell_data: dict, **kwargs: Any) -> dict[str, Any]:
    """Parse one DDB spell entry; keyword arguments go to DDBSpell."""
    return DDBSpell(spell_data, **kwargs).parse()
