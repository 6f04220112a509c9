"""
Build Foundry dnd5e feat items from D&D Beyond class features, racial
traits, feats and actions.
"""

from __future__ import annotations

import logging
from typing import Any

from ..activities import DDBActivity
from ..enrichers.custom import CustomOverrides
from ..enrichers.features import FeatureEnricher
from ..models import ActivityType
from ..parsing import parse_activation, parse_source, parse_uses
from ..schema import ABILITY_IDS
from ..utils import named_id_stub

logger = logging.getLogger("ddb-importer.features")


class DDBFeature:
    """Parse one DDB feature into a Foundry feat document.

    Args:
        feature_data: A DDB feature wrapper (``{"definition": {...}}``) or a
            bare action record.
        feature_type: Foundry feat type, ``class``, ``race`` or ``feat``.
        subtype: Optional feat subtype (e.g. the class name).
        custom: User override tables.
    """

    def __init__(
        self,
        feature_data: dict,
        feature_type: str = "class",
        subtype: str = "",
        custom: CustomOverrides | None = None,
    ):
        self.feature_data = feature_data
        self.definition: dict = feature_data.get("definition") or feature_data
        self.feature_type = feature_type
        self.subtype = subtype
        self.original_name: str = self.definition.get("name") or ""
        self.enricher = FeatureEnricher(self.original_name, custom=custom)
        self.name = self.enricher.name_hint() or self.original_name
        self.activities: list[DDBActivity] = []
        self.data: dict[str, Any] = self._generate_data_stub()

    def _generate_data_stub(self) -> dict[str, Any]:
        return {
            "_id": named_id_stub(self.name),
            "name": self.name,
            "type": "feat",
            "img": None,
            "system": {
                "description": {"value": "", "chat": ""},
                "source": {},
                "activation": {},
                "uses": {},
                "type": {"value": self.feature_type, "subtype": self.subtype},
                "requirements": self.subtype,
                "activities": {},
            },
            "effects": [],
            "flags": {
                "ddbimporter": {
                    "id": self.definition.get("id"),
                    "entityTypeId": self.definition.get("entityTypeId"),
                    "originalName": self.original_name,
                    "type": self.feature_type,
                },
            },
        }

    @property
    def system(self) -> dict[str, Any]:
        return self.data["system"]

    @property
    def activation(self) -> dict | None:
        activation = self.feature_data.get("activation") or self.definition.get("activation")
        if activation and activation.get("activationType"):
            return activation
        return None

    def _generate_description(self) -> None:
        description = self.definition.get("description") or self.definition.get("snippet") or ""
        self.system["description"] = {
            "value": description,
            "chat": self.definition.get("snippet") or "",
        }

    def _generate_uses(self) -> None:
        limited_use = self.feature_data.get("limitedUse") or self.definition.get("limitedUse")
        self.system["uses"] = parse_uses(limited_use, name=self.name)

    def _fallback_type(self) -> ActivityType | None:
        if self.activation or self.system["uses"].get("max"):
            return ActivityType.UTILITY
        return None

    def _build_options(self, activity_type: ActivityType) -> dict[str, Any]:
        options: dict[str, Any] = {
            "generate_range": False,
            "generate_duration": False,
            "generate_consumption": bool(self.system["uses"].get("max")),
        }
        if activity_type == ActivityType.SAVE:
            options.update(
                generate_save=True,
                generate_damage=True,
                save_ability=ABILITY_IDS.get(self.definition.get("saveStatId"), ""),
            )
        elif activity_type == ActivityType.ATTACK:
            options.update(generate_attack=True, generate_damage=True, attack_classification="weapon")
        elif activity_type == ActivityType.DAMAGE:
            options.update(generate_damage=True)
        elif activity_type == ActivityType.HEAL:
            options.update(generate_healing=True)
        elif activity_type == ActivityType.CHECK:
            options.update(generate_check=True)
        return options

    def _add_activity(self, activity: DDBActivity) -> None:
        self.activities.append(activity)
        self.system["activities"][activity.data["_id"]] = activity.data

    def _generate_activities(self) -> None:
        activity_type = self.enricher.activity_type or self._fallback_type()
        if activity_type is not None and activity_type != ActivityType.NONE:
            activity = DDBActivity(activity_type, self.data)
            activity.build(**self._build_options(activity_type))
            self.enricher.apply_activity_override(activity.data)
            self._add_activity(activity)

        for extra in self.enricher.additional_activities():
            additional = DDBActivity(extra.type, self.data, name=extra.name)
            options = self._build_options(extra.type)
            options.update(extra.build)
            additional.build(**options)
            self._add_activity(additional)

    def parse(self) -> dict[str, Any]:
        """Assemble and return the feat document."""
        self._generate_description()
        self.system["source"] = parse_source(self.definition)
        if self.activation:
            self.system["activation"] = parse_activation(self.activation)
        self._generate_uses()
        self._generate_activities()
        self.enricher.apply_effects(self.data)
        self.enricher.apply_document_override(self.data)

        logger.debug(f"Parsed feature {self.name} ({len(self.activities)} activities)")
        return self.data


def parse_feature(feature_data: dict, **kwargs: Any) -> dict[str, Any]:
    """Parse one DDB feature; keyword arguments go to DDBFeature."""
    return DDBFeature(feature_data, **kwargs).parse()
