"""
Named override tables applied on top of the generated documents.

Each enricher subclass carries class-level tables keyed by the exact DDB
display name. Lookups are exact and case-sensitive; a name with no entry
leaves the document untouched. Overrides run after the generic parsing,
so they always win over the text heuristics.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from ..effects import effect_from_hint
from ..models import (
    ActivityHint,
    ActivityType,
    AdditionalActivity,
    DocumentOverride,
    EffectHint,
)
from ..utils import get_property, merge_object, set_property
from .custom import CustomOverrides

logger = logging.getLogger("ddb-importer.enrichers")


class BaseEnricher:
    """Looks up and applies the overrides for one document name.

    Args:
        name: The original DDB name of the spell or feature.
        custom: Optional user tables, consulted before the built-in ones.
    """

    NAME_HINTS: dict[str, str] = {}
    ACTIVITY_HINTS: dict[str, ActivityHint] = {}
    ADDITIONAL_ACTIVITIES: dict[str, list[AdditionalActivity]] = {}
    DOCUMENT_OVERRIDES: dict[str, DocumentOverride] = {}
    EFFECT_HINTS: dict[str, EffectHint] = {}

    def __init__(self, name: str, custom: CustomOverrides | None = None):
        self.name = name
        self.custom = custom or CustomOverrides()

        self.activity: ActivityHint | None = self._lookup(self.custom.activity_hints, self.ACTIVITY_HINTS)
        self.document_override: DocumentOverride | None = self._lookup(
            self.custom.document_overrides, self.DOCUMENT_OVERRIDES
        )
        self.effect: EffectHint | None = self._lookup(self.custom.effect_hints, self.EFFECT_HINTS)

    def _lookup(self, custom_table: dict, builtin_table: dict) -> Any:
        if self.name in custom_table:
            return custom_table[self.name]
        return builtin_table.get(self.name)

    @property
    def activity_type(self) -> ActivityType | None:
        return self.activity.type if self.activity else None

    def name_hint(self) -> str | None:
        """Replacement display name, if any."""
        return self._lookup(self.custom.name_hints, self.NAME_HINTS)

    def additional_activities(self) -> list[AdditionalActivity]:
        return list(self._lookup(self.custom.additional_activities, self.ADDITIONAL_ACTIVITIES) or [])

    def apply_activity_override(self, activity: dict[str, Any]) -> dict[str, Any]:
        """Apply the activity hint to a built activity, in place."""
        hint = self.activity
        if hint is None:
            return activity

        if hint.name:
            activity["name"] = hint.name
        if hint.activation_type:
            activity["activation"]["type"] = hint.activation_type
            activity["activation"]["override"] = True
        if hint.target_type:
            activity["target"].setdefault("affects", {})["type"] = hint.target_type
            activity["target"]["override"] = True
        if hint.add_item_consume:
            targets = activity["consumption"]["targets"]
            if not any(t.get("type") == "itemUses" for t in targets):
                targets.append({
                    "type": "itemUses",
                    "target": "",
                    "value": "1",
                    "scaling": {"mode": "", "formula": ""},
                })
        if hint.roll:
            roll = activity.setdefault("roll", {"prompt": False, "visible": False, "formula": "", "name": ""})
            roll.update(copy.deepcopy(hint.roll))

        merge_object(activity, hint.data)
        logger.debug(f"Applied activity override for {self.name}")
        return activity

    def apply_document_override(self, document: dict[str, Any]) -> dict[str, Any]:
        """Replace dotted paths on the finished document, in place."""
        override = self.document_override
        if override is None:
            return document

        for path, value in override.data.items():
            set_property(document, path, copy.deepcopy(value))

        if override.remove_damage:
            system = document.get("system", {})
            for activity in (system.get("activities") or {}).values():
                if "damage" in activity:
                    activity["damage"]["parts"] = []
            if "damage" in system:
                system["damage"]["parts"] = []

        logger.debug(f"Applied document override for {self.name}")
        return document

    def effects(self, document: dict[str, Any]) -> list[dict[str, Any]]:
        """Active effects for this name, built against ``document``."""
        if self.effect is None:
            return []
        return [effect_from_hint(document, self.effect)]

    def apply_effects(self, document: dict[str, Any]) -> list[dict[str, Any]]:
        """Append the hinted effects to ``document`` and return them.

        Effects that are not transferred to the actor are applied through
        the activities instead, so each activity gets a reference to them
        unless it is flagged with ``flags.ddbimporter.noeffect``.
        """
        effects = self.effects(document)
        if not effects:
            return []

        document.setdefault("effects", []).extend(effects)
        activities = (document.get("system") or {}).get("activities") or {}
        for effect in effects:
            if effect["transfer"]:
                continue
            for activity in activities.values():
                if get_property(activity, "flags.ddbimporter.noeffect"):
                    continue
                activity.setdefault("effects", []).append({"_id": effect["_id"]})
        return effects
