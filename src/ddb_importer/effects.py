"""
Active effect documents built from effect hints.
"""

from __future__ import annotations

import copy
from typing import Any

from .models import EffectHint
from .utils import random_id, set_property


def base_effect(document: dict, name: str | None = None, transfer: bool = True) -> dict[str, Any]:
    """Empty active effect owned by ``document``."""
    return {
        "_id": random_id(),
        "name": name or document.get("name", ""),
        "img": document.get("img"),
        "origin": None,
        "transfer": transfer,
        "disabled": False,
        "changes": [],
        "duration": {
            "seconds": None,
            "rounds": None,
            "turns": None,
            "startTime": None,
            "startRound": None,
            "startTurn": None,
        },
        "description": "",
        "statuses": [],
        "flags": {},
    }


def effect_from_hint(document: dict, hint: EffectHint) -> dict[str, Any]:
    """Build an active effect for ``document`` from an effect hint.

    Changes are copied in order; the hint's ``data`` entries are dotted
    paths set on the effect afterwards (e.g. ``duration.rounds``).
    Enchant hints produce an enchantment that never transfers.
    """
    enchant = hint.type == "enchant"
    effect = base_effect(document, name=hint.name, transfer=hint.transfer and not enchant)
    effect["changes"] = [
        {
            "key": change.key,
            "value": change.value,
            "mode": int(change.mode),
            "priority": change.priority,
        }
        for change in hint.changes
    ]
    for path, value in hint.data.items():
        set_property(effect, path, copy.deepcopy(value))
    if enchant:
        set_property(effect, "flags.dnd5e.type", "enchantment")
    return effect
