"""
Parsing helpers shared by spells and features.
"""

from __future__ import annotations

import logging
from typing import Any

from .schema import (
    ABILITY_IDS,
    ACTIVATION_TYPES,
    OPERATOR_MULTIPLY,
    RESET_TYPES,
    SOURCE_BOOKS,
)

logger = logging.getLogger("ddb-importer")


def parse_source(definition: dict) -> dict[str, Any]:
    """Book and page for a DDB definition, from its first listed source."""
    sources = definition.get("sources") or []
    if not sources:
        return {"custom": "", "book": "", "page": "", "license": ""}

    primary = sources[0]
    source_id = primary.get("sourceId")
    page = primary.get("pageNumber")
    return {
        "custom": "",
        "book": SOURCE_BOOKS.get(source_id, str(source_id) if source_id is not None else ""),
        "page": str(page) if page else "",
        "license": "",
    }


def parse_activation(activation: dict | None, condition: str = "") -> dict[str, Any]:
    """Foundry activation block; anything unknown becomes one action."""
    activation = activation or {}
    activation_type = ACTIVATION_TYPES.get(activation.get("activationType"))
    if activation_type and activation.get("activationTime"):
        return {
            "type": activation_type,
            "value": activation["activationTime"],
            "condition": condition,
        }
    return {"type": "action", "value": 1, "condition": condition}


def parse_uses(limited_use: dict | None, name: str = "") -> dict[str, Any]:
    """Foundry uses block from a DDB ``limitedUse`` record.

    Ability modifier and proficiency bonus components are added to (or
    multiplied into) the max uses formula depending on the DDB operator.
    An unknown reset type logs a warning and leaves uses empty.
    """
    uses: dict[str, Any] = {"spent": None, "max": None, "recovery": []}
    if not limited_use:
        return uses

    reset_type = RESET_TYPES.get(limited_use.get("resetType"))
    if reset_type is None:
        logger.warning(f"Unknown reset type {limited_use.get('resetType')!r} for {name}")
        return uses

    max_uses_raw = limited_use.get("maxUses")
    stat_id = limited_use.get("statModifierUsesId")
    use_prof = limited_use.get("useProficiencyBonus")
    if not (max_uses_raw or stat_id or use_prof):
        return uses

    max_uses = str(max_uses_raw) if max_uses_raw and max_uses_raw != -1 else ""

    if stat_id:
        ability = ABILITY_IDS.get(stat_id)
        if ability:
            if limited_use.get("operator") == OPERATOR_MULTIPLY:
                max_uses = f"{max_uses} * @abilities.{ability}.mod"
            else:
                max_uses = f"{max_uses} + @abilities.{ability}.mod"

    if use_prof:
        if limited_use.get("proficiencyBonusOperator") == OPERATOR_MULTIPLY:
            max_uses = f"{max_uses} * @prof"
        else:
            max_uses = f"{max_uses} + @prof"

    max_uses = max_uses.strip()
    # a leading operator means there was no fixed base
    if max_uses.startswith(("+ ", "* ")):
        max_uses = max_uses[2:]

    return {
        "spent": limited_use.get("numberUsed"),
        "max": max_uses or None,
        "recovery": [{"period": reset_type, "type": "recoverAll"}],
    }
