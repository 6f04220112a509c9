"""
Munch a D&D Beyond character: collect its spells and features and parse
each one into a Foundry document.

Each entry is parsed on its own; an entry that fails adds a warning to the
result and the rest of the character still imports.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from .base import MunchResult
from .config import ImporterSettings
from .enrichers.custom import CustomOverrides, load_custom_overrides
from .features.parser import DDBFeature
from .schema import CLASS_SPELLCASTING_ABILITY, SPELL_GRANT_SECTIONS
from .spells.parser import DDBSpell
from .utils import get_property, set_property

logger = logging.getLogger("ddb-importer")


def _tag_spell(
    spell: dict,
    lookup: str,
    klass: str | None = None,
    ability: str | None = None,
    lookup_name: str = "",
) -> dict:
    tagged = copy.deepcopy(spell)
    dndbeyond = get_property(tagged, "flags.ddbimporter.dndbeyond") or {}
    dndbeyond.update({
        "lookup": lookup,
        "lookupName": lookup_name or dndbeyond.get("lookupName", ""),
        "class": klass or dndbeyond.get("class"),
        "ability": ability or dndbeyond.get("ability"),
    })
    set_property(tagged, "flags.ddbimporter.dndbeyond", dndbeyond)
    set_property(tagged, "flags.ddbimporter.generic", False)
    return tagged


def extract_spell_entries(ddb: dict) -> list[dict]:
    """Collect every spell a character knows, tagged with where it came from.

    Class spell lists are tagged ``classSpell`` with the class name and its
    casting ability. Spells granted by race, class features, feats and items
    are tagged ``race``, ``classFeature``, ``feat`` and ``item``.

    Args:
        ddb: Raw D&D Beyond character JSON.

    Returns:
        List of DDB spell entries with ``flags.ddbimporter.dndbeyond`` set.
    """
    classes_by_id = {klass.get("id"): klass for klass in ddb.get("classes") or []}
    entries: list[dict] = []

    for class_spells in ddb.get("classSpells") or []:
        klass = classes_by_id.get(class_spells.get("characterClassId")) or {}
        class_name = get_property(klass, "definition.name")
        ability = CLASS_SPELLCASTING_ABILITY.get(class_name or "")
        for spell in class_spells.get("spells") or []:
            entries.append(_tag_spell(spell, "classSpell", klass=class_name, ability=ability))

    granted = ddb.get("spells") or {}
    for section, lookup in SPELL_GRANT_SECTIONS.items():
        for spell in granted.get(section) or []:
            lookup_name = get_property(spell, "flags.ddbimporter.dndbeyond.lookupName") or ""
            entries.append(_tag_spell(spell, lookup, lookup_name=lookup_name))

    return entries


def _actions_by_name(ddb: dict, section: str) -> dict[str, dict]:
    actions = get_property(ddb, f"actions.{section}") or []
    return {action["name"]: action for action in actions if action.get("name")}


def _with_action(feature: dict, action: dict | None) -> dict:
    if not action:
        return feature
    merged = dict(feature)
    for key in ("activation", "limitedUse"):
        if action.get(key):
            merged[key] = action[key]
    return merged


def extract_feature_entries(ddb: dict) -> list[tuple[dict, str, str]]:
    """Collect class features (up to the class level), racial traits and feats.

    Matching action records (same name) contribute their activation and
    limited uses. Actions with no matching feature become features of their
    own. Duplicate names keep the first occurrence.

    Returns:
        List of (feature_data, feature_type, subtype) tuples.
    """
    entries: list[tuple[dict, str, str]] = []
    seen: set[str] = set()

    def add(feature: dict, feature_type: str, subtype: str, actions: dict[str, dict]) -> None:
        name = get_property(feature, "definition.name") or feature.get("name")
        if not name or name in seen:
            return
        seen.add(name)
        entries.append((_with_action(feature, actions.pop(name, None)), feature_type, subtype))

    class_actions = _actions_by_name(ddb, "class")
    for klass in ddb.get("classes") or []:
        level = klass.get("level") or 1
        class_name = get_property(klass, "definition.name") or ""
        for feature in klass.get("classFeatures") or []:
            required = get_property(feature, "definition.requiredLevel") or 0
            if required <= level:
                add(feature, "class", class_name, class_actions)

    race_actions = _actions_by_name(ddb, "race")
    race_name = get_property(ddb, "race.fullName") or ""
    for trait in get_property(ddb, "race.racialTraits") or []:
        add(trait, "race", race_name, race_actions)

    feat_actions = _actions_by_name(ddb, "feat")
    for feat in ddb.get("feats") or []:
        add(feat, "feat", "", feat_actions)

    # leftover actions have no feature of their own
    for actions, feature_type in ((class_actions, "class"), (race_actions, "race"), (feat_actions, "feat")):
        for action in list(actions.values()):
            add(action, feature_type, "", {})

    return entries


def munch_character(
    ddb: dict,
    settings: ImporterSettings | None = None,
    custom: CustomOverrides | None = None,
) -> MunchResult:
    """Parse a character's spells and features into Foundry documents.

    Args:
        ddb: Raw D&D Beyond character JSON.
        settings: Importer settings; the custom overrides file named there is
            loaded when ``custom`` is not given.
        custom: User override tables.

    Returns:
        MunchResult with documents, skipped entries and warnings.
    """
    settings = settings or ImporterSettings()
    if custom is None and settings.custom_overrides_file:
        custom = load_custom_overrides(settings.custom_overrides_file)

    result = MunchResult(
        character_name=ddb.get("name") or "Unknown Character",
        source_id=ddb.get("id"),
    )
    used_ids: dict[str, int] = {}

    def unique(document: dict[str, Any]) -> dict[str, Any]:
        doc_id = document["_id"]
        count = used_ids.get(doc_id, 0)
        used_ids[doc_id] = count + 1
        if count:
            document["_id"] = f"{doc_id[:-len(str(count))]}{count}"
        return document

    for spell in extract_spell_entries(ddb):
        name = get_property(spell, "definition.name") or "Unknown Spell"
        try:
            document = DDBSpell(spell, settings=settings, is_generic=False, custom=custom).parse()
        except Exception as e:
            logger.warning(f"Failed to parse spell {name}: {e}")
            result.warnings.append(f"Failed to parse spell {name}: {e}")
            result.skipped[name] = str(e)
            continue
        result.documents.append(unique(document))

    for feature, feature_type, subtype in extract_feature_entries(ddb):
        name = get_property(feature, "definition.name") or feature.get("name") or "Unknown Feature"
        try:
            document = DDBFeature(feature, feature_type=feature_type, subtype=subtype, custom=custom).parse()
        except Exception as e:
            logger.warning(f"Failed to parse feature {name}: {e}")
            result.warnings.append(f"Failed to parse feature {name}: {e}")
            result.skipped[name] = str(e)
            continue
        result.documents.append(unique(document))

    logger.info(
        f"Munched {result.character_name}: {len(result.spells)} spells, "
        f"{len(result.features)} features, {len(result.skipped)} skipped"
    )
    return result
