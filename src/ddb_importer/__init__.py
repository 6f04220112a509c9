"""
DDB Importer - D&D Beyond to Foundry VTT dnd5e document conversion.
"""

from .base import DDBImportError, ImportReport, MunchResult
from .character import munch_character
from .config import ImporterSettings, load_settings
from .encounters import EncounterMuncher, summarize_encounter
from .features import DDBFeature, parse_feature
from .models import ActivityType, RangeSpec, SpellDescriptor, TargetSpec
from .spells import DDBSpell, classify_activity, infer_target, parse_spell

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("ddb-importer")
except Exception:
    __version__ = "0.1.0"  # Fallback if metadata unavailable
__all__ = [
    "ActivityType",
    "DDBFeature",
    "DDBImportError",
    "DDBSpell",
    "EncounterMuncher",
    "ImportReport",
    "ImporterSettings",
    "MunchResult",
    "RangeSpec",
    "SpellDescriptor",
    "TargetSpec",
    "classify_activity",
    "infer_target",
    "load_settings",
    "munch_character",
    "parse_feature",
    "parse_spell",
    "summarize_encounter",
]
