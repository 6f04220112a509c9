"""
Spell parsing: target/range inference, activity classification, document assembly.
"""

from .classification import classify_activity, resolve_activity_type
from .parser import DDBSpell, parse_spell
from .targeting import generate_range, get_target_value, infer_target, targets_creature

__all__ = [
    "DDBSpell",
    "classify_activity",
    "generate_range",
    "get_target_value",
    "infer_target",
    "parse_spell",
    "resolve_activity_type",
    "targets_creature",
]
