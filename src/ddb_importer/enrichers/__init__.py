"""
Named override tables for spells and features.
"""

from .base import BaseEnricher
from .custom import CustomOverrides, load_custom_overrides
from .features import FeatureEnricher
from .spells import SpellEnricher

__all__ = [
    "BaseEnricher",
    "CustomOverrides",
    "FeatureEnricher",
    "SpellEnricher",
    "load_custom_overrides",
]
