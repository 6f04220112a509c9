from .parser import DDBFeature, parse_feature

__all__ = ["DDBFeature", "parse_feature"]
