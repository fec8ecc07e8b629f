"""Utility mapper: theme scales and the property/value conversion tables."""

from tailshift.mapper.theme import Theme
from tailshift.mapper.utilities import SPACING_TOLERANCE, MappedUtility, MapResult, UtilityMapper

__all__ = ["Theme", "SPACING_TOLERANCE", "MappedUtility", "MapResult", "UtilityMapper"]
