"""autoarrange — automatic arrangement of 2-D parts on a build bed.

Stages:

  bedshape  classify the raw bed outline (box, circle, irregular)
  arranger  convert items, preload fixed ones, pack, write results back
"""

from autoarrange.config import RULES, ArrangeRules, ArrangeError, load_rules
from autoarrange.arranger import (
    arrange, bed_shape, ArrangeablePolygon, BedShapeHint, BedShapeType,
)

__all__ = [
    "arrange", "bed_shape", "ArrangeablePolygon", "BedShapeHint", "BedShapeType",
    "RULES", "ArrangeRules", "ArrangeError", "load_rules",
]
