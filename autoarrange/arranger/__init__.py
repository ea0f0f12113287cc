"""Arranger — packs polygonal items onto one or more beds.

Submodules:
  models        Placement items, beds, bed hints, scores, scoring weights.
  bedshape      Bed outline classification (box / circle / irregular).
  spatial       Read-only spatial indexes and the per-item packing snapshot.
  objective     Candidate scoring (pile distance, density, alignment).
  adapters      Bed-specific penalties wrapped around the objective.
  solver        First-fit candidate search (feasibility + scoring).
  arranger      AutoArranger: solver wiring, fixed-item preload, collisions.
  engine        arrange() entry point and bed striding.
  serialization JSON conversion (parse_job, job_to_dict).
"""

from .models import (
    PlacementItem, PackGroup, Score,
    BoxBed, CircleBed, IrregularBed, InfiniteBed,
    BedShapeHint, BedShapeType,
    Arrangeable, ArrangeablePolygon,
)
from .bedshape import bed_shape
from .spatial import SpatialIndex, PackingSnapshot, take_snapshot
from .objective import ScoreCase, classify, objective
from .adapters import compute_adapter, fixed_overfit
from .solver import Alignment, PlacementConfig, PlacementSolver, overfit
from .arranger import AutoArranger
from .engine import arrange, stride_padding, bed_from_hint
from .serialization import ArrangeJob, parse_job, job_to_dict, bed_hint_to_dict

__all__ = [
    # Models
    "PlacementItem", "PackGroup", "Score",
    "BoxBed", "CircleBed", "IrregularBed", "InfiniteBed",
    "BedShapeHint", "BedShapeType",
    "Arrangeable", "ArrangeablePolygon",
    # Scoring
    "bed_shape", "SpatialIndex", "PackingSnapshot", "take_snapshot",
    "ScoreCase", "classify", "objective", "compute_adapter", "fixed_overfit",
    # Solver / engine
    "Alignment", "PlacementConfig", "PlacementSolver", "overfit",
    "AutoArranger", "arrange", "stride_padding", "bed_from_hint",
    # Serialization
    "ArrangeJob", "parse_job", "job_to_dict", "bed_hint_to_dict",
]
