"""Arrangement jobs — JSON conversion.

Job format (all lengths in mm, rotations in radians):

    {
      "bed": {"outline": [[0, 0], [250, 0], [250, 210], [0, 210]]},
      "min_distance": 6,
      "items": [{"id": "a", "points": [[0, 0], [20, 0], [20, 20], [0, 20]],
                 "offset": [0, 0], "rotation": 0}],
      "fixed": []
    }

``bed`` may instead be ``{"type": "infinite", "center": [x, y]}`` or be
left out entirely (unbounded bed around the origin).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from autoarrange.config import ArrangeError
from autoarrange.geometry import scaled, unscaled

from .bedshape import bed_shape
from .models import ArrangeablePolygon, BedShapeHint, BedShapeType


@dataclass
class ArrangeJob:
    items: list[ArrangeablePolygon]
    fixed: list[ArrangeablePolygon] = field(default_factory=list)
    min_distance: float = 0.0
    bed_hint: BedShapeHint | None = None


def _parse_point(raw, what: str) -> tuple[float, float]:
    try:
        x, y = raw
        return (float(x), float(y))
    except (TypeError, ValueError) as exc:
        raise ArrangeError(f"{what}: expected [x, y], got {raw!r}") from exc


def _parse_item(data: dict, index: int, kind: str) -> ArrangeablePolygon:
    if not isinstance(data, dict):
        raise ArrangeError(f"{kind}[{index}] must be an object")
    item_id = str(data.get("id", f"{kind}-{index}"))
    raw_points = data.get("points")
    if not isinstance(raw_points, list) or len(raw_points) < 3:
        raise ArrangeError(f"Item '{item_id}' needs at least 3 points")
    points = [_parse_point(p, f"Item '{item_id}' point") for p in raw_points]
    offset = _parse_point(data.get("offset", (0.0, 0.0)), f"Item '{item_id}' offset")
    try:
        rotation = float(data.get("rotation", 0.0))
    except (TypeError, ValueError) as exc:
        raise ArrangeError(f"Item '{item_id}': bad rotation") from exc
    return ArrangeablePolygon(id=item_id, points=points, offset=offset, rotation=rotation)


def parse_bed(data: dict | None) -> BedShapeHint | None:
    """Parse the ``bed`` object of a job into a bed hint."""
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ArrangeError("bed must be an object")
    if data.get("type") == "infinite":
        cx, cy = _parse_point(data.get("center", (0.0, 0.0)), "bed center")
        return BedShapeHint(BedShapeType.INFINITE, center=(scaled(cx), scaled(cy)))
    outline = data.get("outline")
    if not isinstance(outline, list) or len(outline) < 3:
        raise ArrangeError("bed outline needs at least 3 points")
    return bed_shape([_parse_point(p, "bed outline point") for p in outline])


def parse_job(data: dict) -> ArrangeJob:
    """Parse a raw dict (from JSON) into an ArrangeJob."""
    if not isinstance(data, dict):
        raise ArrangeError("Job must be a JSON object")
    raw = {}
    for kind in ("items", "fixed"):
        raw[kind] = data.get(kind, [])
        if not isinstance(raw[kind], list):
            raise ArrangeError(f"{kind} must be a list of objects")
    items = [_parse_item(d, i, "items") for i, d in enumerate(raw["items"])]
    fixed = [_parse_item(d, i, "fixed") for i, d in enumerate(raw["fixed"])]
    try:
        min_distance = float(data.get("min_distance", 0.0))
    except (TypeError, ValueError) as exc:
        raise ArrangeError("min_distance must be a number") from exc
    if min_distance < 0:
        raise ArrangeError("min_distance must not be negative")
    return ArrangeJob(
        items=items,
        fixed=fixed,
        min_distance=min_distance,
        bed_hint=parse_bed(data.get("bed")),
    )


def bed_hint_to_dict(hint: BedShapeHint | None) -> dict:
    """Serialize a bed hint (mm) to a JSON-safe dict."""
    if hint is None:
        return {"type": BedShapeType.INFINITE.value, "center": [0.0, 0.0]}
    out: dict = {"type": hint.type.value}
    if hint.type is BedShapeType.BOX:
        b = hint.box
        out["min"] = [unscaled(b.minx), unscaled(b.miny)]
        out["max"] = [unscaled(b.maxx), unscaled(b.maxy)]
    elif hint.type is BedShapeType.CIRCLE:
        c = hint.circle
        out["center"] = [unscaled(c.center[0]), unscaled(c.center[1])]
        out["radius"] = unscaled(c.radius)
    elif hint.type is BedShapeType.IRREGULAR:
        out["outline"] = [[unscaled(x), unscaled(y)] for x, y in hint.polygon]
    else:
        cx, cy = hint.center or (0, 0)
        out["center"] = [unscaled(cx), unscaled(cy)]
    return out


def job_to_dict(job: ArrangeJob, success: bool) -> dict:
    """Serialize the arrangement result of a job."""
    return {
        "success": success,
        "bed": bed_hint_to_dict(job.bed_hint),
        "items": [
            {
                "id": it.id,
                "offset": [round(it.offset[0], 6), round(it.offset[1], 6)],
                "rotation": it.rotation,
                "arranged": it.applied,
            }
            for it in job.items
        ],
    }
