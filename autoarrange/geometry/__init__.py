from .polygon import (
    SCALING_FACTOR,
    SCALED_EPSILON,
    scaled,
    unscaled,
    scale_points,
    polygon_area,
    ensure_cw,
    close_ring,
    distance,
    convex_hull,
    perimeter,
)
from .box import BoundingBox, union_all
