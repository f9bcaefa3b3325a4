import numpy as np
from shapely.geometry import Polygon, LineString, Point
from shapely.geometry.base import BaseGeometry
from shapely import affinity
import shapely.ops
from typing import Iterable, List, Sequence, Tuple

from shapes.geometry import flatten_cubic
from .base import PathCommand
from .recording import PaintOp


def path_to_rings(
    path: Sequence[PathCommand],
    steps: int = 16
) -> List[Tuple[np.ndarray, bool]]:
    """
    Flattens a device-space path into polylines.
    Returns [(points (N, 2), closed), ...], one entry per subpath.
    """
    rings: List[Tuple[np.ndarray, bool]] = []
    current: List[np.ndarray] = []
    start = None

    for cmd in path:
        op = cmd[0]
        if op == "M":
            if current:
                rings.append((np.array(current, dtype=float), False))
            start = np.asarray(cmd[1], dtype=float)
            current = [start]
        elif op in ("L", "C"):
            # drawing after a close continues from the subpath start
            if not current:
                current = [start if start is not None else np.asarray(cmd[1], dtype=float)]
            if op == "L":
                current.append(np.asarray(cmd[1], dtype=float))
            else:
                current.extend(flatten_cubic(current[-1], cmd[1], cmd[2], cmd[3], steps=steps))
        elif op == "Z":
            if current:
                rings.append((np.array(current, dtype=float), True))
            current = []
        else:
            raise ValueError(f"unknown path command {op!r}")
    if current:
        rings.append((np.array(current, dtype=float), False))
    return rings


def ring_to_geometry(points: np.ndarray, closed: bool) -> BaseGeometry:
    if len(points) == 0:
        return Polygon()
    if len(points) == 1:
        return Point(points[0])
    if closed and len(points) >= 3:
        geom = Polygon(points)
        if not geom.is_valid:
            geom = geom.buffer(0)
        return geom
    return LineString(points)


def path_to_geometry(path: Sequence[PathCommand], steps: int = 16, close_all: bool = False) -> BaseGeometry:
    """
    Shapely geometry of a device-space path: closed subpaths become polygons,
    open ones line strings. close_all treats every subpath as closed, the way
    fill() does.
    """
    parts = [ring_to_geometry(pts, closed or close_all) for pts, closed in path_to_rings(path, steps=steps)]
    parts = [p for p in parts if not p.is_empty]
    if not parts:
        return Polygon()
    return shapely.ops.unary_union(parts)


def silhouette(
    operations: Iterable[PaintOp],
    kinds: Tuple[str, ...] = ("fill", "stroke"),
    steps: int = 16
) -> BaseGeometry:
    """
    Union of everything painted by the given recorded operations.
    """
    geoms = [
        path_to_geometry(op.path, steps=steps, close_all=(op.kind == "fill"))
        for op in operations
        if op.kind in kinds and op.path
    ]
    geoms = [g for g in geoms if not g.is_empty]
    if not geoms:
        return Polygon()
    return shapely.ops.unary_union(geoms)


def translated(geom: BaseGeometry, dx: float, dy: float) -> BaseGeometry:
    return affinity.translate(geom, xoff=dx, yoff=dy)


def same_shape(a: BaseGeometry, b: BaseGeometry, tolerance: float = 1e-6) -> bool:
    """
    True when the symmetric difference of two geometries is negligible.
    """
    if a.is_empty or b.is_empty:
        return a.is_empty and b.is_empty
    if a.geom_type != b.geom_type:
        return False
    if hasattr(a, "area") and a.area > 0:
        return a.symmetric_difference(b).area <= tolerance * max(a.area, 1.0)
    return a.hausdorff_distance(b) <= tolerance
