from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
import math
import numpy as np


Point = Tuple[float, float]


@dataclass(frozen=True, eq=False)
class Affine2D:
    """
    2D affine transform x -> A x + t
    """
    A: np.ndarray  # shape (2, 2)
    t: np.ndarray  # shape (2,)

    def __post_init__(self):
        if self.A.shape != (2, 2):
            raise ValueError("A must be 2x2")
        if self.t.shape != (2,):
            raise ValueError("t must be length-2")

    def apply(self, point_xy) -> np.ndarray:
        return self.A @ np.asarray(point_xy, dtype=float) + self.t

    def apply_many(self, points_xy) -> np.ndarray:
        pts = np.asarray(points_xy, dtype=float).reshape(-1, 2)
        return pts @ self.A.T + self.t

    def linear_scale(self) -> float:
        """
        Geometric mean of the axis scale factors, used to scale line widths.
        """
        return float(math.sqrt(abs(np.linalg.det(self.A))))

    # ---- Constructors and composition ----
    @staticmethod
    def identity() -> "Affine2D":
        return Affine2D(A=np.eye(2), t=np.zeros(2))

    @staticmethod
    def from_translate(dx: float, dy: float) -> "Affine2D":
        return Affine2D(A=np.eye(2), t=np.array([dx, dy], dtype=float))

    @staticmethod
    def from_scale(sx: float, sy: float | None = None) -> "Affine2D":
        if sy is None:
            sy = sx
        return Affine2D(A=np.array([[sx, 0.0], [0.0, sy]], dtype=float), t=np.zeros(2))

    @staticmethod
    def from_rotation(theta_radians: float) -> "Affine2D":
        c = math.cos(theta_radians)
        s = math.sin(theta_radians)
        return Affine2D(A=np.array([[c, -s], [s, c]], dtype=float), t=np.zeros(2))

    def then(self, after: "Affine2D") -> "Affine2D":
        """
        First apply self, then apply 'after'.
        y = after.apply(self.apply(x))
        """
        A_new = after.A @ self.A
        t_new = after.A @ self.t + after.t
        return Affine2D(A=A_new, t=t_new)

    def is_close(self, other: "Affine2D", atol: float = 1e-9) -> bool:
        return bool(np.allclose(self.A, other.A, atol=atol) and np.allclose(self.t, other.t, atol=atol))


# ---- Vertex generators ----

def _vertex_count(n: float) -> int:
    # fractional counts behave like a loop `for i < n`; NaN and inf draw nothing
    if not math.isfinite(n) or n <= 0:
        return 0
    return int(math.ceil(n))


def triangle_vertices(center_x: float, center_y: float, size: float) -> np.ndarray:
    """
    Equilateral triangle with side `size`, apex up, centered on its centroid.
    Order: top, bottom-left, bottom-right.
    """
    height = (math.sqrt(3) / 2) * size
    return np.array(
        [
            [center_x, center_y - (2.0 / 3.0) * height],
            [center_x - size / 2, center_y + (1.0 / 3.0) * height],
            [center_x + size / 2, center_y + (1.0 / 3.0) * height],
        ],
        dtype=float,
    )


def regular_polygon_vertices(
    center_x: float,
    center_y: float,
    radius: float,
    sides: float,
    rotation: float = 0.0,
) -> np.ndarray:
    """
    Vertices of a regular polygon inscribed in a circle of `radius`.
    Vertex i sits at angle rotation + i * 2π / sides. sides < 3 is not rejected.
    """
    count = _vertex_count(sides)
    if count == 0:
        return np.empty((0, 2), dtype=float)
    angles = rotation + np.arange(count) * (2.0 * math.pi / sides)
    xs = center_x + radius * np.cos(angles)
    ys = center_y + radius * np.sin(angles)
    return np.stack([xs, ys], axis=1)


def star_vertices(
    center_x: float,
    center_y: float,
    outer_radius: float,
    inner_radius: float,
    points: float,
    rotation: float = 0.0,
) -> np.ndarray:
    """
    2 * points vertices alternating between outer (even index) and inner
    (odd index) radius, at angle rotation + i * π / points.
    """
    count = _vertex_count(points * 2)
    if count == 0:
        return np.empty((0, 2), dtype=float)
    idx = np.arange(count)
    radii = np.where(idx % 2 == 0, outer_radius, inner_radius).astype(float)
    angles = rotation + idx * (math.pi / points)
    xs = center_x + radii * np.cos(angles)
    ys = center_y + radii * np.sin(angles)
    return np.stack([xs, ys], axis=1)


# Heart silhouette in a normalized 100x100 local frame centered on the origin.
HEART_SIZE = 100.0
HEART_START: Point = (0.0, 30.0)
HEART_CURVES: Tuple[Tuple[Point, Point, Point], ...] = (
    ((0.0, -10.0), (-50.0, -40.0), (-50.0, 5.0)),
    ((-50.0, 40.0), (-20.0, 50.0), (0.0, 80.0)),
    ((20.0, 50.0), (50.0, 40.0), (50.0, 5.0)),
    ((50.0, -40.0), (0.0, -10.0), (0.0, 30.0)),
)


def heart_transform(center_x: float, center_y: float, size: float, rotation: float = 0.0) -> Affine2D:
    """
    Local heart frame -> surface: scale by size/100, rotate, then translate to the center.
    """
    k = size / HEART_SIZE
    return (
        Affine2D.from_scale(k)
        .then(Affine2D.from_rotation(rotation))
        .then(Affine2D.from_translate(center_x, center_y))
    )


def heart_control_points(center_x: float, center_y: float, size: float, rotation: float = 0.0) -> np.ndarray:
    """
    Start point followed by the 12 control/end points of the four cubic
    segments, mapped to surface coordinates. Shape (13, 2).
    """
    local = [HEART_START] + [p for seg in HEART_CURVES for p in seg]
    return heart_transform(center_x, center_y, size, rotation).apply_many(local)


def flatten_cubic(p0, c1, c2, p3, steps: int = 16) -> np.ndarray:
    """
    Sample a cubic Bezier at `steps` evenly spaced parameters in (0, 1].
    The start point is not included.
    """
    t = np.linspace(0.0, 1.0, steps + 1)[1:].reshape(-1, 1)
    p0, c1, c2, p3 = (np.asarray(p, dtype=float) for p in (p0, c1, c2, p3))
    mt = 1.0 - t
    return (mt ** 3) * p0 + 3 * (mt ** 2) * t * c1 + 3 * mt * (t ** 2) * c2 + (t ** 3) * p3


def arc_to_cubics(
    center_x: float,
    center_y: float,
    radius: float,
    start_angle: float,
    end_angle: float,
    counterclockwise: bool = False,
) -> Tuple[Point, list]:
    """
    Approximate a circular arc by cubic Bezier segments of at most 90 degrees.

    Returns (start_point, segments) with each segment as (c1, c2, end).
    The sweep follows canvas rules: a full turn or more is clamped to 2π.
    """
    sweep = end_angle - start_angle
    full = 2.0 * math.pi
    if not counterclockwise:
        if sweep >= full:
            sweep = full
        elif sweep < 0:
            sweep = sweep % full
    else:
        if -sweep >= full:
            sweep = -full
        elif sweep > 0:
            sweep = -((-sweep) % full)

    start = (center_x + radius * math.cos(start_angle), center_y + radius * math.sin(start_angle))
    if sweep == 0.0:
        return start, []

    n = max(1, int(math.ceil(abs(sweep) / (math.pi / 2) - 1e-12)))
    step = sweep / n
    k = (4.0 / 3.0) * math.tan(step / 4.0)
    segments = []
    a0 = start_angle
    for _ in range(n):
        a1 = a0 + step
        cos0, sin0 = math.cos(a0), math.sin(a0)
        cos1, sin1 = math.cos(a1), math.sin(a1)
        c1 = (center_x + radius * (cos0 - k * sin0), center_y + radius * (sin0 + k * cos0))
        c2 = (center_x + radius * (cos1 + k * sin1), center_y + radius * (sin1 - k * cos1))
        end = (center_x + radius * cos1, center_y + radius * sin1)
        segments.append((c1, c2, end))
        a0 = a1
    return start, segments
