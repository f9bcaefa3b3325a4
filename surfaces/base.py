from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Protocol, Tuple, Union, runtime_checkable
import math
import numpy as np

from shapes.geometry import Affine2D, arc_to_cubics


# Device-space path commands:
#   ("M", p) move, ("L", p) line, ("C", c1, c2, p) cubic, ("Z",) close
PathCommand = Tuple[Any, ...]


class LinearGradient:
    """
    Linear gradient between (x0, y0) and (x1, y1) in the user space active
    when it is used for painting.
    """
    def __init__(self, x0: float, y0: float, x1: float, y1: float):
        self.x0 = float(x0)
        self.y0 = float(y0)
        self.x1 = float(x1)
        self.y1 = float(y1)
        self.stops: List[Tuple[float, str]] = []

    def add_color_stop(self, offset: float, color: str) -> None:
        offset = float(offset)
        if math.isnan(offset) or not 0.0 <= offset <= 1.0:
            raise ValueError(f"color stop offset must be within [0, 1], got {offset}")
        self.stops.append((offset, color))
        # stable: equal offsets keep insertion order
        self.stops.sort(key=lambda s: s[0])

    def offsets_at(self, points_xy: np.ndarray) -> np.ndarray:
        """
        Gradient parameter of each point, clamped to [0, 1].
        A zero-length gradient maps everything to 0.
        """
        pts = np.asarray(points_xy, dtype=float).reshape(-1, 2)
        d = np.array([self.x1 - self.x0, self.y1 - self.y0])
        denom = float(d @ d)
        if denom == 0.0:
            return np.zeros(pts.shape[0])
        t = (pts - np.array([self.x0, self.y0])) @ d / denom
        return np.clip(t, 0.0, 1.0)

    def __repr__(self) -> str:
        return f"LinearGradient(({self.x0}, {self.y0}) -> ({self.x1}, {self.y1}), stops={self.stops})"


Paint = Union[str, LinearGradient]


@dataclass(frozen=True)
class TextMetrics:
    width: float


@dataclass(eq=False)
class PaintState:
    """
    Paint-state registers of a surface. save() pushes a copy, restore() pops it.
    """
    stroke_style: Paint = "#000000"
    fill_style: Paint = "#000000"
    line_width: float = 1.0
    shadow_color: str = "rgba(0,0,0,0)"
    shadow_blur: float = 0.0
    shadow_offset_x: float = 0.0
    shadow_offset_y: float = 0.0
    font: str = "10px sans-serif"
    text_align: str = "start"
    text_baseline: str = "alphabetic"
    transform: Affine2D = field(default_factory=Affine2D.identity)

    REGISTERS = (
        "stroke_style",
        "fill_style",
        "line_width",
        "shadow_color",
        "shadow_blur",
        "shadow_offset_x",
        "shadow_offset_y",
        "font",
        "text_align",
        "text_baseline",
    )

    def copy(self) -> "PaintState":
        return replace(self)

    def registers(self) -> dict:
        return {name: getattr(self, name) for name in self.REGISTERS}

    def same_as(self, other: "PaintState") -> bool:
        # gradients compare by identity, like canvas fillStyle objects
        for name in self.REGISTERS:
            a, b = getattr(self, name), getattr(other, name)
            if a is not b and a != b:
                return False
        return bool(
            np.array_equal(self.transform.A, other.transform.A)
            and np.array_equal(self.transform.t, other.transform.t)
        )


@runtime_checkable
class Surface(Protocol):
    """
    Immediate-mode 2D drawing target the shape renderer draws onto.
    """
    width: float
    height: float

    stroke_style: Paint
    fill_style: Paint
    line_width: float
    shadow_color: str
    shadow_blur: float
    shadow_offset_x: float
    shadow_offset_y: float
    font: str
    text_align: str
    text_baseline: str

    def begin_path(self) -> None: ...
    def move_to(self, x: float, y: float) -> None: ...
    def line_to(self, x: float, y: float) -> None: ...
    def bezier_curve_to(self, c1x: float, c1y: float, c2x: float, c2y: float, x: float, y: float) -> None: ...
    def close_path(self) -> None: ...
    def arc(self, x: float, y: float, radius: float, start_angle: float, end_angle: float,
            counterclockwise: bool = False) -> None: ...
    def stroke(self) -> None: ...
    def fill(self) -> None: ...
    def fill_text(self, text: str, x: float, y: float) -> None: ...
    def stroke_text(self, text: str, x: float, y: float) -> None: ...
    def measure_text(self, text: str) -> TextMetrics: ...
    def create_linear_gradient(self, x0: float, y0: float, x1: float, y1: float) -> LinearGradient: ...
    def save(self) -> None: ...
    def restore(self) -> None: ...
    def translate(self, dx: float, dy: float) -> None: ...
    def rotate(self, angle: float) -> None: ...
    def scale(self, sx: float, sy: float) -> None: ...
    def clear_rect(self, x: float, y: float, w: float, h: float) -> None: ...


def _positive(value: Any) -> bool:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(v) and v > 0.0


def _non_negative(value: Any) -> bool:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(v) and v >= 0.0


def _finite(value: Any) -> bool:
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


class _Register:
    """
    Attribute backed by the surface's PaintState. Values rejected by `accept`
    are ignored, the way a canvas ignores an invalid lineWidth.
    """
    def __init__(self, accept=None):
        self.accept = accept

    def __set_name__(self, owner, name: str) -> None:
        self.name = name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return getattr(obj.state, self.name)

    def __set__(self, obj, value) -> None:
        obj._log_call(f"set_{self.name}", (value,))
        if self.accept is not None and not self.accept(value):
            return
        setattr(obj.state, self.name, value)


class BaseSurface:
    """
    Shared register, transform and path bookkeeping for concrete surfaces.

    Path points are mapped through the current transform when they are added,
    so later transform changes do not move an open path. Subclasses implement
    the painting hooks (_stroke_path, _fill_path, _draw_text, _measure_text,
    _clear_rect).
    """
    stroke_style = _Register()
    fill_style = _Register()
    line_width = _Register(_positive)
    shadow_color = _Register()
    shadow_blur = _Register(_non_negative)
    shadow_offset_x = _Register(_finite)
    shadow_offset_y = _Register(_finite)
    font = _Register()
    text_align = _Register()
    text_baseline = _Register()

    def __init__(self, width: float, height: float):
        self.width = width
        self.height = height
        self.state = PaintState()
        self._stack: List[PaintState] = []
        self._path: List[PathCommand] = []
        self._current: Optional[Tuple[float, float]] = None
        self._subpath_start: Optional[Tuple[float, float]] = None

    # ---- instrumentation hook ----
    def _log_call(self, name: str, args: tuple = ()) -> None:
        pass

    # ---- state ----
    @property
    def save_depth(self) -> int:
        return len(self._stack)

    @property
    def transform(self) -> Affine2D:
        return self.state.transform

    @property
    def path(self) -> Tuple[PathCommand, ...]:
        return tuple(self._path)

    def save(self) -> None:
        self._log_call("save")
        self._stack.append(self.state.copy())

    def restore(self) -> None:
        self._log_call("restore")
        if self._stack:
            self.state = self._stack.pop()

    def translate(self, dx: float, dy: float) -> None:
        self._log_call("translate", (dx, dy))
        self.state.transform = Affine2D.from_translate(dx, dy).then(self.state.transform)

    def rotate(self, angle: float) -> None:
        self._log_call("rotate", (angle,))
        self.state.transform = Affine2D.from_rotation(angle).then(self.state.transform)

    def scale(self, sx: float, sy: float) -> None:
        self._log_call("scale", (sx, sy))
        self.state.transform = Affine2D.from_scale(sx, sy).then(self.state.transform)

    def reset_transform(self) -> None:
        self._log_call("reset_transform")
        self.state.transform = Affine2D.identity()

    # ---- path construction ----
    def _map(self, x: float, y: float) -> Tuple[float, float]:
        p = self.state.transform.apply((x, y))
        return float(p[0]), float(p[1])

    def _move(self, x: float, y: float) -> None:
        p = self._map(x, y)
        self._path.append(("M", p))
        self._current = p
        self._subpath_start = p

    def _line(self, x: float, y: float) -> None:
        if self._current is None:
            self._move(x, y)
            return
        p = self._map(x, y)
        self._path.append(("L", p))
        self._current = p

    def _curve(self, c1x, c1y, c2x, c2y, x, y) -> None:
        if self._current is None:
            self._move(c1x, c1y)
        p = self._map(x, y)
        self._path.append(("C", self._map(c1x, c1y), self._map(c2x, c2y), p))
        self._current = p

    def begin_path(self) -> None:
        self._log_call("begin_path")
        self._path = []
        self._current = None
        self._subpath_start = None

    def move_to(self, x: float, y: float) -> None:
        self._log_call("move_to", (x, y))
        self._move(x, y)

    def line_to(self, x: float, y: float) -> None:
        self._log_call("line_to", (x, y))
        self._line(x, y)

    def bezier_curve_to(self, c1x: float, c1y: float, c2x: float, c2y: float, x: float, y: float) -> None:
        self._log_call("bezier_curve_to", (c1x, c1y, c2x, c2y, x, y))
        self._curve(c1x, c1y, c2x, c2y, x, y)

    def close_path(self) -> None:
        self._log_call("close_path")
        if self._current is None:
            return
        self._path.append(("Z",))
        self._current = self._subpath_start

    def arc(self, x: float, y: float, radius: float, start_angle: float, end_angle: float,
            counterclockwise: bool = False) -> None:
        self._log_call("arc", (x, y, radius, start_angle, end_angle, counterclockwise))
        start, segments = arc_to_cubics(x, y, radius, start_angle, end_angle, counterclockwise)
        # connects to the current point like canvas arc()
        self._line(*start)
        for c1, c2, end in segments:
            self._curve(c1[0], c1[1], c2[0], c2[1], end[0], end[1])

    # ---- painting ----
    def stroke(self) -> None:
        self._log_call("stroke")
        self._stroke_path(list(self._path), self.state.copy())

    def fill(self) -> None:
        self._log_call("fill")
        self._fill_path(list(self._path), self.state.copy())

    def fill_text(self, text: str, x: float, y: float) -> None:
        self._log_call("fill_text", (text, x, y))
        self._draw_text(str(text), float(x), float(y), self.state.copy(), "fill")

    def stroke_text(self, text: str, x: float, y: float) -> None:
        self._log_call("stroke_text", (text, x, y))
        self._draw_text(str(text), float(x), float(y), self.state.copy(), "stroke")

    def measure_text(self, text: str) -> TextMetrics:
        self._log_call("measure_text", (text,))
        return TextMetrics(width=float(self._measure_text(str(text), self.state.copy())))

    def create_linear_gradient(self, x0: float, y0: float, x1: float, y1: float) -> LinearGradient:
        self._log_call("create_linear_gradient", (x0, y0, x1, y1))
        for v in (x0, y0, x1, y1):
            if not _finite(v):
                raise ValueError(f"gradient coordinates must be finite, got {(x0, y0, x1, y1)}")
        return LinearGradient(x0, y0, x1, y1)

    def clear_rect(self, x: float, y: float, w: float, h: float) -> None:
        self._log_call("clear_rect", (x, y, w, h))
        self._clear_rect(x, y, w, h)

    # ---- backend hooks ----
    def _stroke_path(self, path: List[PathCommand], state: PaintState) -> None:
        raise NotImplementedError

    def _fill_path(self, path: List[PathCommand], state: PaintState) -> None:
        raise NotImplementedError

    def _draw_text(self, text: str, x: float, y: float, state: PaintState, mode: str) -> None:
        raise NotImplementedError

    def _measure_text(self, text: str, state: PaintState) -> float:
        raise NotImplementedError

    def _clear_rect(self, x: float, y: float, w: float, h: float) -> None:
        raise NotImplementedError
