from __future__ import annotations

from typing import List, Optional, Tuple
import io
import math
import re
import numpy as np
from matplotlib import colors as mcolors
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.font_manager import FontProperties
from matplotlib.patches import PathPatch
from matplotlib.path import Path as MplPath
from matplotlib.textpath import TextPath, text_to_path
import matplotlib.patheffects as path_effects
from PIL import Image

from shapes.style import FontSpec, parse_font
from .base import BaseSurface, LinearGradient, Paint, PaintState, PathCommand


RGBA = Tuple[float, float, float, float]

_CSS_FUNC_RE = re.compile(r"^\s*rgba?\(\s*(.*?)\s*\)\s*$", re.IGNORECASE)

# Em-box fractions used to place text baselines other than alphabetic.
_ASCENT = 0.8
_DESCENT = 0.2


def _css_channel(token: str) -> float:
    if token.endswith("%"):
        return float(token[:-1]) / 100.0
    return float(token) / 255.0


def _css_alpha(token: str) -> float:
    if token.endswith("%"):
        return float(token[:-1]) / 100.0
    return float(token)


def to_rgba(color: str) -> RGBA:
    """
    CSS color string -> RGBA floats in [0, 1].
    Understands rgb()/rgba() and 'transparent' on top of matplotlib's names and hex forms.
    """
    if isinstance(color, str):
        m = _CSS_FUNC_RE.match(color)
        if m:
            parts = [p for p in re.split(r"[\s,/]+", m.group(1)) if p]
            if len(parts) not in (3, 4):
                raise ValueError(f"unrecognized color {color!r}")
            try:
                r, g, b = (_css_channel(p) for p in parts[:3])
                a = _css_alpha(parts[3]) if len(parts) == 4 else 1.0
            except ValueError as e:
                raise ValueError(f"unrecognized color {color!r}") from e
            return tuple(float(np.clip(v, 0.0, 1.0)) for v in (r, g, b, a))
        if color.strip().lower() == "transparent":
            return (0.0, 0.0, 0.0, 0.0)
    try:
        return mcolors.to_rgba(color)
    except ValueError as e:
        raise ValueError(f"unrecognized color {color!r}") from e


def gradient_colors(gradient: LinearGradient, offsets: np.ndarray) -> np.ndarray:
    """
    Interpolate gradient stop colors at `offsets`; returns shape offsets.shape + (4,).
    """
    xp = np.array([s[0] for s in gradient.stops], dtype=float)
    fp = np.array([to_rgba(s[1]) for s in gradient.stops], dtype=float)
    out = np.empty(offsets.shape + (4,), dtype=float)
    for ch in range(4):
        out[..., ch] = np.interp(offsets, xp, fp[:, ch])
    return out


def _font_properties(spec: FontSpec) -> FontProperties:
    weight = spec.weight if spec.weight != "bolder" else "bold"
    weight = weight if weight != "lighter" else "light"
    return FontProperties(family=list(spec.family), weight=weight, style=spec.style, size=spec.size_px)


class MatplotlibSurface(BaseSurface):
    """
    Raster surface drawn with matplotlib's Agg canvas.

    One data unit is one pixel and y grows downwards. Every paint call adds
    an artist with an increasing zorder so the painter's order is kept.
    Shadows use matplotlib path effects: offset and color are honored,
    blur is not rendered.
    """
    def __init__(
        self,
        width: int = 300,
        height: int = 150,
        dpi: int = 100,
        background: str = "white",
    ):
        super().__init__(width, height)
        self.dpi = dpi
        self.background = background
        self.figure = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        self.canvas = FigureCanvasAgg(self.figure)
        self.figure.patch.set_facecolor(to_rgba(background))
        self.ax = self.figure.add_axes((0.0, 0.0, 1.0, 1.0))
        self.ax.set_xlim(0, width)
        self.ax.set_ylim(height, 0)
        self.ax.set_autoscale_on(False)
        self.ax.set_aspect("auto")
        self.ax.axis("off")
        self._zorder = 1.0

    # ---- helpers ----
    def _px_to_pt(self, px: float) -> float:
        return px * 72.0 / self.dpi

    def _next_zorder(self) -> float:
        self._zorder += 1.0
        return self._zorder

    def _to_mpl_path(self, path: List[PathCommand]) -> MplPath:
        verts: List[Tuple[float, float]] = []
        codes: List[int] = []
        start: Optional[Tuple[float, float]] = None
        need_move = False
        for cmd in path:
            op = cmd[0]
            if op == "M":
                verts.append(cmd[1])
                codes.append(MplPath.MOVETO)
                start = cmd[1]
                need_move = False
                continue
            if need_move and start is not None:
                verts.append(start)
                codes.append(MplPath.MOVETO)
                need_move = False
            if op == "L":
                verts.append(cmd[1])
                codes.append(MplPath.LINETO)
            elif op == "C":
                verts.extend([cmd[1], cmd[2], cmd[3]])
                codes.extend([MplPath.CURVE4] * 3)
            elif op == "Z":
                verts.append(start if start is not None else (0.0, 0.0))
                codes.append(MplPath.CLOSEPOLY)
                need_move = True
        if not verts:
            return MplPath(np.empty((0, 2)))
        return MplPath(np.asarray(verts, dtype=float), codes)

    def _solid(self, paint: Paint) -> RGBA:
        if isinstance(paint, LinearGradient):
            # strokes with a gradient use the first stop
            if not paint.stops:
                return (0.0, 0.0, 0.0, 0.0)
            return to_rgba(paint.stops[0][1])
        return to_rgba(paint)

    def _shadow_effects(self, state: PaintState, kind: str, linewidth_pt: float = 1.0):
        rgba = to_rgba(state.shadow_color)
        visible = rgba[3] > 0 and (
            state.shadow_blur > 0 or state.shadow_offset_x != 0 or state.shadow_offset_y != 0
        )
        if not visible:
            return []
        # display space is y-up; canvas shadow offsets are y-down
        offset = (self._px_to_pt(state.shadow_offset_x), -self._px_to_pt(state.shadow_offset_y))
        if kind == "line":
            shadow = path_effects.SimpleLineShadow(
                offset=offset, shadow_color=rgba[:3], alpha=rgba[3], linewidth=linewidth_pt
            )
        else:
            shadow = path_effects.SimplePatchShadow(
                offset=offset, shadow_rgbFace=rgba[:3], alpha=rgba[3]
            )
        return [shadow, path_effects.Normal()]

    def _stroke_mpl(self, mpath: MplPath, state: PaintState) -> None:
        lw = self._px_to_pt(state.line_width * state.transform.linear_scale())
        patch = PathPatch(
            mpath,
            facecolor="none",
            edgecolor=self._solid(state.stroke_style),
            linewidth=lw,
            capstyle="butt",
            joinstyle="miter",
            zorder=self._next_zorder(),
        )
        patch.set_path_effects(self._shadow_effects(state, "line", lw))
        self.ax.add_patch(patch)

    def _fill_mpl(self, mpath: MplPath, state: PaintState) -> None:
        paint = state.fill_style
        if isinstance(paint, LinearGradient):
            self._fill_gradient(mpath, paint, state)
            return
        patch = PathPatch(
            mpath,
            facecolor=self._solid(paint),
            edgecolor="none",
            linewidth=0.0,
            zorder=self._next_zorder(),
        )
        patch.set_path_effects(self._shadow_effects(state, "patch"))
        self.ax.add_patch(patch)

    def _fill_gradient(self, mpath: MplPath, gradient: LinearGradient, state: PaintState) -> None:
        if not gradient.stops:
            return
        if self._shadow_effects(state, "patch"):
            shadow = PathPatch(mpath, facecolor="none", edgecolor="none", zorder=self._next_zorder())
            shadow.set_path_effects(self._shadow_effects(state, "patch")[:1])
            self.ax.add_patch(shadow)
        w = max(1, int(math.ceil(self.width)))
        h = max(1, int(math.ceil(self.height)))
        ys, xs = np.mgrid[0:h, 0:w] + 0.5
        # gradient endpoints are in the user space active at paint time
        p0 = state.transform.apply((gradient.x0, gradient.y0))
        p1 = state.transform.apply((gradient.x1, gradient.y1))
        device = LinearGradient(p0[0], p0[1], p1[0], p1[1])
        device.stops = list(gradient.stops)
        offsets = device.offsets_at(np.stack([xs.ravel(), ys.ravel()], axis=1)).reshape(h, w)
        image = self.ax.imshow(
            gradient_colors(device, offsets),
            extent=(0, self.width, self.height, 0),
            origin="upper",
            interpolation="bilinear",
            aspect="auto",
            zorder=self._next_zorder(),
        )
        clip = PathPatch(mpath, transform=self.ax.transData, facecolor="none", edgecolor="none")
        image.set_clip_path(clip)

    def _text_path(self, text: str, x: float, y: float, state: PaintState) -> MplPath:
        spec = parse_font(state.font)
        prop = _font_properties(spec)
        tp = TextPath((0, 0), text, size=spec.size_px, prop=prop)
        if len(tp.vertices) == 0:
            return MplPath(np.empty((0, 2)))
        verts = tp.vertices.copy()
        verts[:, 1] *= -1.0  # TextPath is y-up
        width = self._advance(text, spec)
        align = state.text_align
        if align == "center":
            dx = -width / 2
        elif align in ("end", "right"):
            dx = -width
        else:
            dx = 0.0
        size = spec.size_px
        dy = {
            "top": _ASCENT * size,
            "hanging": _ASCENT * size,
            "middle": (_ASCENT - _DESCENT) * size / 2,
            "ideographic": -_DESCENT * size,
            "bottom": -_DESCENT * size,
        }.get(state.text_baseline, 0.0)
        local = verts + np.array([x + dx, y + dy])
        return MplPath(state.transform.apply_many(local), tp.codes)

    def _advance(self, text: str, spec: FontSpec) -> float:
        if not text:
            return 0.0
        w, _h, _d = text_to_path.get_text_width_height_descent(text, _font_properties(spec), ismath=False)
        return float(w)

    # ---- backend hooks ----
    def _stroke_path(self, path: List[PathCommand], state: PaintState) -> None:
        if not path:
            return
        self._stroke_mpl(self._to_mpl_path(path), state)

    def _fill_path(self, path: List[PathCommand], state: PaintState) -> None:
        if not path:
            return
        self._fill_mpl(self._to_mpl_path(path), state)

    def _draw_text(self, text: str, x: float, y: float, state: PaintState, mode: str) -> None:
        if not text:
            return
        mpath = self._text_path(text, x, y, state)
        if len(mpath.vertices) == 0:
            return
        if mode == "stroke":
            self._stroke_mpl(mpath, state)
        else:
            self._fill_mpl(mpath, state)

    def _measure_text(self, text: str, state: PaintState) -> float:
        return self._advance(text, parse_font(state.font))

    def _clear_rect(self, x: float, y: float, w: float, h: float) -> None:
        full = (
            x <= 0 and y <= 0 and x + w >= self.width and y + h >= self.height
            and np.allclose(self.state.transform.A, np.eye(2))
            and np.allclose(self.state.transform.t, 0.0)
        )
        if full:
            for artist in list(self.ax.patches) + list(self.ax.images):
                artist.remove()
            return
        corners = self.state.transform.apply_many([(x, y), (x + w, y), (x + w, y + h), (x, y + h)])
        mpath = MplPath(np.vstack([corners, corners[:1]]), closed=True)
        self.ax.add_patch(
            PathPatch(
                mpath,
                facecolor=to_rgba(self.background),
                edgecolor="none",
                linewidth=0.0,
                zorder=self._next_zorder(),
            )
        )

    # ---- export ----
    def to_image(self) -> Image.Image:
        """
        Render to an in-memory PIL image of width x height pixels.
        """
        buffer = io.BytesIO()
        self.figure.savefig(
            buffer,
            format="png",
            dpi=self.dpi,
            facecolor=self.figure.get_facecolor(),
        )
        buffer.seek(0)
        image = Image.open(buffer)
        image.load()
        return image

    def write_png(self, filename: str) -> None:
        self.figure.savefig(
            filename,
            dpi=self.dpi,
            facecolor=self.figure.get_facecolor(),
        )
