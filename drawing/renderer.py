from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, Tuple, Union
import logging
import math
import numpy as np

from shapes.geometry import (
    HEART_CURVES,
    HEART_SIZE,
    HEART_START,
    regular_polygon_vertices,
    star_vertices,
    triangle_vertices,
)
from shapes.style import FillStyle, StrokeStyle, TextOptions, font_pixel_size
from surfaces.base import Paint, Surface

logger = logging.getLogger(__name__)


class MissingSurfaceError(ValueError):
    """ShapeRenderer was constructed without a surface."""


class ShapeRenderer:
    """
    Draws parametric shapes and styled text onto a Surface.

    Holds no state besides the surface and the width/height/center captured
    at construction; rebuild the renderer after resizing the surface.
    Every call sets the paint registers it relies on. Heart and text drawing
    run inside save()/restore() so their transform and style never leak.
    """

    def __init__(self, surface: Optional[Surface]):
        if surface is None:
            logger.error("No drawing surface given - the renderer cannot draw")
            raise MissingSurfaceError("ShapeRenderer requires a surface")
        self.surface = surface
        self.width = surface.width
        self.height = surface.height
        self.center: Tuple[float, float] = (self.width / 2, self.height / 2)
        logger.info("ShapeRenderer ready on %sx%s surface", self.width, self.height)

    # ---- helpers ----
    @contextmanager
    def _scoped(self) -> Iterator[Surface]:
        self.surface.save()
        try:
            yield self.surface
        finally:
            self.surface.restore()

    def _trace_closed(self, vertices: np.ndarray) -> None:
        s = self.surface
        for i, (x, y) in enumerate(vertices):
            if i == 0:
                s.move_to(float(x), float(y))
            else:
                s.line_to(float(x), float(y))
        s.close_path()

    def _set_stroke(self, style: StrokeStyle) -> None:
        self.surface.stroke_style = style.color
        self.surface.line_width = style.line_width

    def _fill_then_stroke(self, fill: FillStyle) -> None:
        if fill.is_set:
            self.surface.fill_style = fill.color
            self.surface.fill()
        self.surface.stroke()

    # ---- primitives ----
    def clear(self) -> None:
        self.surface.clear_rect(0, 0, self.width, self.height)

    def draw_line(self, start_x: float, start_y: float, end_x: float, end_y: float,
                  color: str, line_width: float = 1) -> None:
        s = self.surface
        s.begin_path()
        s.move_to(start_x, start_y)
        s.line_to(end_x, end_y)
        self._set_stroke(StrokeStyle(color, line_width))
        s.stroke()

    def mark_center(self, color: str = "red", size: float = 20) -> None:
        """
        Draw an X of two diagonals of length `size` at the middle of the surface.

        Uses the surface's current size, not the center captured at construction.
        """
        center_x = self.surface.width / 2
        center_y = self.surface.height / 2
        half = size / 2
        self.draw_line(center_x - half, center_y - half, center_x + half, center_y + half, color, 2)
        self.draw_line(center_x - half, center_y + half, center_x + half, center_y - half, color, 2)

    def draw_triangle(self, center_x: float, center_y: float, size: float,
                      color: str = "black", line_width: float = 1) -> None:
        s = self.surface
        s.begin_path()
        self._set_stroke(StrokeStyle(color, line_width))
        self._trace_closed(triangle_vertices(center_x, center_y, size))
        s.stroke()

    def draw_circle(self, center_x: float, center_y: float, radius: float,
                    stroke_color: str = "black", line_width: float = 1, fill_color: str = "") -> None:
        s = self.surface
        s.begin_path()
        s.arc(center_x, center_y, radius, 0, 2 * math.pi)
        self._set_stroke(StrokeStyle(stroke_color, line_width))
        s.stroke()
        # circles fill over their stroke
        fill = FillStyle(fill_color)
        if fill.is_set:
            s.fill_style = fill.color
            s.fill()

    def draw_regular_polygon(self, center_x: float, center_y: float, radius: float, sides: float,
                             stroke_color: str = "black", line_width: float = 1,
                             fill_color: str = "", rotation: float = 0) -> None:
        s = self.surface
        s.begin_path()
        self._set_stroke(StrokeStyle(stroke_color, line_width))
        self._trace_closed(regular_polygon_vertices(center_x, center_y, radius, sides, rotation))
        self._fill_then_stroke(FillStyle(fill_color))

    def draw_star(self, center_x: float, center_y: float, outer_radius: float, inner_radius: float,
                  points: float, stroke_color: str = "black", line_width: float = 1,
                  fill_color: str = "", rotation: float = 0) -> None:
        s = self.surface
        s.begin_path()
        self._set_stroke(StrokeStyle(stroke_color, line_width))
        self._trace_closed(star_vertices(center_x, center_y, outer_radius, inner_radius, points, rotation))
        self._fill_then_stroke(FillStyle(fill_color))

    def draw_heart(self, center_x: float, center_y: float, size: float,
                   stroke_color: str = "red", line_width: float = 1,
                   fill_color: str = "", rotation: float = 0) -> None:
        with self._scoped() as s:
            s.translate(center_x, center_y)
            s.rotate(rotation)
            k = size / HEART_SIZE
            s.scale(k, k)

            s.begin_path()
            s.move_to(*HEART_START)
            for c1, c2, end in HEART_CURVES:
                s.bezier_curve_to(c1[0], c1[1], c2[0], c2[1], end[0], end[1])

            self._set_stroke(StrokeStyle(stroke_color, line_width))
            self._fill_then_stroke(FillStyle(fill_color))

    # ---- text ----
    def _text_paint(self, text: str, x: float, y: float, opts: TextOptions) -> Paint:
        if opts.gradient is None:
            return opts.color
        s = self.surface
        if opts.gradient.direction == "vertical":
            gradient = s.create_linear_gradient(x, y, x, y + font_pixel_size(opts.font))
        else:
            gradient = s.create_linear_gradient(x, y, x + s.measure_text(text).width, y)
        for offset, color in opts.gradient.stops():
            gradient.add_color_stop(offset, color)
        return gradient

    def draw_text(self, text: str, x: float, y: float,
                  options: Union[TextOptions, Mapping[str, Any], None] = None) -> None:
        """
        Draw text with optional shadow, outline and gradient fill.

        `options` is a TextOptions or a mapping with any of: font, color,
        align, baseline, shadow {color, blur, offsetX, offsetY},
        outline {color, width}, gradient {colors, direction}. Missing
        entries take their defaults independently.

        The outline is stroked before the fill so the fill sits on top.
        A shadow applies to both.
        """
        opts = TextOptions.coerce(options)
        with self._scoped() as s:
            s.font = opts.font
            s.text_align = opts.align
            s.text_baseline = opts.baseline

            if opts.shadow is not None:
                s.shadow_color = opts.shadow.color
                s.shadow_blur = opts.shadow.blur
                s.shadow_offset_x = opts.shadow.offset_x
                s.shadow_offset_y = opts.shadow.offset_y

            paint = self._text_paint(text, x, y, opts)

            if opts.outline is not None:
                self._set_stroke(StrokeStyle(opts.outline.color, opts.outline.width))
                s.stroke_text(text, x, y)

            s.fill_style = paint
            s.fill_text(text, x, y)
