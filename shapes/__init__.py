# Re-export core geometry and style API for convenience
from .geometry import (
    Point,
    Affine2D,
    triangle_vertices,
    regular_polygon_vertices,
    star_vertices,
    HEART_START,
    HEART_CURVES,
    heart_transform,
    heart_control_points,
    flatten_cubic,
    arc_to_cubics,
)
from .style import (
    DEFAULT_FONT,
    StrokeStyle,
    FillStyle,
    GradientSpec,
    ShadowSpec,
    OutlineSpec,
    TextOptions,
    FontSpec,
    font_pixel_size,
    parse_font,
    gradient_stops,
)
