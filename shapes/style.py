from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Mapping, Optional, Sequence, Tuple, Union
import math
import re


GradientDirection = Literal["horizontal", "vertical"]
TextAlign = Literal["start", "end", "left", "right", "center"]
TextBaseline = Literal["alphabetic", "top", "hanging", "middle", "ideographic", "bottom"]

DEFAULT_FONT = "16px Arial"
DEFAULT_FONT_PX = 16.0

# CSS absolute/relative length units -> px
_UNIT_TO_PX = {
    "px": 1.0,
    "pt": 4.0 / 3.0,
    "pc": 16.0,
    "in": 96.0,
    "cm": 96.0 / 2.54,
    "mm": 96.0 / 25.4,
    "em": DEFAULT_FONT_PX,
    "rem": DEFAULT_FONT_PX,
    "%": DEFAULT_FONT_PX / 100.0,
}
_SIZE_TOKEN_RE = re.compile(r"(?<![\w.])(\d+(?:\.\d+)?|\.\d+)(px|pt|pc|in|cm|mm|rem|em|%)(?:/\S+)?(?=\s|$)")
_LEADING_NUMBER_RE = re.compile(r"^\s*([+-]?\d+)")
_WEIGHTS = {"bold", "bolder", "lighter", "normal"}
_STYLES = {"italic", "oblique"}


@dataclass(frozen=True)
class StrokeStyle:
    color: str = "black"
    line_width: float = 1.0


@dataclass(frozen=True)
class FillStyle:
    """
    Solid fill. The empty color means "do not fill".
    """
    color: str = ""

    @property
    def is_set(self) -> bool:
        return bool(self.color)


@dataclass(frozen=True)
class GradientSpec:
    colors: Tuple[str, ...] = ("black", "white")
    direction: GradientDirection = "horizontal"

    def __post_init__(self):
        colors = tuple(self.colors)
        if len(colors) < 2:
            raise ValueError(f"gradient needs at least two colors, got {len(colors)}")
        object.__setattr__(self, "colors", colors)
        # anything that is not "vertical" runs along the text width
        if self.direction != "vertical":
            object.__setattr__(self, "direction", "horizontal")

    def stops(self) -> list[Tuple[float, str]]:
        n = len(self.colors)
        return [(i / (n - 1), c) for i, c in enumerate(self.colors)]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GradientSpec":
        colors = data.get("colors")
        direction = data.get("direction")
        return cls(
            colors=cls.colors if colors is None else tuple(colors),
            direction=cls.direction if direction is None else direction,
        )


@dataclass(frozen=True)
class ShadowSpec:
    color: str = "rgba(0,0,0,0.5)"
    blur: float = 4.0
    offset_x: float = 2.0
    offset_y: float = 2.0

    def __post_init__(self):
        # an empty color is a missing color
        if not self.color:
            object.__setattr__(self, "color", ShadowSpec.color)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ShadowSpec":
        return cls(
            color=_pick(data, cls.color, "color"),
            blur=_pick(data, cls.blur, "blur"),
            offset_x=_pick(data, cls.offset_x, "offset_x", "offsetX"),
            offset_y=_pick(data, cls.offset_y, "offset_y", "offsetY"),
        )


@dataclass(frozen=True)
class OutlineSpec:
    color: str = "black"
    width: float = 1.0

    def __post_init__(self):
        if not self.color:
            object.__setattr__(self, "color", OutlineSpec.color)
        # a width the surface would ignore falls back to 1
        if not _positive_number(self.width):
            object.__setattr__(self, "width", OutlineSpec.width)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "OutlineSpec":
        return cls(
            color=_pick(data, cls.color, "color"),
            width=_pick(data, cls.width, "width"),
        )


def _positive_number(value: Any) -> bool:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(v) and v > 0.0


def _pick(data: Mapping[str, Any], default: Any, *keys: str) -> Any:
    for k in keys:
        v = data.get(k)
        if v is not None:
            return v
    return default


@dataclass(frozen=True)
class TextOptions:
    """
    Styling for ShapeRenderer.draw_text.

    shadow / outline / gradient are present-or-absent: None means the aspect
    is skipped entirely, any value (even one built from an empty mapping)
    means it is applied with per-field defaults.
    """
    font: str = DEFAULT_FONT
    color: str = "black"
    align: TextAlign = "start"
    baseline: TextBaseline = "alphabetic"
    shadow: Optional[ShadowSpec] = None
    outline: Optional[OutlineSpec] = None
    gradient: Optional[GradientSpec] = None

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]] = None) -> "TextOptions":
        if options is None:
            return cls()
        return cls(
            font=_pick(options, cls.font, "font"),
            color=_pick(options, cls.color, "color"),
            align=_pick(options, cls.align, "align"),
            baseline=_pick(options, cls.baseline, "baseline"),
            shadow=_coerce_optional(options.get("shadow"), ShadowSpec),
            outline=_coerce_optional(options.get("outline"), OutlineSpec),
            gradient=_coerce_optional(options.get("gradient"), GradientSpec),
        )

    @classmethod
    def coerce(cls, options: Union["TextOptions", Mapping[str, Any], None]) -> "TextOptions":
        if isinstance(options, TextOptions):
            return options
        return cls.from_mapping(options)


def _coerce_optional(value: Any, spec_cls):
    if value is None:
        return None
    if isinstance(value, spec_cls):
        return value
    if isinstance(value, Mapping):
        return spec_cls.from_mapping(value)
    raise TypeError(f"expected {spec_cls.__name__} or mapping, got {type(value).__name__}")


@dataclass(frozen=True)
class FontSpec:
    """
    Parsed CSS font shorthand: [style] [weight] <size> <family>.
    """
    size_px: float = DEFAULT_FONT_PX
    family: Tuple[str, ...] = ("sans-serif",)
    weight: str = "normal"
    style: str = "normal"


def _size_to_px(number: str, unit: str) -> float:
    return float(number) * _UNIT_TO_PX[unit]


def font_pixel_size(font: str) -> float:
    """
    Pixel size of a CSS font string.

    The size token is looked up anywhere in the shorthand so "bold 24px Arial"
    and "24px Arial" both give 24. Without a size token the leading integer
    of the string is used, then the 16px default.
    """
    m = _SIZE_TOKEN_RE.search(font or "")
    if m:
        return _size_to_px(m.group(1), m.group(2))
    m = _LEADING_NUMBER_RE.match(font or "")
    if m:
        return float(int(m.group(1)))
    return DEFAULT_FONT_PX


def parse_font(font: str) -> FontSpec:
    text = (font or "").strip()
    m = _SIZE_TOKEN_RE.search(text)
    if not m:
        return FontSpec(size_px=font_pixel_size(text))
    weight, style = "normal", "normal"
    for tok in text[: m.start()].split():
        low = tok.lower()
        if low in _WEIGHTS or low.isdigit():
            weight = low
        elif low in _STYLES:
            style = low
    families = tuple(
        f.strip().strip("'\"") for f in text[m.end():].split(",") if f.strip().strip("'\"")
    )
    return FontSpec(
        size_px=_size_to_px(m.group(1), m.group(2)),
        family=families or FontSpec.family,
        weight=weight,
        style=style,
    )


def gradient_stops(colors: Sequence[str]) -> list[Tuple[float, str]]:
    return GradientSpec(colors=tuple(colors)).stops()
