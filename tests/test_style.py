import pytest

from shapes.style import (
    GradientSpec,
    OutlineSpec,
    ShadowSpec,
    TextOptions,
    font_pixel_size,
    gradient_stops,
    parse_font,
)


@pytest.mark.parametrize("n", [2, 3, 4, 7])
def test_gradient_stops_are_evenly_spaced(n):
    colors = [f"c{i}" for i in range(n)]
    stops = gradient_stops(colors)
    assert [c for _, c in stops] == colors
    assert [o for o, _ in stops] == [i / (n - 1) for i in range(n)]
    assert stops[0][0] == 0.0
    assert stops[-1][0] == 1.0


def test_gradient_needs_two_colors():
    with pytest.raises(ValueError):
        GradientSpec(colors=("red",))
    with pytest.raises(ValueError):
        GradientSpec(colors=())


def test_gradient_direction_defaults_to_horizontal():
    assert GradientSpec().direction == "horizontal"
    assert GradientSpec(direction="vertical").direction == "vertical"
    assert GradientSpec(direction="diagonal").direction == "horizontal"
    spec = GradientSpec.from_mapping({"colors": ["red", "blue"]})
    assert spec.colors == ("red", "blue")
    assert spec.direction == "horizontal"
    assert GradientSpec.from_mapping({}).colors == ("black", "white")


@pytest.mark.parametrize(
    "font, expected",
    [
        ("16px Arial", 16),
        ("24px Arial", 24),
        ("bold 24px Arial", 24),
        ("italic bold 13.5px 'Times New Roman', serif", 13.5),
        ("12pt serif", 16),
        ("2em sans-serif", 32),
        ("bold 20px/1.2 Arial", 20),
        ("32", 32),
        ("Arial", 16),
        ("", 16),
    ],
)
def test_font_pixel_size(font, expected):
    assert font_pixel_size(font) == pytest.approx(expected)


def test_parse_font_shorthand():
    spec = parse_font("italic bold 24px 'Helvetica Neue', Arial")
    assert spec.size_px == 24
    assert spec.weight == "bold"
    assert spec.style == "italic"
    assert spec.family == ("Helvetica Neue", "Arial")

    plain = parse_font("16px Arial")
    assert plain.weight == "normal"
    assert plain.style == "normal"
    assert plain.family == ("Arial",)

    assert parse_font("24px").family == ("sans-serif",)


def test_text_options_defaults():
    opts = TextOptions.from_mapping(None)
    assert opts == TextOptions()
    assert opts.font == "16px Arial"
    assert opts.color == "black"
    assert opts.align == "start"
    assert opts.baseline == "alphabetic"
    assert opts.shadow is None
    assert opts.outline is None
    assert opts.gradient is None


def test_text_options_fields_default_independently():
    opts = TextOptions.from_mapping({"color": "blue", "baseline": "top"})
    assert opts.color == "blue"
    assert opts.baseline == "top"
    assert opts.font == "16px Arial"
    assert opts.align == "start"


def test_empty_sub_options_are_present_with_defaults():
    opts = TextOptions.from_mapping({"shadow": {}, "outline": {}, "gradient": {}})
    assert opts.shadow == ShadowSpec("rgba(0,0,0,0.5)", 4, 2, 2)
    assert opts.outline == OutlineSpec("black", 1)
    assert opts.gradient == GradientSpec(("black", "white"), "horizontal")


def test_absent_sub_options():
    opts = TextOptions.from_mapping({"shadow": None, "outline": None})
    assert opts.shadow is None
    assert opts.outline is None


def test_shadow_fields_default_independently_and_accept_camel_case():
    shadow = ShadowSpec.from_mapping({"blur": 9, "offsetY": 5})
    assert shadow.color == "rgba(0,0,0,0.5)"
    assert shadow.blur == 9
    assert shadow.offset_x == 2
    assert shadow.offset_y == 5
    # explicit zero is kept, not replaced by the default
    assert ShadowSpec.from_mapping({"blur": 0}).blur == 0


def test_outline_fields_default_independently():
    assert OutlineSpec.from_mapping({"width": 3}) == OutlineSpec("black", 3)
    assert OutlineSpec.from_mapping({"color": "red"}) == OutlineSpec("red", 1)


def test_coerce_passes_text_options_through():
    opts = TextOptions(font="10px serif")
    assert TextOptions.coerce(opts) is opts
    assert TextOptions.coerce({"font": "10px serif"}) == opts


def test_sub_option_of_wrong_type_raises():
    with pytest.raises(TypeError):
        TextOptions.from_mapping({"shadow": "yes"})


@pytest.mark.parametrize("width", [0, -3, float("nan")])
def test_outline_width_the_surface_would_ignore_falls_back(width):
    assert OutlineSpec.from_mapping({"width": width}).width == 1
    assert OutlineSpec(width=width).width == 1


def test_empty_colors_fall_back_to_defaults():
    assert OutlineSpec.from_mapping({"color": ""}).color == "black"
    shadow = ShadowSpec.from_mapping({"color": "", "offsetX": 0})
    assert shadow.color == "rgba(0,0,0,0.5)"
    assert shadow.offset_x == 0
