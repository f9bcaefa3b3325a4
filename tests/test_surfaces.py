import math

import numpy as np
import pytest

from shapes.geometry import Affine2D
from surfaces import LinearGradient, PaintState, RecordingSurface, Surface
from surfaces.vectorizer import path_to_geometry, path_to_rings


def test_recording_surface_satisfies_protocol():
    assert isinstance(RecordingSurface(), Surface)


def test_save_restore_round_trips_registers_and_transform():
    s = RecordingSurface(200, 100)
    s.stroke_style = "red"
    s.line_width = 3
    s.translate(10, 20)
    before = s.state.copy()

    s.save()
    s.stroke_style = "blue"
    s.fill_style = "green"
    s.line_width = 9
    s.shadow_color = "black"
    s.shadow_blur = 6
    s.font = "30px serif"
    s.rotate(1.0)
    s.scale(2, 3)
    assert not s.state.same_as(before)
    s.restore()

    assert s.state.same_as(before)
    assert s.save_depth == 0


def test_restore_without_save_is_a_no_op():
    s = RecordingSurface()
    s.line_width = 4
    s.restore()
    assert s.line_width == 4


def test_invalid_register_values_are_ignored():
    s = RecordingSurface()
    s.line_width = 5
    s.line_width = 0
    s.line_width = -2
    s.line_width = float("nan")
    assert s.line_width == 5
    s.shadow_blur = -1
    assert s.shadow_blur == 0


def test_path_points_are_mapped_through_current_transform():
    s = RecordingSurface()
    s.translate(100, 50)
    s.scale(2, 2)
    s.begin_path()
    s.move_to(1, 1)
    s.line_to(2, 0)
    s.rotate(math.pi / 2)
    s.line_to(1, 0)
    s.close_path()
    path = s.path
    assert path[0] == ("M", (102.0, 52.0))
    assert path[1] == ("L", (104.0, 50.0))
    assert path[2][0] == "L"
    np.testing.assert_allclose(path[2][1], (100.0, 52.0), atol=1e-12)
    assert path[3] == ("Z",)


def test_line_to_without_current_point_moves():
    s = RecordingSurface()
    s.begin_path()
    s.line_to(3, 4)
    assert s.path == (("M", (3.0, 4.0)),)


def test_arc_builds_cubic_segments():
    s = RecordingSurface()
    s.begin_path()
    s.arc(50, 50, 10, 0, 2 * math.pi)
    kinds = [cmd[0] for cmd in s.path]
    assert kinds == ["M", "C", "C", "C", "C"]
    assert s.path[0][1] == pytest.approx((60.0, 50.0))
    geom = path_to_geometry(s.path, close_all=True)
    assert geom.area == pytest.approx(math.pi * 100, rel=5e-3)


def test_begin_path_discards_previous_path():
    s = RecordingSurface()
    s.move_to(0, 0)
    s.line_to(1, 1)
    s.begin_path()
    assert s.path == ()


def test_stroke_and_fill_record_state_snapshots():
    s = RecordingSurface()
    s.begin_path()
    s.move_to(0, 0)
    s.line_to(10, 0)
    s.stroke_style = "red"
    s.stroke()
    s.stroke_style = "blue"
    op = s.ops("stroke")[0]
    assert op.state.stroke_style == "red"
    assert op.path == (("M", (0.0, 0.0)), ("L", (10.0, 0.0)))
    assert s.call_names() == ["begin_path", "move_to", "line_to", "stroke"]
    assert "set_stroke_style" in s.call_names(include_setters=True)


def test_measure_text_is_deterministic():
    s = RecordingSurface()
    s.font = "bold 20px Arial"
    assert s.measure_text("abcd").width == pytest.approx(4 * 20 * 0.5)


def test_linear_gradient_stops_and_offsets():
    g = LinearGradient(0, 0, 100, 0)
    g.add_color_stop(1, "blue")
    g.add_color_stop(0, "red")
    g.add_color_stop(0.5, "white")
    assert g.stops == [(0.0, "red"), (0.5, "white"), (1.0, "blue")]
    np.testing.assert_allclose(g.offsets_at([(-10, 5), (25, 9), (100, 0), (300, 1)]), [0, 0.25, 1, 1])


@pytest.mark.parametrize("offset", [-0.1, 1.01, float("nan")])
def test_linear_gradient_rejects_out_of_range_offsets(offset):
    with pytest.raises(ValueError):
        LinearGradient(0, 0, 1, 1).add_color_stop(offset, "red")


def test_create_linear_gradient_rejects_non_finite_coordinates():
    s = RecordingSurface()
    with pytest.raises(ValueError):
        s.create_linear_gradient(0, 0, float("nan"), 0)


def test_paint_state_same_as_compares_gradients_by_identity():
    a = PaintState()
    b = a.copy()
    assert a.same_as(b)
    b.fill_style = LinearGradient(0, 0, 1, 1)
    assert not a.same_as(b)
    c = b.copy()
    assert b.same_as(c)


def test_path_to_rings_handles_close_and_reopen():
    path = [
        ("M", (0.0, 0.0)),
        ("L", (10.0, 0.0)),
        ("L", (10.0, 10.0)),
        ("Z",),
        ("L", (0.0, 10.0)),
    ]
    rings = path_to_rings(path)
    assert len(rings) == 2
    pts, closed = rings[0]
    assert closed
    assert pts.shape == (3, 2)
    pts, closed = rings[1]
    assert not closed
    np.testing.assert_allclose(pts, [[0.0, 0.0], [0.0, 10.0]])


def test_reset_transform_returns_to_identity():
    s = RecordingSurface()
    s.translate(5, 6)
    s.rotate(0.3)
    s.scale(2, 4)
    assert not s.transform.is_close(Affine2D.identity())
    s.reset_transform()
    assert s.transform.is_close(Affine2D.identity())
    s.begin_path()
    s.move_to(7, 8)
    assert s.path == (("M", (7.0, 8.0)),)


def test_default_registers():
    assert RecordingSurface().state.registers() == {
        "stroke_style": "#000000",
        "fill_style": "#000000",
        "line_width": 1.0,
        "shadow_color": "rgba(0,0,0,0)",
        "shadow_blur": 0.0,
        "shadow_offset_x": 0.0,
        "shadow_offset_y": 0.0,
        "font": "10px sans-serif",
        "text_align": "start",
        "text_baseline": "alphabetic",
    }


def test_recording_reset_forgets_calls_but_keeps_state():
    s = RecordingSurface()
    s.stroke_style = "red"
    s.begin_path()
    s.stroke()
    s.reset()
    assert s.calls == []
    assert s.operations == []
    assert s.stroke_style == "red"
