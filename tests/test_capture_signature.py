"""Tests for the drawing-pad rasteriser (the tkinter window itself is not exercised)."""

import io

import pytest
from PIL import Image

from capture_signature import DEFAULT_PEN_COLOR, PEN_COLORS, parse_pen_color, render_strokes
from extract_signature import trim_drawn_signature


def decode(png):
    return Image.open(io.BytesIO(png))


class TestPenColor:
    def test_palette_parses(self):
        assert [parse_pen_color(c) for c in PEN_COLORS] == [
            (79, 70, 229), (15, 23, 42), (220, 38, 38), (5, 150, 105),
        ]
        assert DEFAULT_PEN_COLOR == PEN_COLORS[0]

    def test_hex(self):
        assert parse_pen_color("#102030") == (16, 32, 48)

    @pytest.mark.parametrize("value", ["", "rgb(1, 2)", "not-a-colour"])
    def test_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            parse_pen_color(value)


class TestRenderStrokes:
    def test_transparent_canvas_with_pen_colour(self):
        img = decode(render_strokes([[(10, 10), (90, 40)]], (100, 50), "rgb(220, 38, 38)", 3))
        assert img.mode == "RGBA"
        assert img.size == (100, 50)
        assert img.getpixel((0, 49)) == (0, 0, 0, 0)
        assert img.getpixel((50, 25))[:3] == (220, 38, 38)

    def test_single_point_stroke_is_a_dot(self):
        img = decode(render_strokes([[(20, 20)]], (40, 40), pen_width=4))
        assert img.getpixel((20, 20))[3] == 255

    def test_no_strokes_is_blank(self):
        img = decode(render_strokes([], (30, 30)))
        assert img.getextrema()[3] == (0, 0)

    def test_pad_output_trims_to_ink(self):
        png = render_strokes([[(100, 50), (300, 50)], [(100, 80), (300, 80)]], (600, 200),
                             pen_width=2)
        mask = trim_drawn_signature(png)
        assert 200 <= mask.width <= 204
        assert 30 <= mask.height <= 34
        assert mask.aspect_ratio == pytest.approx(mask.width / mask.height)
