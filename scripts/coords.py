"""Convert rectangles between on-screen render pixels and PDF points.

Render space: the page rasterised at a fixed render scale (1.5 by default),
origin top-left, y down. It may be displayed at a different size, which
page_scale_factor = rendered width / displayed width corrects for.

Point space: native PDF coordinates, origin bottom-left, y up.

    point_x = render_x * page_scale_factor / render_scale
    point_y = page_height_points - render_y * page_scale_factor / render_scale - point_height
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def as_dict(self):
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


def page_scale_factor(rendered_width, displayed_width):
    """Ratio between the rendered raster width and its on-screen width."""
    if displayed_width <= 0:
        raise ValueError(f"Displayed width must be positive, got {displayed_width}")
    return rendered_width / displayed_width


def to_document_rect(render_rect, page_scale_factor, render_scale, page_height_points):
    """Render-pixel rect (top-left origin) -> PDF point rect (bottom-left origin)."""
    if render_scale <= 0:
        raise ValueError(f"Render scale must be positive, got {render_scale}")
    k = page_scale_factor / render_scale
    width = render_rect.width * k
    height = render_rect.height * k
    return Rect(
        x=render_rect.x * k,
        y=page_height_points - render_rect.y * k - height,
        width=width,
        height=height,
    )


def to_render_rect(point_rect, page_scale_factor, render_scale, page_height_points):
    """Inverse of to_document_rect."""
    if render_scale <= 0 or page_scale_factor <= 0:
        raise ValueError("Render scale and page scale factor must be positive")
    k = render_scale / page_scale_factor
    return Rect(
        x=point_rect.x * k,
        y=(page_height_points - point_rect.y - point_rect.height) * k,
        width=point_rect.width * k,
        height=point_rect.height * k,
    )
