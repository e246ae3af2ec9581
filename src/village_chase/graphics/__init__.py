"""Graphics module for the village chase rendering pipeline."""

from village_chase.graphics.scene import SceneRenderer
from village_chase.graphics.primitives import (
    new_buffer,
    fill,
    draw_rect,
    draw_circle,
    draw_ellipse,
    draw_polygon,
    draw_line,
    draw_image,
)

__all__ = [
    # Renderer
    "SceneRenderer",
    # Primitives
    "new_buffer",
    "fill",
    "draw_rect",
    "draw_circle",
    "draw_ellipse",
    "draw_polygon",
    "draw_line",
    "draw_image",
]
