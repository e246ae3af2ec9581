"""Basic drawing primitives on numpy frame buffers."""

from typing import Sequence, Tuple
import numpy as np
from numpy.typing import NDArray

# Type aliases
Color = Tuple[int, int, int]
Point = Tuple[float, float]
Buffer = NDArray[np.uint8]


def new_buffer(width: int, height: int) -> Buffer:
    """Allocate a black (height, width, 3) frame buffer."""
    return np.zeros((height, width, 3), dtype=np.uint8)


def fill(buffer: Buffer, color: Color) -> None:
    """Fill entire buffer with color."""
    buffer[:, :] = color


def draw_rect(
    buffer: Buffer,
    x: int,
    y: int,
    width: int,
    height: int,
    color: Color,
    filled: bool = True,
    thickness: int = 1,
) -> None:
    """Draw a rectangle on the buffer.

    Args:
        buffer: Target numpy array (height, width, 3)
        x: Left edge x coordinate
        y: Top edge y coordinate
        width: Rectangle width
        height: Rectangle height
        color: RGB color tuple
        filled: If True, fill rectangle; if False, draw outline only
        thickness: Line thickness for outline (when filled=False)
    """
    h, w = buffer.shape[:2]

    # Clamp to buffer bounds
    x1 = max(0, min(x, w))
    y1 = max(0, min(y, h))
    x2 = max(0, min(x + width, w))
    y2 = max(0, min(y + height, h))

    if x2 <= x1 or y2 <= y1:
        return

    if filled:
        buffer[y1:y2, x1:x2] = color
    else:
        t = max(1, thickness)
        buffer[y1:min(y1 + t, y2), x1:x2] = color
        buffer[max(y2 - t, y1):y2, x1:x2] = color
        buffer[y1:y2, x1:min(x1 + t, x2)] = color
        buffer[y1:y2, max(x2 - t, x1):x2] = color


def draw_ellipse(
    buffer: Buffer,
    cx: float,
    cy: float,
    rx: float,
    ry: float,
    color: Color,
    upper_only: bool = False,
) -> None:
    """Draw a filled axis-aligned ellipse.

    Args:
        buffer: Target numpy array (height, width, 3)
        cx, cy: Center
        rx, ry: Radii
        color: RGB color tuple
        upper_only: Only fill the half above the center line
    """
    if rx <= 0 or ry <= 0:
        return

    h, w = buffer.shape[:2]
    x1 = max(0, int(cx - rx))
    x2 = min(w, int(cx + rx) + 1)
    y1 = max(0, int(cy - ry))
    y2 = min(h, int(cy + ry) + 1)
    if upper_only:
        y2 = min(y2, int(cy) + 1)
    if x2 <= x1 or y2 <= y1:
        return

    # Distance-based mask on the bounding box only
    ys, xs = np.ogrid[y1:y2, x1:x2]
    mask = ((xs - cx) / rx) ** 2 + ((ys - cy) / ry) ** 2 <= 1.0
    buffer[y1:y2, x1:x2][mask] = color


def draw_circle(
    buffer: Buffer,
    cx: float,
    cy: float,
    radius: float,
    color: Color,
    upper_only: bool = False,
) -> None:
    """Draw a filled circle on the buffer."""
    draw_ellipse(buffer, cx, cy, radius, radius, color, upper_only=upper_only)


def draw_polygon(buffer: Buffer, points: Sequence[Point], color: Color) -> None:
    """Fill a simple polygon using an even-odd test over its bounding box."""
    if len(points) < 3:
        return

    h, w = buffer.shape[:2]
    xs_p = [p[0] for p in points]
    ys_p = [p[1] for p in points]
    x1 = max(0, int(min(xs_p)))
    x2 = min(w, int(max(xs_p)) + 1)
    y1 = max(0, int(min(ys_p)))
    y2 = min(h, int(max(ys_p)) + 1)
    if x2 <= x1 or y2 <= y1:
        return

    ys, xs = np.mgrid[y1:y2, x1:x2]
    px = xs + 0.5
    py = ys + 0.5
    inside = np.zeros(px.shape, dtype=bool)

    j = len(points) - 1
    for i in range(len(points)):
        xi, yi = points[i]
        xj, yj = points[j]
        if yi != yj:
            crosses = (yi > py) != (yj > py)
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            inside ^= crosses & (px < x_cross)
        j = i

    buffer[y1:y2, x1:x2][inside] = color


def draw_line(
    buffer: Buffer,
    x1: int,
    y1: int,
    x2: int,
    y2: int,
    color: Color,
    thickness: int = 1,
) -> None:
    """Draw a line using Bresenham's algorithm.

    Args:
        buffer: Target numpy array (height, width, 3)
        x1, y1: Start point
        x2, y2: End point
        color: RGB color tuple
        thickness: Line thickness in pixels
    """
    h, w = buffer.shape[:2]

    dx = abs(x2 - x1)
    dy = abs(y2 - y1)
    sx = 1 if x1 < x2 else -1
    sy = 1 if y1 < y2 else -1
    err = dx - dy

    x, y = x1, y1
    half = thickness // 2

    while True:
        # Square brush of the requested thickness
        bx1 = max(0, x - half)
        by1 = max(0, y - half)
        bx2 = min(w, x - half + thickness)
        by2 = min(h, y - half + thickness)
        if bx2 > bx1 and by2 > by1:
            buffer[by1:by2, bx1:bx2] = color

        if x == x2 and y == y2:
            break

        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy


def draw_image(
    buffer: Buffer,
    image: Buffer,
    x: int,
    y: int,
    alpha: float = 1.0,
) -> None:
    """Draw an image onto the buffer with optional alpha blending.

    Args:
        buffer: Target numpy array (height, width, 3)
        image: Source image array (height, width, 3 or 4)
        x: Top-left x coordinate
        y: Top-left y coordinate
        alpha: Global alpha multiplier (0.0 to 1.0)
    """
    buf_h, buf_w = buffer.shape[:2]
    img_h, img_w = image.shape[:2]

    # Calculate visible region
    src_x1 = max(0, -x)
    src_y1 = max(0, -y)
    src_x2 = min(img_w, buf_w - x)
    src_y2 = min(img_h, buf_h - y)

    dst_x1 = max(0, x)
    dst_y1 = max(0, y)
    dst_x2 = dst_x1 + (src_x2 - src_x1)
    dst_y2 = dst_y1 + (src_y2 - src_y1)

    if src_x2 <= src_x1 or src_y2 <= src_y1:
        return  # Nothing to draw

    src_region = image[src_y1:src_y2, src_x1:src_x2]

    if alpha >= 1.0 and image.shape[2] == 3:
        # Fast path: direct copy
        buffer[dst_y1:dst_y2, dst_x1:dst_x2] = src_region
    else:
        dst_region = buffer[dst_y1:dst_y2, dst_x1:dst_x2]

        if image.shape[2] == 4:
            # RGBA image with per-pixel alpha
            img_alpha = (src_region[:, :, 3:4] / 255.0) * alpha
            src_rgb = src_region[:, :, :3]
        else:
            # RGB image with global alpha only
            img_alpha = alpha
            src_rgb = src_region

        blended = (src_rgb * img_alpha + dst_region * (1 - img_alpha)).astype(np.uint8)
        buffer[dst_y1:dst_y2, dst_x1:dst_x2] = blended
