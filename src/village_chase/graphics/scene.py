"""Scene renderer: draws one RenderSnapshot into a frame buffer.

Pure presentation. Nothing here reads or writes simulation state beyond
the snapshot it is handed.
"""

import math
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from village_chase.game.constants import CANVAS_HEIGHT, CANVAS_WIDTH, GROUND_Y
from village_chase.game.entities import EntityView, RenderSnapshot
from village_chase.graphics.primitives import (
    Buffer,
    draw_circle,
    draw_ellipse,
    draw_image,
    draw_line,
    draw_polygon,
    draw_rect,
    fill,
    new_buffer,
)

# Palette
SKY = (186, 230, 253)
MUD = (113, 63, 18)
MUD_DETAIL = (69, 26, 3)
SKIN = (254, 226, 226)
SAREE = (6, 95, 70)
SAREE_GOLD = (250, 204, 21)
SILVER_HAIR = (148, 163, 184)
GLASSES = (51, 65, 85)
KURTA = (255, 255, 255)
VEST = (234, 88, 12)
WHITE_HAIR = (241, 245, 249)
BEARD = (248, 250, 252)
BAMBOO = (133, 77, 14)
BAMBOO_NODE = (66, 32, 6)
PUDDLE = (37, 99, 235)
POT = (194, 65, 12)
POT_RIM = (234, 88, 12)
COW_BODY = (250, 250, 245)
COW_SPOT = (30, 30, 30)
COW_NOSE = (244, 164, 170)

BACKGROUND_ALPHA = 0.9
STRIDE_FREQUENCY = 0.25  # radians per frame for the running legs
STICK_SWING_FREQUENCY = 0.35


class SceneRenderer:
    """Draws the backdrop, path, obstacles and both characters."""

    def __init__(self, width: int = CANVAS_WIDTH, height: int = CANVAS_HEIGHT):
        self.width = width
        self.height = height
        self._buffer = new_buffer(width, height)

    def render(
        self,
        buffer: Optional[Buffer],
        snapshot: RenderSnapshot,
        background: Optional[NDArray[np.uint8]] = None,
    ) -> Buffer:
        """Render a frame.

        Args:
            buffer: Target buffer, None draws into the renderer's own
            snapshot: Entity positions to draw
            background: Decoded sky image (GROUND_Y tall) or None for plain sky

        Returns:
            The buffer drawn into
        """
        buf = buffer if buffer is not None else self._buffer
        frame = snapshot.frame

        self._draw_backdrop(buf, snapshot.bg_x, background)
        self._draw_path(buf, snapshot.bg_x)

        for obstacle in snapshot.obstacles:
            self._draw_obstacle(buf, obstacle)

        self._draw_chaser(buf, snapshot.chaser, frame)
        self._draw_runner(buf, snapshot.runner, frame)
        return buf

    def _draw_backdrop(
        self,
        buf: Buffer,
        bg_x: float,
        background: Optional[NDArray[np.uint8]],
    ) -> None:
        if background is None:
            fill(buf, SKY)
            return

        # Two copies side by side make the wrap seamless
        fill(buf, (255, 255, 255))
        x = int(bg_x)
        draw_image(buf, background, x, 0, alpha=BACKGROUND_ALPHA)
        draw_image(buf, background, x + self.width, 0, alpha=BACKGROUND_ALPHA)

    def _draw_path(self, buf: Buffer, bg_x: float) -> None:
        draw_rect(buf, 0, GROUND_Y, self.width, self.height - GROUND_Y, MUD)

        for i in range(0, self.width, 100):
            x_pos = int(i + bg_x) % self.width
            draw_rect(buf, x_pos, GROUND_Y + 10, 40, 5, MUD_DETAIL)
            draw_rect(buf, (x_pos + 50) % self.width, GROUND_Y + 30, 30, 4, MUD_DETAIL)

    def _draw_obstacle(self, buf: Buffer, o: EntityView) -> None:
        x, y = int(o.x), int(o.y)

        if o.kind == "cow":
            self._draw_cow(buf, x, y)
        elif o.kind == "puddle":
            draw_ellipse(buf, x + o.width / 2, y + o.height / 2, o.width / 2, o.height / 4, PUDDLE)
        else:
            # Clay pot
            draw_circle(buf, x + 25, y + 30, 20, POT)
            draw_rect(buf, x + 15, y + 5, 20, 10, POT_RIM)

    def _draw_cow(self, buf: Buffer, x: int, y: int) -> None:
        # Facing left, towards the runner
        for leg_x in (x + 20, x + 28, x + 52, x + 60):
            draw_rect(buf, leg_x, y + 38, 5, 17, COW_BODY)
        draw_rect(buf, x + 18, y + 14, 48, 26, COW_BODY)
        draw_circle(buf, x + 34, y + 22, 6, COW_SPOT)
        draw_circle(buf, x + 54, y + 30, 5, COW_SPOT)
        draw_rect(buf, x + 2, y + 8, 18, 18, COW_BODY)
        draw_rect(buf, x, y + 18, 10, 8, COW_NOSE)
        draw_rect(buf, x + 6, y + 2, 3, 7, COW_SPOT)
        draw_rect(buf, x + 14, y + 2, 3, 7, COW_SPOT)
        draw_line(buf, x + 66, y + 16, x + 69, y + 34, COW_SPOT)

    def _draw_runner(self, buf: Buffer, r: EntityView, frame: int) -> None:
        ox, oy = int(r.x), int(r.y)
        stride = math.sin(frame * STRIDE_FREQUENCY)
        leg_move = 0 if r.airborne else int(stride * 12)
        body_bob = 0 if r.airborne else int(abs(stride) * 4)

        # Legs
        draw_rect(buf, ox + 15, oy + 75 + leg_move, 12, 20, SKIN)
        draw_rect(buf, ox + 35, oy + 75 - leg_move, 12, 20, SKIN)

        # Saree with golden stripes
        draw_polygon(buf, [(ox + 5, oy + 85), (ox + 55, oy + 85), (ox + 45, oy + 15), (ox + 15, oy + 15)], SAREE)
        for i in range(3):
            draw_line(buf, ox + 10, oy + 30 + i * 15, ox + 50, oy + 40 + i * 15, SAREE_GOLD)

        # Arms
        draw_rect(buf, ox, oy + 30 + body_bob, 10, 25, SKIN)
        draw_rect(buf, ox + 50, oy + 30 - body_bob, 10, 25, SKIN)

        # Head, silver hair and bun
        draw_circle(buf, ox + 30, oy, 22, SKIN)
        draw_circle(buf, ox + 30, oy - 5, 23, SILVER_HAIR, upper_only=True)
        draw_circle(buf, ox + 48, oy, 10, SILVER_HAIR)

        # Glasses
        draw_rect(buf, ox + 18, oy - 4, 10, 8, GLASSES, filled=False, thickness=2)
        draw_rect(buf, ox + 32, oy - 4, 10, 8, GLASSES, filled=False, thickness=2)
        draw_line(buf, ox + 28, oy, ox + 32, oy, GLASSES, thickness=2)

    def _draw_chaser(self, buf: Buffer, c: EntityView, frame: int) -> None:
        ox, oy = int(c.x), int(c.y)
        leg_move = int(math.sin(frame * STRIDE_FREQUENCY) * 15)

        # Legs
        draw_rect(buf, ox + 15, oy + 80 + leg_move, 14, 20, BEARD)
        draw_rect(buf, ox + 40, oy + 80 - leg_move, 14, 20, BEARD)

        # Kurta and saffron vest
        draw_rect(buf, ox + 10, oy + 30, 50, 60, KURTA)
        draw_rect(buf, ox + 10, oy + 30, 50, 40, VEST)

        # Arm
        draw_rect(buf, ox - 5, oy + 40 + leg_move // 2, 12, 28, SKIN)

        # Head, beard, hair
        draw_circle(buf, ox + 35, oy + 5, 22, SKIN)
        draw_polygon(buf, _beard_outline(ox, oy), BEARD)
        draw_circle(buf, ox + 35, oy - 2, 23, WHITE_HAIR, upper_only=True)

        self._draw_stick(buf, ox + 55, oy + 50, frame)

    def _draw_stick(self, buf: Buffer, px: int, py: int, frame: int) -> None:
        angle = -0.8 + math.sin(frame * STICK_SWING_FREQUENCY) * 0.5
        cos_a, sin_a = math.cos(angle), math.sin(angle)

        def rotate(x: float, y: float) -> tuple:
            return (int(px + x * cos_a - y * sin_a), int(py + x * sin_a + y * cos_a))

        base = rotate(5, 0)
        tip = rotate(5, -110)
        draw_line(buf, base[0], base[1], tip[0], tip[1], BAMBOO, thickness=10)

        for i in range(5):
            a = rotate(0, -22 * i)
            b = rotate(10, -22 * i)
            draw_line(buf, a[0], a[1], b[0], b[1], BAMBOO_NODE, thickness=2)


def _beard_outline(ox: int, oy: int, steps: int = 12) -> list:
    """Quadratic curve from the chin corners down through the beard tip."""
    p0, p1, p2 = (ox + 15, oy + 10), (ox + 35, oy + 45), (ox + 55, oy + 10)
    points = []
    for i in range(steps + 1):
        t = i / steps
        x = (1 - t) ** 2 * p0[0] + 2 * (1 - t) * t * p1[0] + t ** 2 * p2[0]
        y = (1 - t) ** 2 * p0[1] + 2 * (1 - t) * t * p1[1] + t ** 2 * p2[1]
        points.append((x, y))
    return points
