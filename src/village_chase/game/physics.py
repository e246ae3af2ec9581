"""Physics and spawn engine.

One call to PhysicsEngine.step() advances a RunState by exactly one tick:
jump, gravity, chaser bob, background scroll, spawning, obstacle motion
with retirement and collision, then score. Everything is in place on the
given state; the engine itself holds nothing but its random source.
"""

import math
import random
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from village_chase.game.constants import (
    CANVAS_WIDTH,
    CHASER_BOB_AMPLITUDE,
    CHASER_BOB_FREQUENCY,
    GRAVITY,
    HITBOX_PAD,
    JUMP_FORCE,
    OBSTACLE_Y,
    SCORE_PER_TICK,
)
from village_chase.game.difficulty import (
    choose_obstacle_kind,
    displayed_score,
    scroll_speed,
    spawn_threshold,
)
from village_chase.game.entities import Character, Obstacle, RunState

logger = logging.getLogger(__name__)

Box = Tuple[float, float, float, float]


@dataclass
class TickResult:
    """Outcome of one engine tick."""

    score_changed: Optional[int] = None
    game_over: bool = False
    final_score: Optional[int] = None
    spawned: Optional[Obstacle] = None
    collided_with: Optional[Obstacle] = None


def request_jump(character: Character) -> bool:
    """Apply the jump impulse if the character is on the ground.

    Returns:
        True if the jump was honored, False if it was dropped (airborne)
    """
    if character.is_jumping:
        return False
    character.velocity_y = JUMP_FORCE
    character.is_jumping = True
    return True


def integrate_character(character: Character) -> bool:
    """Semi-implicit Euler step with the landing clamp.

    Returns:
        True if the clamp engaged this tick
    """
    character.velocity_y += GRAVITY
    character.y += character.velocity_y

    if character.y > character.rest_y:
        character.y = character.rest_y
        character.velocity_y = 0.0
        character.is_jumping = False
        return True
    return False


def bob_chaser(chaser: Character, frame: int) -> None:
    # Purely visual, never feeds collision or score
    chaser.y = chaser.rest_y + math.sin(frame * CHASER_BOB_FREQUENCY) * CHASER_BOB_AMPLITUDE


def scroll_background(bg_x: float, speed: float) -> float:
    """Move the backdrop left, wrapping after one full field width."""
    bg_x -= speed
    if bg_x <= -CANVAS_WIDTH:
        bg_x = 0.0
    return bg_x


def should_spawn(frame: int, last_spawn_frame: int, score: float) -> bool:
    return frame - last_spawn_frame > spawn_threshold(score)


def spawn_obstacle(frame: int, roll: float) -> Obstacle:
    """New obstacle at the right edge of the field, id = spawn frame."""
    return Obstacle(
        id=frame,
        x=float(CANVAS_WIDTH),
        y=float(OBSTACLE_Y),
        kind=choose_obstacle_kind(roll),
    )


def hitbox_overlap(runner: Box, obstacle: Box, pad: float = HITBOX_PAD) -> bool:
    """AABB test with the runner box shrunk inward by pad on every side.

    Only the runner is padded. The obstacle box is deliberately left
    unpadded and is tested at its drawn size.
    """
    rx, ry, rw, rh = runner
    ox, oy, ow, oh = obstacle
    return (
        rx + pad < ox + ow
        and rx + rw - pad > ox
        and ry + pad < oy + oh
        and ry + rh - pad > oy
    )


def advance_obstacles(
    obstacles: List[Obstacle],
    speed: float,
    runner: Character,
) -> Tuple[List[Obstacle], Optional[Obstacle]]:
    """Move every obstacle left and drop the retired ones.

    An obstacle is retired when it is fully past the left edge or when it
    hits the runner. Only the first hit is reported.

    Returns:
        (survivors in spawn order, obstacle that hit the runner or None)
    """
    survivors: List[Obstacle] = []
    hit: Optional[Obstacle] = None

    for obstacle in obstacles:
        obstacle.x -= speed

        if hit is None and hitbox_overlap(runner.box, obstacle.box):
            hit = obstacle
            continue

        if obstacle.x <= -obstacle.width:
            continue

        survivors.append(obstacle)

    return survivors, hit


class PhysicsEngine:
    """Advances a run by one tick at a time."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def request_jump(self, character: Character) -> bool:
        """Honor a jump input immediately, outside of a tick."""
        return request_jump(character)

    def step(self, state: RunState, jump_requested: bool = False) -> TickResult:
        """Advance the run by exactly one tick.

        Args:
            state: Run to mutate in place
            jump_requested: Pending jump input for this tick

        Returns:
            What happened during the tick
        """
        result = TickResult()
        if state.over:
            return result

        state.frame_count += 1
        speed = scroll_speed(state.score)

        if jump_requested:
            request_jump(state.runner)

        integrate_character(state.runner)
        bob_chaser(state.chaser, state.frame_count)
        state.bg_x = scroll_background(state.bg_x, speed)

        if should_spawn(state.frame_count, state.last_obstacle_frame, state.score):
            obstacle = spawn_obstacle(state.frame_count, self._rng.random())
            state.obstacles.append(obstacle)
            state.last_obstacle_frame = state.frame_count
            result.spawned = obstacle
            logger.debug(f"Spawned {obstacle.kind.label} #{obstacle.id}")

        state.obstacles, hit = advance_obstacles(state.obstacles, speed, state.runner)
        if hit is not None:
            state.over = True
            result.game_over = True
            result.final_score = displayed_score(state.score)
            result.collided_with = hit
            return result

        state.score_ticks += 1
        # Derived from the tick count so floor() lands exactly on whole numbers
        state.score = state.score_ticks * SCORE_PER_TICK

        shown = displayed_score(state.score)
        if shown != state.reported_score:
            state.reported_score = shown
            result.score_changed = shown

        return result
