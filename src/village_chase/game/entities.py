"""Entity model: characters, obstacles and the per-run aggregate."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from village_chase.game.constants import (
    CHASER_HEIGHT,
    CHASER_REST_Y,
    CHASER_WIDTH,
    CHASER_X,
    RUNNER_HEIGHT,
    RUNNER_REST_Y,
    RUNNER_WIDTH,
    RUNNER_X,
)


class ObstacleKind(Enum):
    """Obstacle kinds with their collision box (width, height)."""

    ROCK = ("rock", 50, 45)
    PUDDLE = ("puddle", 50, 45)
    COW = ("cow", 70, 55)

    def __init__(self, label: str, width: int, height: int):
        self.label = label
        self.width = width
        self.height = height


@dataclass
class Character:
    """A character with a fixed collision box and vertical motion."""

    x: float
    y: float
    width: int
    height: int
    rest_y: float
    velocity_y: float = 0.0
    is_jumping: bool = False

    @property
    def box(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


def make_runner() -> Character:
    """The player character standing on the path."""
    return Character(
        x=RUNNER_X,
        y=RUNNER_REST_Y,
        width=RUNNER_WIDTH,
        height=RUNNER_HEIGHT,
        rest_y=RUNNER_REST_Y,
    )


def make_chaser() -> Character:
    """The pursuer standing on the path behind the runner."""
    return Character(
        x=CHASER_X,
        y=CHASER_REST_Y,
        width=CHASER_WIDTH,
        height=CHASER_HEIGHT,
        rest_y=CHASER_REST_Y,
    )


@dataclass
class Obstacle:
    """An obstacle scrolling towards the runner.

    The id is the frame index at which it spawned, so it is unique and
    increasing within a run.
    """

    id: int
    x: float
    y: float
    kind: ObstacleKind

    @property
    def width(self) -> int:
        return self.kind.width

    @property
    def height(self) -> int:
        return self.kind.height

    @property
    def box(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


@dataclass
class RunState:
    """Everything that lives for exactly one run.

    A new run always gets a new instance from fresh(); nothing is cleared
    in place.
    """

    runner: Character = field(default_factory=make_runner)
    chaser: Character = field(default_factory=make_chaser)
    obstacles: List[Obstacle] = field(default_factory=list)
    bg_x: float = 0.0
    score: float = 0.0
    score_ticks: int = 0
    frame_count: int = 0
    last_obstacle_frame: int = 0
    reported_score: int = 0
    over: bool = False

    @classmethod
    def fresh(cls) -> "RunState":
        return cls()


@dataclass(frozen=True)
class EntityView:
    """Read-only box of a drawable entity."""

    x: float
    y: float
    width: int
    height: int
    kind: str = ""
    airborne: bool = False


@dataclass(frozen=True)
class RenderSnapshot:
    """What the presentation layer needs to draw one frame."""

    runner: EntityView
    chaser: EntityView
    obstacles: Tuple[EntityView, ...]
    bg_x: float
    score: int
    frame: int

    @classmethod
    def of(cls, state: RunState) -> "RenderSnapshot":
        r, c = state.runner, state.chaser
        return cls(
            runner=EntityView(r.x, r.y, r.width, r.height, "runner", r.is_jumping),
            chaser=EntityView(c.x, c.y, c.width, c.height, "chaser", c.is_jumping),
            obstacles=tuple(
                EntityView(o.x, o.y, o.width, o.height, o.kind.label)
                for o in state.obstacles
            ),
            bg_x=state.bg_x,
            score=state.reported_score,
            frame=state.frame_count,
        )
