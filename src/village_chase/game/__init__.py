"""Simulation core: entities, physics, difficulty and the frame scheduler.

The GameController lives in village_chase.game.controller and is imported
from there directly, since it pulls in the AI collaborators.
"""

from village_chase.game.entities import (
    Character,
    EntityView,
    Obstacle,
    ObstacleKind,
    RenderSnapshot,
    RunState,
)
from village_chase.game.physics import PhysicsEngine, TickResult
from village_chase.game.scheduler import FrameScheduler

__all__ = [
    "Character",
    "EntityView",
    "Obstacle",
    "ObstacleKind",
    "RenderSnapshot",
    "RunState",
    "PhysicsEngine",
    "TickResult",
    "FrameScheduler",
]
