"""Shared fixtures and fakes for the village chase tests."""

import asyncio
import random
from typing import List, Optional

import pytest

from village_chase.ai.client import GeminiClient
from village_chase.core.events import Event, EventBus, EventType
from village_chase.game.constants import OBSTACLE_Y, RUNNER_X
from village_chase.game.controller import GameController
from village_chase.game.entities import Obstacle, ObstacleKind, RunState
from village_chase.game.physics import PhysicsEngine


class FixedRandom(random.Random):
    """Random source that always rolls the same value."""

    def __init__(self, value: float = 0.0):
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class FakeCommentary:
    """Commentary provider recording the scores it was asked about."""

    def __init__(self, text: Optional[str] = "দারুণ দৌড়!", error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.scores: List[int] = []
        self.gate: Optional[asyncio.Event] = None

    async def __call__(self, score: int) -> Optional[str]:
        self.scores.append(score)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.text


class FakeBackground:
    """Background provider returning fixed bytes."""

    def __init__(self, image: Optional[bytes] = b"not-really-a-png", error: Optional[Exception] = None):
        self.image = image
        self.error = error
        self.calls = 0

    async def __call__(self) -> Optional[bytes]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.image


class FakeGeminiClient:
    """Stand-in for GeminiClient with canned answers."""

    def __init__(self, available: bool = True, text: Optional[str] = None,
                 image: Optional[bytes] = None, error: Optional[Exception] = None):
        self.is_available = available
        self.text = text
        self.image = image
        self.error = error
        self.prompts: List[str] = []
        self.aspect_ratios: List[str] = []

    async def generate_text(self, prompt: str, **kwargs) -> Optional[str]:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text

    async def generate_image(self, prompt: str, aspect_ratio: str = "16:9", **kwargs) -> Optional[bytes]:
        self.prompts.append(prompt)
        self.aspect_ratios.append(aspect_ratio)
        if self.error is not None:
            raise self.error
        return self.image


def plant_obstacle(run: RunState, x: float = RUNNER_X + 10,
                   kind: ObstacleKind = ObstacleKind.ROCK) -> Obstacle:
    """Put an obstacle where the next tick moves it into the runner."""
    obstacle = Obstacle(id=run.frame_count, x=x, y=float(OBSTACLE_Y), kind=kind)
    run.obstacles.append(obstacle)
    return obstacle


def tick_n(controller: GameController, n: int) -> None:
    for _ in range(n):
        controller.tick()


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def commentary():
    return FakeCommentary()


@pytest.fixture
def background():
    return FakeBackground()


@pytest.fixture
def controller(event_bus, commentary, background):
    return GameController(
        event_bus=event_bus,
        commentary_provider=commentary,
        background_provider=background,
        engine=PhysicsEngine(rng=FixedRandom(0.0)),
    )


@pytest.fixture
def recorded(event_bus):
    """Every event emitted on the bus, in order."""
    events: List[Event] = []
    event_bus.subscribe_all(events.append)
    return events


def of_type(events: List[Event], event_type: EventType) -> List[Event]:
    return [e for e in events if e.type == event_type]


@pytest.fixture
def fresh_gemini_client():
    """Drop the Gemini singleton before and after the test."""
    import village_chase.ai.client as client_module

    GeminiClient._instance = None
    client_module._client = None
    yield
    GeminiClient._instance = None
    client_module._client = None
