"""Top-level game controller.

Owns the phase state machine, the live RunState, the high score and the
display text, and wires the physics engine to the frame scheduler. The
two Gemini lookups run as fire-and-forget tasks whose results only ever
write display values; the simulation never waits on them.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

from village_chase.ai.background import BackgroundService
from village_chase.ai.commentary import (
    CommentaryService,
    EMPTY_COMMENTARY,
    FALLBACK_COMMENTARY,
    INITIAL_COMMENTARY,
    STARTING_COMMENTARY,
)
from village_chase.core.events import Event, EventBus, EventType
from village_chase.core.state import GamePhase, StateMachine
from village_chase.game.entities import RenderSnapshot, RunState
from village_chase.game.physics import PhysicsEngine
from village_chase.game.scheduler import FrameScheduler

logger = logging.getLogger(__name__)

CommentaryProvider = Callable[[int], Awaitable[Optional[str]]]
BackgroundProvider = Callable[[], Awaitable[Optional[bytes]]]


class GameController:
    """Start/jump actions in, score, snapshots and display text out.

    Events emitted on the bus:
        PHASE_CHANGED: {"old", "new"}
        SCORE_CHANGED: {"score"} only when the floored score changes
        FRAME: {"snapshot"} after every simulated tick
        GAME_OVER: {"score", "high_score", "new_high_score"} once per run
        COMMENTARY_UPDATED: {"text"}
        BACKGROUND_READY: {"image"} (None means use the plain sky)
    """

    def __init__(
        self,
        event_bus: Optional[EventBus] = None,
        commentary_provider: Optional[CommentaryProvider] = None,
        background_provider: Optional[BackgroundProvider] = None,
        engine: Optional[PhysicsEngine] = None,
        fps: int = 60,
    ) -> None:
        self.event_bus = event_bus or EventBus()
        self.state_machine = StateMachine()
        self.engine = engine or PhysicsEngine()
        self.scheduler = FrameScheduler(self.tick, fps=fps)

        self._commentary_provider = commentary_provider or CommentaryService()
        self._background_provider = background_provider or BackgroundService()

        self._run = RunState.fresh()
        self._score = 0
        self._high_score = 0
        self._runs_played = 0
        self._commentary = INITIAL_COMMENTARY
        self._background: Optional[bytes] = None
        self._background_requested = False
        self._loading = True

        # Bumped on every run start, tags commentary requests
        self._generation = 0
        self._pending: Set[asyncio.Task] = set()

        self.state_machine.add_listener(self._on_phase_change)
        self.event_bus.subscribe(EventType.START_PRESSED, self._on_start_pressed)
        self.event_bus.subscribe(EventType.JUMP_PRESSED, self._on_jump_pressed)

        logger.info("GameController created")

    # Read side

    @property
    def phase(self) -> GamePhase:
        return self.state_machine.phase

    @property
    def score(self) -> int:
        """Floored score of the current (or last finished) run."""
        return self._score

    @property
    def high_score(self) -> int:
        return self._high_score

    @property
    def runs_played(self) -> int:
        return self._runs_played

    @property
    def commentary(self) -> str:
        return self._commentary

    @property
    def background(self) -> Optional[bytes]:
        return self._background

    @property
    def loading(self) -> bool:
        """True until the background lookup has resolved."""
        return self._loading

    @property
    def run_state(self) -> RunState:
        return self._run

    @property
    def pending_lookups(self) -> int:
        return len(self._pending)

    def snapshot(self) -> RenderSnapshot:
        return RenderSnapshot.of(self._run)

    # Actions

    def start(self) -> bool:
        """Start a run from START, or retry from GAMEOVER.

        Returns:
            True if a new run started, False if the action was a no-op
        """
        if not self.state_machine.can_transition(GamePhase.PLAYING):
            logger.debug(f"Start ignored in phase {self.phase.name}")
            return False

        self._run = RunState.fresh()
        self._score = 0
        self._generation += 1
        self._runs_played += 1
        self._set_commentary(STARTING_COMMENTARY)

        self.state_machine.transition(GamePhase.PLAYING)
        self.event_bus.emit(Event(EventType.SCORE_CHANGED, data={"score": 0}, source="controller"))
        logger.info(f"Run {self._runs_played} started")
        return True

    def jump(self) -> bool:
        """Jump input. Only honored while PLAYING and on the ground."""
        if not self.state_machine.is_playing:
            return False
        return self.engine.request_jump(self._run.runner)

    def tick(self) -> None:
        """Advance the live run by one tick."""
        if not self.state_machine.is_playing:
            return

        result = self.engine.step(self._run)

        if result.score_changed is not None:
            self._score = result.score_changed
            self.event_bus.emit(Event(
                EventType.SCORE_CHANGED,
                data={"score": self._score},
                source="controller",
            ))

        self.event_bus.emit(Event(
            EventType.FRAME,
            data={"snapshot": self.snapshot()},
            source="controller",
        ))

        if result.game_over:
            self._end_game(result.final_score)

    async def load_background(self) -> Optional[bytes]:
        """Look up the backdrop. Only the first call per controller asks."""
        if self._background_requested:
            return self._background
        self._background_requested = True

        try:
            image = await self._background_provider()
        except Exception as e:
            logger.warning(f"Background lookup failed, using plain sky: {e}")
            image = None

        self._background = image or None
        self._loading = False
        self.event_bus.emit(Event(
            EventType.BACKGROUND_READY,
            data={"image": self._background},
            source="controller",
        ))
        return self._background

    def request_background(self) -> None:
        """Fire-and-forget variant of load_background()."""
        self._spawn(self.load_background(), "background")

    async def wait_for_lookups(self) -> None:
        """Await every collaborator lookup still in flight."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def shutdown(self) -> None:
        """Stop ticking and drop outstanding lookups."""
        self.scheduler.stop()
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()
        logger.info("GameController shut down")

    # Internals

    def _end_game(self, final_score: int) -> None:
        if not self.state_machine.transition(GamePhase.GAMEOVER):
            return

        self._score = final_score
        new_high = final_score > self._high_score
        if new_high:
            self._high_score = final_score

        logger.info(f"Game over: score {final_score}, high score {self._high_score}")
        self.event_bus.emit(Event(
            EventType.GAME_OVER,
            data={
                "score": final_score,
                "high_score": self._high_score,
                "new_high_score": new_high,
            },
            source="controller",
        ))

        self._spawn(self._fetch_commentary(final_score, self._generation), "commentary")

    async def _fetch_commentary(self, score: int, generation: int) -> None:
        try:
            text = await self._commentary_provider(score)
        except Exception as e:
            logger.warning(f"Commentary lookup failed: {e}")
            text = FALLBACK_COMMENTARY

        if not text:
            text = EMPTY_COMMENTARY

        if generation != self._generation:
            logger.debug(f"Discarding commentary from run generation {generation}")
            return

        self._set_commentary(text)

    def _set_commentary(self, text: str) -> None:
        self._commentary = text
        self.event_bus.emit(Event(
            EventType.COMMENTARY_UPDATED,
            data={"text": text},
            source="controller",
        ))

    def _spawn(self, coro: Awaitable[object], what: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, {what} lookup skipped")
            coro.close()
            return

        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _on_phase_change(self, old: GamePhase, new: GamePhase) -> None:
        if new == GamePhase.PLAYING:
            self.scheduler.start()
        elif old == GamePhase.PLAYING:
            self.scheduler.stop()

        self.event_bus.emit(Event(
            EventType.PHASE_CHANGED,
            data={"old": old, "new": new},
            source="controller",
        ))

    def _on_start_pressed(self, event: Event) -> None:
        self.start()

    def _on_jump_pressed(self, event: Event) -> None:
        self.jump()
