"""
Headless host for the village chase.

Drives the controller from the scheduler's fixed 60 Hz timer instead of a
window, with a simple autoplay so a session finishes on its own. Useful
on machines without a display and for watching difficulty and the AI
collaborators from the log.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from village_chase.core.events import Event, EventType
from village_chase.core.state import GamePhase
from village_chase.game.controller import GameController
from village_chase.game.entities import RenderSnapshot
from village_chase.settings import HeadlessSettings

logger = logging.getLogger(__name__)


def should_autojump(snapshot: RenderSnapshot, lookahead: float) -> bool:
    """True when the nearest obstacle ahead of the runner is within lookahead px."""
    runner = snapshot.runner
    if runner.airborne:
        return False

    front = runner.x + runner.width
    ahead = [o for o in snapshot.obstacles if o.x + o.width > runner.x]
    if not ahead:
        return False

    nearest = min(ahead, key=lambda o: o.x)
    return nearest.x - front <= lookahead


@dataclass
class SessionResult:
    """Scores of every finished run in a headless session."""
    scores: List[int] = field(default_factory=list)
    high_score: int = 0
    commentary: List[str] = field(default_factory=list)
    capped_runs: int = 0


class HeadlessRunner:
    """Plays a fixed number of runs on the scheduler's timer."""

    def __init__(
        self,
        controller: GameController,
        settings: Optional[HeadlessSettings] = None,
    ) -> None:
        self.controller = controller
        self.settings = settings or HeadlessSettings()
        self._capped = False

        self.controller.event_bus.subscribe(EventType.FRAME, self._on_frame)

    def _on_frame(self, event: Event) -> None:
        snapshot: RenderSnapshot = event.data["snapshot"]

        if self.controller.scheduler.ticks >= self.settings.max_ticks:
            logger.warning(f"Run hit the {self.settings.max_ticks} tick cap, stopping")
            self._capped = True
            self.controller.scheduler.stop()
            return

        if self.settings.autoplay and should_autojump(snapshot, self.settings.jump_lookahead):
            self.controller.jump()

    async def play_run(self) -> Optional[int]:
        """Play one run to game over.

        Returns:
            Final score, or None if the run was stopped by the tick cap
        """
        self._capped = False
        if not self.controller.start():
            logger.error(f"Could not start a run from {self.controller.phase.name}")
            return None

        await self.controller.scheduler.run()

        if self._capped or self.controller.phase != GamePhase.GAMEOVER:
            return None

        await self.controller.wait_for_lookups()
        return self.controller.score

    async def run(self) -> SessionResult:
        """Load the backdrop, then play the configured number of runs."""
        result = SessionResult()

        image = await self.controller.load_background()
        logger.info("Background ready" if image else "No background, plain sky")

        for index in range(1, self.settings.runs + 1):
            score = await self.play_run()
            if score is None:
                result.capped_runs += 1
                # A capped run stays in PLAYING, nothing further can start
                break

            result.scores.append(score)
            result.high_score = self.controller.high_score
            result.commentary.append(self.controller.commentary)

            logger.info(
                f"Run {index}/{self.settings.runs}: score {score}, "
                f"high score {self.controller.high_score}"
            )
            logger.info(f"Commentary: {self.controller.commentary}")

        self.controller.shutdown()
        self.controller.event_bus.emit(Event(EventType.SHUTDOWN, source="headless"))
        return result
