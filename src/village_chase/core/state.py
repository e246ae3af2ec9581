"""
Phase state machine for the village chase.

Phases:
    START: Title panel, waiting for the first start action
    PLAYING: A run is live and the simulation ticks
    GAMEOVER: The runner was caught, waiting for a retry
"""

from enum import Enum, auto
from typing import Callable
import logging

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    """Game phases."""
    START = auto()
    PLAYING = auto()
    GAMEOVER = auto()


PhaseListener = Callable[[GamePhase, GamePhase], None]


class StateMachine:
    """
    Owns the current game phase and its legal transitions.

    Illegal transitions are rejected (logged, return False) rather than
    raised: an action that does not fit the current phase is a no-op.
    """

    VALID_TRANSITIONS: list[tuple[GamePhase, GamePhase]] = [
        (GamePhase.START, GamePhase.PLAYING),
        (GamePhase.PLAYING, GamePhase.GAMEOVER),
        (GamePhase.GAMEOVER, GamePhase.PLAYING),  # Retry
    ]

    def __init__(self, initial_phase: GamePhase = GamePhase.START) -> None:
        self._phase = initial_phase
        self._listeners: list[PhaseListener] = []
        self._valid_transitions = set(self.VALID_TRANSITIONS)
        logger.info(f"StateMachine initialized with phase: {initial_phase.name}")

    @property
    def phase(self) -> GamePhase:
        """Get current phase."""
        return self._phase

    @property
    def is_playing(self) -> bool:
        return self._phase == GamePhase.PLAYING

    def can_transition(self, to_phase: GamePhase) -> bool:
        """Check if transition to given phase is valid."""
        return (self._phase, to_phase) in self._valid_transitions

    def transition(self, to_phase: GamePhase) -> bool:
        """
        Attempt to transition to a new phase.

        Args:
            to_phase: Target phase

        Returns:
            True if transition successful, False otherwise
        """
        if not self.can_transition(to_phase):
            logger.warning(
                f"Invalid transition: {self._phase.name} -> {to_phase.name}"
            )
            return False

        old_phase = self._phase
        self._phase = to_phase

        logger.info(f"Phase transition: {old_phase.name} -> {to_phase.name}")
        self._notify(old_phase, to_phase)
        return True

    def add_listener(self, callback: PhaseListener) -> None:
        """Add a phase change listener."""
        self._listeners.append(callback)

    def remove_listener(self, callback: PhaseListener) -> None:
        """Remove a phase change listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, old_phase: GamePhase, new_phase: GamePhase) -> None:
        for listener in self._listeners:
            try:
                listener(old_phase, new_phase)
            except Exception as e:
                logger.error(f"Error in phase listener: {e}")
