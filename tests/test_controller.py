"""
Game Controller Tests

Phase flow, score and game-over reporting, high score, restart reset,
and the two fire-and-forget collaborator lookups.

Run with: pytest tests/test_controller.py -v
"""

import asyncio

import pytest

from village_chase.ai.commentary import (
    EMPTY_COMMENTARY,
    FALLBACK_COMMENTARY,
    INITIAL_COMMENTARY,
    STARTING_COMMENTARY,
)
from village_chase.core.events import Event, EventType, jump_event, start_event
from village_chase.core.state import GamePhase
from village_chase.game.constants import JUMP_FORCE, RUNNER_REST_Y
from village_chase.game.controller import GameController
from village_chase.game.physics import PhysicsEngine

from conftest import FakeBackground, FakeCommentary, FixedRandom, of_type, plant_obstacle, tick_n


def play_to(controller: GameController, ticks: int) -> None:
    """Tick a live run, then crash into a planted obstacle."""
    tick_n(controller, ticks)
    plant_obstacle(controller.run_state)
    controller.tick()


class TestInitialState:
    def test_defaults(self, controller):
        assert controller.phase == GamePhase.START
        assert controller.score == 0
        assert controller.high_score == 0
        assert controller.commentary == INITIAL_COMMENTARY
        assert controller.loading
        assert controller.background is None
        assert not controller.scheduler.is_running

    def test_jump_ignored_before_start(self, controller):
        assert not controller.jump()
        assert not controller.run_state.runner.is_jumping

    def test_tick_ignored_before_start(self, controller):
        controller.tick()
        assert controller.run_state.frame_count == 0


class TestStart:
    def test_start_enters_playing(self, controller, recorded):
        assert controller.start()

        assert controller.phase == GamePhase.PLAYING
        assert controller.commentary == STARTING_COMMENTARY
        assert controller.scheduler.is_running
        assert controller.runs_played == 1

        scores = of_type(recorded, EventType.SCORE_CHANGED)
        assert [e.data["score"] for e in scores] == [0]
        phases = of_type(recorded, EventType.PHASE_CHANGED)
        assert phases[0].data == {"old": GamePhase.START, "new": GamePhase.PLAYING}

    def test_start_while_playing_is_noop(self, controller):
        controller.start()
        tick_n(controller, 10)
        run = controller.run_state

        assert not controller.start()
        assert controller.run_state is run
        assert controller.runs_played == 1

    def test_playing_cannot_return_to_start(self, controller):
        controller.start()

        assert not controller.state_machine.transition(GamePhase.START)
        assert controller.phase == GamePhase.PLAYING
        assert controller.scheduler.is_running

    def test_start_pressed_event(self, controller, event_bus):
        event_bus.emit(start_event())
        assert controller.phase == GamePhase.PLAYING

    def test_scheduler_drives_ticks(self, controller):
        controller.start()
        assert controller.scheduler.pump()
        assert controller.run_state.frame_count == 1


class TestJump:
    def test_jump_applies_immediately(self, controller):
        controller.start()
        assert controller.jump()
        assert controller.run_state.runner.velocity_y == JUMP_FORCE

    def test_no_double_jump(self, controller):
        controller.start()
        controller.jump()
        controller.tick()
        velocity = controller.run_state.runner.velocity_y

        assert not controller.jump()
        assert controller.run_state.runner.velocity_y == velocity

    def test_jump_pressed_event(self, controller, event_bus):
        controller.start()
        event_bus.emit(jump_event())
        assert controller.run_state.runner.is_jumping


class TestScore:
    def test_score_reported_on_change_only(self, controller, recorded):
        controller.start()
        tick_n(controller, 50)

        scores = [e.data["score"] for e in of_type(recorded, EventType.SCORE_CHANGED)]
        assert scores == list(range(0, 11))
        assert controller.score == 10

    def test_frame_event_every_tick(self, controller, recorded):
        controller.start()
        tick_n(controller, 7)

        frames = of_type(recorded, EventType.FRAME)
        assert len(frames) == 7
        assert frames[-1].data["snapshot"].frame == 7

    def test_snapshot_matches_run(self, controller):
        controller.start()
        tick_n(controller, 12)
        snapshot = controller.snapshot()

        assert snapshot.frame == 12
        assert snapshot.score == 2
        assert snapshot.runner.y == RUNNER_REST_Y


class TestGameOver:
    def test_collision_ends_run(self, controller, recorded):
        controller.start()
        play_to(controller, 50)

        assert controller.phase == GamePhase.GAMEOVER
        assert controller.score == 10
        assert not controller.scheduler.is_running

        over = of_type(recorded, EventType.GAME_OVER)
        assert len(over) == 1
        assert over[0].data == {"score": 10, "high_score": 10, "new_high_score": True}

    def test_game_over_fires_once(self, controller, recorded):
        controller.start()
        play_to(controller, 5)
        tick_n(controller, 20)
        controller.scheduler.pump()

        assert len(of_type(recorded, EventType.GAME_OVER)) == 1

    def test_no_ticks_after_game_over(self, controller):
        controller.start()
        play_to(controller, 5)
        frame = controller.run_state.frame_count

        controller.tick()
        assert not controller.scheduler.pump()
        assert controller.run_state.frame_count == frame

    def test_jump_ignored_after_game_over(self, controller):
        controller.start()
        play_to(controller, 5)
        assert not controller.jump()

    def test_high_score_strictly_greater(self, controller, recorded):
        controller.start()
        play_to(controller, 50)
        assert controller.high_score == 10

        controller.start()
        play_to(controller, 50)
        controller.start()
        play_to(controller, 25)

        assert controller.high_score == 10
        flags = [e.data["new_high_score"] for e in of_type(recorded, EventType.GAME_OVER)]
        assert flags == [True, False, False]

        controller.start()
        play_to(controller, 60)
        assert controller.high_score == 12

    def test_restart_resets_run(self, controller):
        controller.start()
        controller.jump()
        tick_n(controller, 30)
        plant_obstacle(controller.run_state, x=900.0)
        controller.run_state.runner.y = RUNNER_REST_Y
        controller.run_state.runner.is_jumping = False
        plant_obstacle(controller.run_state)
        controller.tick()
        assert controller.phase == GamePhase.GAMEOVER
        old_run = controller.run_state

        assert controller.start()
        run = controller.run_state

        assert run is not old_run
        assert run.obstacles == []
        assert run.frame_count == 0
        assert run.score == 0
        assert run.bg_x == 0
        assert run.last_obstacle_frame == 0
        assert run.runner.y == RUNNER_REST_Y
        assert run.runner.velocity_y == 0
        assert not run.runner.is_jumping
        assert controller.score == 0
        assert controller.commentary == STARTING_COMMENTARY
        assert controller.high_score == 6

    def test_commentary_skipped_without_event_loop(self, controller, commentary):
        controller.start()
        play_to(controller, 5)

        assert controller.pending_lookups == 0
        assert commentary.scores == []
        assert controller.commentary == STARTING_COMMENTARY


class TestCommentary:
    """Game-over commentary is fetched without blocking the simulation."""

    def run_game(self, controller, ticks):
        async def scenario():
            controller.start()
            play_to(controller, ticks)
            assert controller.pending_lookups == 1
            await controller.wait_for_lookups()

        asyncio.run(scenario())

    def test_commentary_applied(self, controller, commentary, recorded):
        self.run_game(controller, 50)

        assert commentary.scores == [10]
        assert controller.commentary == commentary.text
        updates = [e.data["text"] for e in of_type(recorded, EventType.COMMENTARY_UPDATED)]
        assert updates == [STARTING_COMMENTARY, commentary.text]

    def test_failure_falls_back(self, event_bus, background):
        controller = GameController(
            event_bus=event_bus,
            commentary_provider=FakeCommentary(error=RuntimeError("quota")),
            background_provider=background,
            engine=PhysicsEngine(rng=FixedRandom(0.0)),
        )
        self.run_game(controller, 10)
        assert controller.commentary == FALLBACK_COMMENTARY

    def test_empty_answer(self, event_bus, background):
        controller = GameController(
            event_bus=event_bus,
            commentary_provider=FakeCommentary(text=""),
            background_provider=background,
            engine=PhysicsEngine(rng=FixedRandom(0.0)),
        )
        self.run_game(controller, 10)
        assert controller.commentary == EMPTY_COMMENTARY

    def test_stale_commentary_discarded(self, controller, commentary):
        async def scenario():
            commentary.gate = asyncio.Event()
            controller.start()
            play_to(controller, 50)

            # Let the lookup start, then retry before it answers
            await asyncio.sleep(0)
            controller.start()
            commentary.gate.set()
            await controller.wait_for_lookups()

        asyncio.run(scenario())

        assert commentary.scores == [10]
        assert controller.phase == GamePhase.PLAYING
        assert controller.commentary == STARTING_COMMENTARY

    def test_simulation_not_blocked_by_lookup(self, controller, commentary):
        async def scenario():
            commentary.gate = asyncio.Event()
            controller.start()
            play_to(controller, 5)
            controller.start()
            tick_n(controller, 20)
            assert controller.run_state.frame_count == 20
            commentary.gate.set()
            await controller.wait_for_lookups()

        asyncio.run(scenario())

    def test_shutdown_cancels_lookups(self, controller, commentary):
        async def scenario():
            commentary.gate = asyncio.Event()
            controller.start()
            play_to(controller, 5)
            await asyncio.sleep(0)
            controller.shutdown()
            assert controller.pending_lookups == 0
            await asyncio.sleep(0)

        asyncio.run(scenario())
        assert controller.commentary == STARTING_COMMENTARY


class TestBackground:
    def test_background_loaded(self, controller, background, recorded):
        image = asyncio.run(controller.load_background())

        assert image == background.image
        assert controller.background == background.image
        assert not controller.loading
        ready = of_type(recorded, EventType.BACKGROUND_READY)
        assert ready[0].data["image"] == background.image

    def test_background_requested_once(self, controller, background):
        asyncio.run(controller.load_background())
        asyncio.run(controller.load_background())
        assert background.calls == 1

    def test_background_failure_uses_sky(self, event_bus, commentary):
        controller = GameController(
            event_bus=event_bus,
            commentary_provider=commentary,
            background_provider=FakeBackground(error=ConnectionError("offline")),
        )
        assert asyncio.run(controller.load_background()) is None
        assert controller.background is None
        assert not controller.loading

    def test_request_background_fire_and_forget(self, controller, background):
        async def scenario():
            controller.request_background()
            assert controller.loading
            await controller.wait_for_lookups()

        asyncio.run(scenario())
        assert not controller.loading
        assert background.calls == 1

    def test_play_while_loading(self, controller):
        controller.start()
        tick_n(controller, 3)
        assert controller.loading
        assert controller.run_state.frame_count == 3
