"""
Game window using pygame.

Desktop host for the village chase: renders the scene buffer, overlays
the HUD and phase panels, and turns keyboard and mouse input into bus
events for the controller.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pygame

from ..ai.background import decode_background
from ..core.events import Event, EventBus, EventType
from ..core.state import GamePhase
from ..game.constants import CANVAS_HEIGHT, CANVAS_WIDTH
from ..game.controller import GameController
from ..graphics.primitives import new_buffer
from ..graphics.scene import SceneRenderer
from ..settings import DisplaySettings

logger = logging.getLogger(__name__)


@dataclass
class WindowConfig:
    """Game window configuration."""
    width: int = 960
    height: int = 600
    title: str = "Village Chase"
    fullscreen: bool = False
    fps: int = 60

    # Colors
    bg_color: tuple[int, int, int] = (20, 20, 30)
    panel_color: tuple[int, int, int] = (40, 40, 50)
    text_color: tuple[int, int, int] = (200, 200, 220)
    accent_color: tuple[int, int, int] = (250, 204, 21)

    @classmethod
    def from_settings(cls, display: DisplaySettings) -> "WindowConfig":
        return cls(
            width=max(display.window_width, CANVAS_WIDTH),
            height=max(display.window_height, CANVAS_HEIGHT),
            title=display.title,
            fullscreen=display.fullscreen,
            fps=display.fps,
        )


# Fonts with Bengali glyphs, tried in order
BENGALI_FONT_PATHS = [
    "/usr/share/fonts/truetype/noto/NotoSansBengali-Regular.ttf",
    "/usr/share/fonts/opentype/noto/NotoSansBengali-Regular.ttf",
    "/usr/share/fonts/truetype/lohit-bengali/Lohit-Bengali.ttf",
    "/System/Library/Fonts/Supplemental/Bangla Sangam MN.ttc",
    "/System/Library/Fonts/KohinoorBangla.ttc",
]
BENGALI_SYSTEM_FONTS = ["Noto Sans Bengali", "Kohinoor Bangla", "Lohit Bengali", "Vrinda"]

JUMP_KEYS = (pygame.K_SPACE, pygame.K_UP, pygame.K_w)
START_KEYS = (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE)


class GameWindow:
    """
    Main game window.

    Keyboard Mapping:
        SPACE / UP / W: Jump (start or retry on the panels)
        ENTER: Start / retry
        Left mouse: Jump, or start / retry on the panels
        D: Toggle debug panel
        L: Toggle log viewer
        S: Capture screenshot
        ESC / Q: Exit
    """

    def __init__(
        self,
        controller: GameController,
        config: WindowConfig | None = None,
    ) -> None:
        self.config = config or WindowConfig()
        self.controller = controller
        self.event_bus: EventBus = controller.event_bus

        # Pygame setup
        self._screen: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._running = False
        self._frame_count = 0
        self._show_debug = False

        # Scene
        self._renderer = SceneRenderer()
        self._buffer = new_buffer(CANVAS_WIDTH, CANVAS_HEIGHT)
        self._background: Optional[np.ndarray] = None
        self._canvas_rect = pygame.Rect(0, 0, CANVAS_WIDTH, CANVAS_HEIGHT)

        # Fonts
        self._font: pygame.font.Font | None = None
        self._small_font: pygame.font.Font | None = None
        self._big_font: pygame.font.Font | None = None

        # Log viewer
        self._show_log = False
        self._log_buffer: list[str] = []
        self._max_log_lines = 20
        self._log_handler: logging.Handler | None = None

        self.event_bus.subscribe(EventType.BACKGROUND_READY, self._on_background_ready)

        self._setup_log_capture()

        logger.info("GameWindow created")

    def _setup_log_capture(self) -> None:
        """Setup log capturing for the log viewer."""
        class WindowLogHandler(logging.Handler):
            def __init__(self, window: 'GameWindow'):
                super().__init__()
                self.window = window

            def emit(self, record):
                msg = self.format(record)
                self.window._log_buffer.append(msg)
                # Keep buffer size limited
                if len(self.window._log_buffer) > self.window._max_log_lines * 2:
                    self.window._log_buffer = self.window._log_buffer[-self.window._max_log_lines:]

        handler = WindowLogHandler(self)
        handler.setFormatter(logging.Formatter('%(levelname).1s %(name)s: %(message)s'))
        logging.getLogger().addHandler(handler)
        self._log_handler = handler

    def _init_pygame(self) -> None:
        """Initialize pygame and create window."""
        pygame.init()
        pygame.display.set_caption(self.config.title)

        flags = pygame.DOUBLEBUF
        if self.config.fullscreen:
            flags |= pygame.FULLSCREEN

        self._screen = pygame.display.set_mode(
            (self.config.width, self.config.height),
            flags
        )
        self._clock = pygame.time.Clock()

        pygame.font.init()
        self._load_fonts()
        self._calculate_layout()

        logger.info(f"Pygame initialized: {self.config.width}x{self.config.height}")

    def _load_fonts(self) -> None:
        """Find a font that can render the Bengali commentary."""
        for font_path in BENGALI_FONT_PATHS:
            if not os.path.exists(font_path):
                continue
            try:
                self._font = pygame.font.Font(font_path, 20)
                self._small_font = pygame.font.Font(font_path, 13)
                self._big_font = pygame.font.Font(font_path, 40)
                logger.info(f"Using font: {font_path}")
                return
            except (OSError, pygame.error) as e:
                logger.debug(f"Font {font_path} failed: {e}")

        for font_name in BENGALI_SYSTEM_FONTS:
            if pygame.font.match_font(font_name):
                self._font = pygame.font.SysFont(font_name, 20)
                self._small_font = pygame.font.SysFont(font_name, 13)
                self._big_font = pygame.font.SysFont(font_name, 40)
                logger.info(f"Using system font: {font_name}")
                return

        self._font = pygame.font.SysFont(None, 22)
        self._small_font = pygame.font.SysFont(None, 15)
        self._big_font = pygame.font.SysFont(None, 44)
        logger.warning("No Bengali font found, commentary may not render")

    def _calculate_layout(self) -> None:
        """Center the game canvas, leaving room for the title bar."""
        w, h = self.config.width, self.config.height
        x = (w - CANVAS_WIDTH) // 2
        y = max(40, (h - CANVAS_HEIGHT) // 2)
        self._canvas_rect = pygame.Rect(x, y, CANVAS_WIDTH, CANVAS_HEIGHT)

    # Input

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                self._handle_keydown(event)

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._handle_press("mouse")

    def _handle_keydown(self, event: pygame.event.Event) -> None:
        """Handle key press."""
        key = event.key

        if key == pygame.K_ESCAPE or key == pygame.K_q:
            self._running = False
        elif key == pygame.K_d:
            self._show_debug = not self._show_debug
        elif key == pygame.K_l:
            self._show_log = not self._show_log
        elif key == pygame.K_s:
            self._capture_screenshot()
        elif key in JUMP_KEYS or key in START_KEYS:
            if self.controller.phase == GamePhase.PLAYING:
                if key in JUMP_KEYS:
                    self.event_bus.emit(Event(EventType.JUMP_PRESSED, source="keyboard"))
            elif key in START_KEYS:
                self._press_start("keyboard")

    def _handle_press(self, source: str) -> None:
        if self.controller.phase == GamePhase.PLAYING:
            self.event_bus.emit(Event(EventType.JUMP_PRESSED, source=source))
        else:
            self._press_start(source)

    def _press_start(self, source: str) -> None:
        # The start panel stays disabled while the backdrop is loading
        if self.controller.phase == GamePhase.START and self.controller.loading:
            return
        self.event_bus.emit(Event(EventType.START_PRESSED, source=source))

    def _on_background_ready(self, event: Event) -> None:
        self._background = decode_background(event.data.get("image"))
        if self._background is None:
            logger.info("Drawing plain sky")

    # Rendering

    def _render(self) -> None:
        """Render the scene and all overlays."""
        if not self._screen:
            return

        self._screen.fill(self.config.bg_color)

        self._render_scene()
        self._render_hud()

        phase = self.controller.phase
        if phase == GamePhase.START:
            if self.controller.loading:
                self._render_loading_panel()
            else:
                self._render_start_panel()
        elif phase == GamePhase.GAMEOVER:
            self._render_game_over_panel()
        else:
            self._render_jump_hint()

        if self._show_debug:
            self._render_debug_panel()
        if self._show_log:
            self._render_log_panel()

        self._render_title_bar()

        pygame.display.flip()

    def _render_scene(self) -> None:
        buffer = self._renderer.render(self._buffer, self.controller.snapshot(), self._background)
        # Buffer is (height, width, 3), surfarray wants (width, height, 3)
        surface = pygame.surfarray.make_surface(buffer.swapaxes(0, 1))
        rect = self._canvas_rect
        pygame.draw.rect(self._screen, self.config.panel_color, rect.inflate(8, 8))
        self._screen.blit(surface, rect.topleft)

    def _render_hud(self) -> None:
        if not self._font:
            return
        rect = self._canvas_rect

        score_surf = self._big_font.render(str(self.controller.score), True, (255, 255, 255))
        self._screen.blit(score_surf, (rect.x + 16, rect.y + 10))

        best = f"BEST {self.controller.high_score}"
        best_surf = self._small_font.render(best, True, self.config.accent_color)
        self._screen.blit(best_surf, (rect.x + 18, rect.y + 58))

    def _render_overlay(self) -> pygame.Rect:
        """Dim the canvas and return the panel rect."""
        rect = self._canvas_rect
        shade = pygame.Surface(rect.size, pygame.SRCALPHA)
        shade.fill((0, 0, 0, 140))
        self._screen.blit(shade, rect.topleft)

        panel = pygame.Rect(0, 0, 520, 260)
        panel.center = rect.center
        pygame.draw.rect(self._screen, (255, 255, 255), panel, border_radius=24)
        pygame.draw.rect(self._screen, (6, 95, 70), panel, 6, border_radius=24)
        return panel

    def _blit_centered(self, font: pygame.font.Font, text: str, color, center: tuple[int, int]) -> None:
        surf = font.render(text, True, color)
        self._screen.blit(surf, surf.get_rect(center=center))

    def _render_loading_panel(self) -> None:
        panel = self._render_overlay()
        self._blit_centered(self._big_font, "লোড হচ্ছে...", (6, 95, 70), (panel.centerx, panel.centery - 25))
        self._blit_centered(self._font, "AI গ্রামের পরিবেশ সাজাচ্ছে", (51, 65, 85), (panel.centerx, panel.centery + 35))

    def _render_start_panel(self) -> None:
        panel = self._render_overlay()
        self._blit_centered(self._big_font, "গ্ৰামের দৌড়", (6, 95, 70), (panel.centerx, panel.y + 60))
        self._blit_centered(self._font, self.controller.commentary, (51, 65, 85), (panel.centerx, panel.y + 125))
        self._blit_centered(self._font, "ENTER / CLICK TO START", (234, 88, 12), (panel.centerx, panel.bottom - 50))

    def _render_game_over_panel(self) -> None:
        panel = self._render_overlay()
        self._blit_centered(self._big_font, "ধরা পড়েছেন!", (220, 38, 38), (panel.centerx, panel.y + 45))

        score_line = f"SCORE {self.controller.score}   BEST {self.controller.high_score}"
        self._blit_centered(self._font, score_line, (51, 65, 85), (panel.centerx, panel.y + 100))
        self._blit_centered(self._font, self.controller.commentary, (6, 95, 70), (panel.centerx, panel.y + 150))
        self._blit_centered(self._font, "ENTER / CLICK TO RETRY", (234, 88, 12), (panel.centerx, panel.bottom - 40))

    def _render_jump_hint(self) -> None:
        rect = self._canvas_rect
        self._blit_centered(self._small_font, "TAP TO JUMP", (255, 255, 255), (rect.centerx, rect.bottom - 20))

    def _render_debug_panel(self) -> None:
        """Render the debug information panel."""
        if not self._small_font:
            return

        run = self.controller.run_state
        lines = [
            f"FPS: {self._clock.get_fps():.1f}" if self._clock else "FPS: --",
            f"Frame: {self._frame_count}",
            f"Phase: {self.controller.phase.name}",
            f"Tick: {run.frame_count}",
            f"Score: {run.score:.1f}",
            f"Obstacles: {len(run.obstacles)}",
            f"Runner y: {run.runner.y:.1f} vy: {run.runner.velocity_y:.1f}",
            f"Runs: {self.controller.runs_played}",
            f"Lookups: {self.controller.pending_lookups}",
        ]

        rect = pygame.Rect(self._canvas_rect.right - 230, self._canvas_rect.y + 10, 220, 18 * len(lines) + 16)
        surf = pygame.Surface(rect.size, pygame.SRCALPHA)
        surf.fill((20, 25, 35, 200))
        self._screen.blit(surf, rect.topleft)

        y = rect.y + 8
        for line in lines:
            text_surface = self._small_font.render(line, True, self.config.text_color)
            self._screen.blit(text_surface, (rect.x + 10, y))
            y += 18

    def _render_log_panel(self) -> None:
        """Render the log viewer panel."""
        if not self._small_font:
            return

        rect = pygame.Rect(10, 50, 340, self.config.height - 100)

        # Semi-transparent background
        surf = pygame.Surface((rect.width, rect.height), pygame.SRCALPHA)
        surf.fill((20, 25, 35, 230))
        self._screen.blit(surf, rect.topleft)
        pygame.draw.rect(self._screen, (60, 80, 100), rect, 1, border_radius=5)

        title_surf = self._font.render("LOG", True, (100, 200, 255))
        self._screen.blit(title_surf, (rect.x + 10, rect.y + 5))

        y = rect.y + 32
        for line in self._log_buffer[-self._max_log_lines:]:
            # Color code by level
            if line.startswith('E'):
                color = (255, 100, 100)
            elif line.startswith('W'):
                color = (255, 200, 100)
            elif line.startswith('I'):
                color = (150, 200, 150)
            else:
                color = (150, 150, 170)

            display_line = line[:50] + "..." if len(line) > 53 else line
            text_surf = self._small_font.render(display_line, True, color)
            self._screen.blit(text_surf, (rect.x + 8, y))
            y += 16

            if y > rect.bottom - 10:
                break

    def _render_title_bar(self) -> None:
        if not self._small_font:
            return

        title = f"{self.config.title} | {self.controller.phase.name}"
        text_surface = self._small_font.render(title, True, self.config.accent_color)
        self._screen.blit(text_surface, (20, 12))

        indicators = []
        if self._show_debug:
            indicators.append("DBG")
        if self._show_log:
            indicators.append("LOG")
        if indicators:
            status_surf = self._small_font.render(" | ".join(indicators), True, (100, 150, 200))
            self._screen.blit(status_surf, (self.config.width - 120, 12))

    def _capture_screenshot(self) -> None:
        """Capture and save a screenshot."""
        if self._screen:
            filename = f"screenshot_{self._frame_count}.png"
            pygame.image.save(self._screen, filename)
            logger.info(f"Screenshot saved: {filename}")

    async def run(self) -> None:
        """Main window loop. One simulation tick per displayed frame."""
        self._init_pygame()
        self._running = True
        self.controller.request_background()

        logger.info("Game window started")

        while self._running:
            self._handle_events()
            self.controller.scheduler.pump()
            self._render()

            if self._clock:
                self._clock.tick(self.config.fps)

            self._frame_count += 1

            # Yield to the lookup tasks
            await asyncio.sleep(0)

        self._cleanup()

    def _cleanup(self) -> None:
        """Clean up pygame resources."""
        self.controller.shutdown()
        self.event_bus.emit(Event(EventType.SHUTDOWN, source="window"))
        if self._log_handler:
            logging.getLogger().removeHandler(self._log_handler)
        pygame.quit()
        logger.info("Game window stopped")

    def stop(self) -> None:
        """Stop the window loop."""
        self._running = False
