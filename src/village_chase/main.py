"""
Main entry point for the village chase.

Reads the environment from settings and launches either the pygame
window or the headless timer host.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from village_chase.ai.background import BackgroundService
from village_chase.ai.client import GeminiConfig, get_gemini_client
from village_chase.ai.commentary import CommentaryService
from village_chase.game.controller import GameController
from village_chase.settings import Settings, get_settings


def setup_logging(debug: bool = False, log_file: Optional[Path] = None) -> None:
    """Configure console logging, plus a fresh log file when one is set."""
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )
    level = logging.DEBUG if debug else logging.INFO

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file:
        # Truncate on each run for fresh logs
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        logging.info(f"Logging to file: {log_file}")

    # Reduce noise from per-frame modules
    logging.getLogger("village_chase.graphics").setLevel(logging.INFO)
    logging.getLogger("village_chase.game.physics").setLevel(logging.INFO)
    logging.getLogger("village_chase.core.events").setLevel(logging.INFO)


def build_controller(settings: Settings) -> GameController:
    """Wire the controller to the Gemini backed collaborators."""
    client = get_gemini_client(GeminiConfig.from_settings(settings.ai))
    if not client.is_available:
        logging.getLogger(__name__).warning(
            "No GEMINI_API_KEY set, using plain sky and fallback commentary"
        )

    return GameController(
        commentary_provider=CommentaryService(client),
        background_provider=BackgroundService(client, aspect_ratio=settings.ai.background_aspect_ratio),
        fps=settings.display.fps,
    )


async def run_simulator(settings: Settings) -> None:
    """Run the pygame window."""
    from village_chase.simulator.window import GameWindow, WindowConfig

    controller = build_controller(settings)
    window = GameWindow(controller, WindowConfig.from_settings(settings.display))
    await window.run()


async def run_headless(settings: Settings) -> None:
    """Run the timer driven host with autoplay."""
    from village_chase.headless import HeadlessRunner

    controller = build_controller(settings)
    runner = HeadlessRunner(controller, settings.headless)
    result = await runner.run()

    logging.getLogger(__name__).info(
        f"Session finished: scores {result.scores}, high score {result.high_score}"
    )


def main() -> None:
    """Main entry point."""
    # Load environment variables
    load_dotenv()

    settings = get_settings()
    setup_logging(settings.debug, settings.log_file)

    logger = logging.getLogger(__name__)
    logger.info("Village chase starting...")

    try:
        if settings.is_simulator:
            logger.info("Running in simulator mode")
            logger.info("Controls: SPACE/UP/W/click jump, ENTER start, D debug, L log, S screenshot, Q quit")
            asyncio.run(run_simulator(settings))
        elif settings.is_headless:
            logger.info("Running in headless mode")
            asyncio.run(run_headless(settings))
        else:
            logger.error(f"Unknown environment: {settings.env}")
            sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    logger.info("Village chase stopped")


if __name__ == "__main__":
    main()
