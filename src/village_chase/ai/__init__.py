"""AI module for the village chase - Gemini background and commentary."""

from village_chase.ai.client import GeminiClient, GeminiConfig, get_gemini_client
from village_chase.ai.commentary import CommentaryService
from village_chase.ai.background import BackgroundService, decode_background

__all__ = [
    # Client
    "GeminiClient",
    "GeminiConfig",
    "get_gemini_client",
    # Services
    "CommentaryService",
    "BackgroundService",
    "decode_background",
]
