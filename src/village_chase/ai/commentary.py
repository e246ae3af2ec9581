"""Post-game commentary from Gemini.

One witty Bengali sentence about the village chase, keyed by the final
score. Never raises: an empty answer or any failure maps to a fixed line.
"""

import logging
from typing import Optional

from village_chase.ai.client import GeminiClient, get_gemini_client

logger = logging.getLogger(__name__)

# Shown before the first run
INITIAL_COMMENTARY = "শীঘ্রই শুরু হচ্ছে এক রোমাঞ্চকর দৌড়!"

# Shown whenever a run starts
STARTING_COMMENTARY = "সাবধানে! সামনে অনেক বাধা!"

# The model answered with nothing
EMPTY_COMMENTARY = "দৌড়ান! পেছনে কিন্তু বাঁশ নিয়ে আসছে!"

# The request failed
FALLBACK_COMMENTARY = "সাবধানে! গর্তে পা দেবেন না!"

COMMENTARY_PROMPT = (
    "Generate a funny, short 1-sentence commentary in Bengali for a chase game "
    "where a female leader in a saree is escaping a male leader with a beard and "
    "a bamboo stick in a village. The current score is {score}. "
    "Make it witty and relevant to a village chase."
)


class CommentaryService:
    """Service for generating the game-over line."""

    def __init__(self, client: Optional[GeminiClient] = None):
        self._client = client or get_gemini_client()

    @property
    def is_available(self) -> bool:
        return self._client.is_available

    def build_prompt(self, score: int) -> str:
        return COMMENTARY_PROMPT.format(score=score)

    async def generate(self, score: int) -> str:
        """Commentary for a finished run.

        Args:
            score: Final floored score of the run

        Returns:
            Commentary text, or a fixed fallback line
        """
        if not self._client.is_available:
            logger.warning("AI not available for commentary")
            return FALLBACK_COMMENTARY

        try:
            text = await self._client.generate_text(self.build_prompt(score))
        except Exception as e:
            logger.error(f"Commentary generation failed: {e}")
            return FALLBACK_COMMENTARY

        if not text:
            return EMPTY_COMMENTARY

        logger.info(f"Commentary for score {score}: {text}")
        return text

    async def __call__(self, score: int) -> str:
        return await self.generate(score)
