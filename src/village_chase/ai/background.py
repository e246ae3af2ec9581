"""Generated village backdrop.

Requested once per process. The result is raw image bytes; the scene
renderer needs an RGB array the size of the sky, which decode_background
produces. A missing or broken image means the solid sky color is drawn.
"""

import logging
from io import BytesIO
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray
from PIL import Image, UnidentifiedImageError

from village_chase.ai.client import GeminiClient, get_gemini_client
from village_chase.game.constants import CANVAS_WIDTH, GROUND_Y

logger = logging.getLogger(__name__)

BACKGROUND_PROMPT = (
    "A vivid, high-contrast digital 2D game background of a Bangladeshi village. "
    "Features lush green paddy fields, coconut trees, traditional thatched-roof huts "
    "(tin-shed houses), a bright blue sky with fluffy white clouds, and a dirt path "
    "at the bottom. Side-scrolling cartoon art style."
)

SKY_SIZE: Tuple[int, int] = (CANVAS_WIDTH, GROUND_Y)


class BackgroundService:
    """Service for generating the scrolling background image."""

    def __init__(self, client: Optional[GeminiClient] = None, aspect_ratio: str = "16:9"):
        self._client = client or get_gemini_client()
        self._aspect_ratio = aspect_ratio

    @property
    def is_available(self) -> bool:
        return self._client.is_available

    async def generate(self) -> Optional[bytes]:
        """Image bytes for the backdrop, or None when unavailable."""
        if not self._client.is_available:
            logger.warning("AI not available for background, using plain sky")
            return None

        try:
            image = await self._client.generate_image(
                BACKGROUND_PROMPT,
                aspect_ratio=self._aspect_ratio,
            )
        except Exception as e:
            logger.error(f"Background generation failed: {e}")
            return None

        if image:
            logger.info(f"Background generated ({len(image)} bytes)")
        return image or None

    async def __call__(self) -> Optional[bytes]:
        return await self.generate()


def decode_background(
    image_data: Optional[bytes],
    size: Tuple[int, int] = SKY_SIZE,
) -> Optional[NDArray[np.uint8]]:
    """Decode image bytes into an RGB array of the given (width, height).

    Returns:
        Array shaped (height, width, 3), or None if the bytes are not an image
    """
    if not image_data:
        return None

    try:
        img = Image.open(BytesIO(image_data))
        img = img.convert("RGB")
        img = img.resize(size, Image.Resampling.LANCZOS)
        return np.asarray(img, dtype=np.uint8).copy()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.error(f"Background decode failed: {e}")
        return None
