"""Gemini API client singleton for the village chase.

Text goes through the google-genai SDK, images through the REST endpoint
with aiohttp. Every public call returns None on failure instead of raising,
so callers only ever have to handle "no result".
"""

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Optional

import aiohttp
from google import genai
from google.genai import types

from village_chase.settings import AISettings, get_settings

logger = logging.getLogger(__name__)

GEMINI_REST_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


@dataclass
class GeminiConfig:
    """Configuration for Gemini client."""

    api_key: str
    text_model: str = "gemini-3-flash-preview"
    image_model: str = "gemini-2.5-flash-image"
    text_timeout: float = 30.0
    image_timeout: float = 120.0
    max_retries: int = 3
    retry_delay: float = 1.0
    temperature: float = 0.9  # Witty, varied commentary
    max_output_tokens: int = 256

    @classmethod
    def from_settings(cls, ai: AISettings) -> "GeminiConfig":
        return cls(
            api_key=ai.gemini_api_key,
            text_model=ai.commentary_model,
            image_model=ai.background_model,
            text_timeout=ai.commentary_timeout,
            image_timeout=ai.background_timeout,
            max_retries=ai.max_retries,
            retry_delay=ai.retry_delay,
        )


def _is_overloaded(error: Exception) -> bool:
    text = str(error).lower()
    return "503" in text or "overloaded" in text or "unavailable" in text


class GeminiClient:
    """Singleton Gemini API client.

    Provides async interface to Gemini models for:
    - Short text generation (post-game commentary)
    - Image generation (scrolling background)
    """

    _instance: Optional["GeminiClient"] = None
    _initialized: bool = False

    def __new__(cls, config: Optional[GeminiConfig] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, config: Optional[GeminiConfig] = None):
        if self._initialized:
            return

        if config is None:
            config = GeminiConfig.from_settings(get_settings().ai)
        if not config.api_key:
            logger.warning("GEMINI_API_KEY not set, AI features will be disabled")

        self.config = config
        self._client: Optional[genai.Client] = None
        self._initialized = True

        logger.info("GeminiClient initialized")

    @property
    def is_available(self) -> bool:
        """Check if AI features are available."""
        return bool(self.config.api_key)

    def _ensure_client(self) -> bool:
        """Ensure the SDK client is initialized."""
        if self._client is not None:
            return True

        if not self.config.api_key:
            logger.error("Cannot initialize client: no API key")
            return False

        try:
            self._client = genai.Client(api_key=self.config.api_key)
            logger.info("Gemini API client connected")
            return True
        except Exception as e:
            logger.error(f"Failed to initialize Gemini client: {e}")
            return False

    async def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Optional[str]:
        """Generate text using Gemini.

        Args:
            prompt: The user prompt
            model: Model name, defaults to the configured text model
            system_instruction: Optional system prompt
            temperature: Override default temperature
            max_tokens: Override max output tokens

        Returns:
            Generated text or None on error
        """
        if not self._ensure_client():
            return None

        model_name = model or self.config.text_model

        try:
            config = types.GenerateContentConfig(
                temperature=temperature or self.config.temperature,
                max_output_tokens=max_tokens or self.config.max_output_tokens,
                system_instruction=system_instruction,
            )

            for attempt in range(self.config.max_retries):
                try:
                    response = await asyncio.wait_for(
                        asyncio.to_thread(
                            self._client.models.generate_content,
                            model=model_name,
                            contents=prompt,
                            config=config,
                        ),
                        timeout=self.config.text_timeout,
                    )
                    if response and response.text:
                        return response.text.strip()
                    # Empty answer, nothing to retry for
                    return None

                except asyncio.TimeoutError:
                    logger.warning(f"Timeout on attempt {attempt + 1}")
                except Exception as e:
                    if _is_overloaded(e):
                        logger.warning(f"Service overloaded, retry {attempt + 1}")
                        await asyncio.sleep(self.config.retry_delay * (attempt + 1))
                    else:
                        raise

            logger.error("All retries exhausted")
            return None

        except Exception as e:
            logger.error(f"Text generation failed: {e}")
            return None

    async def generate_image(
        self,
        prompt: str,
        aspect_ratio: str = "16:9",
        model: Optional[str] = None,
    ) -> Optional[bytes]:
        """Generate an image through the REST endpoint.

        Args:
            prompt: Description of the image to generate
            aspect_ratio: Image aspect ratio (1:1, 9:16, 16:9, etc.)
            model: Model name, defaults to the configured image model

        Returns:
            Image bytes (PNG) or None on error
        """
        if not self.config.api_key:
            logger.error("Cannot generate image: no API key")
            return None

        model_name = model or self.config.image_model
        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": prompt}],
                }
            ],
            "generationConfig": {
                "responseModalities": ["TEXT", "IMAGE"],
                "imageConfig": {"aspectRatio": aspect_ratio},
            },
        }
        endpoint = f"{GEMINI_REST_BASE}/{model_name}:generateContent"
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.config.api_key,
        }

        try:
            for attempt in range(self.config.max_retries):
                try:
                    async with aiohttp.ClientSession() as session:
                        async with session.post(
                            endpoint,
                            json=payload,
                            headers=headers,
                            timeout=aiohttp.ClientTimeout(total=self.config.image_timeout),
                        ) as response:
                            if response.status == 503:
                                logger.warning(f"Service unavailable, retry {attempt + 1}")
                                await asyncio.sleep(self.config.retry_delay * (attempt + 1))
                                continue

                            if not response.ok:
                                error_text = await response.text()
                                logger.error(f"API error {response.status}: {error_text}")
                                return None

                            data = await response.json()

                    image = extract_inline_image(data)
                    if image is not None:
                        return image
                    logger.warning(f"No image in response, attempt {attempt + 1}")

                except asyncio.TimeoutError:
                    logger.warning(f"Image generation timeout, attempt {attempt + 1}")
                except aiohttp.ClientError as e:
                    logger.warning(f"Image request failed ({e}), attempt {attempt + 1}")
                    await asyncio.sleep(self.config.retry_delay * (attempt + 1))

            return None

        except Exception as e:
            logger.error(f"Image generation failed: {e}")
            return None


def extract_inline_image(data: dict) -> Optional[bytes]:
    """Pull the first inline image out of a generateContent response."""
    for candidate in data.get("candidates", [])[:1]:
        parts = candidate.get("content", {}).get("parts", [])
        for part in parts:
            inline_data = part.get("inlineData") or part.get("inline_data")
            if inline_data and inline_data.get("data"):
                try:
                    return base64.b64decode(inline_data["data"])
                except ValueError as e:
                    logger.warning(f"Undecodable inline image: {e}")
                    return None
    return None


# Module-level singleton accessor
_client: Optional[GeminiClient] = None


def get_gemini_client(config: Optional[GeminiConfig] = None) -> GeminiClient:
    """Get the singleton Gemini client instance.

    Args:
        config: Optional configuration (only used on first call)

    Returns:
        GeminiClient singleton instance
    """
    global _client
    if _client is None:
        _client = GeminiClient(config)
    return _client
