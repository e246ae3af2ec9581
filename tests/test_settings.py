"""Settings loading tests."""

from village_chase.ai.client import GeminiConfig
from village_chase.settings import AISettings, DisplaySettings, HeadlessSettings, Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("VILLAGE_CHASE_ENV", raising=False)
        settings = Settings(_env_file=None)

        assert settings.is_simulator
        assert not settings.is_headless
        assert settings.display.fps == 60
        assert settings.headless.runs == 3

    def test_env_selects_headless(self, monkeypatch):
        monkeypatch.setenv("VILLAGE_CHASE_ENV", "headless")
        assert Settings(_env_file=None).is_headless

    def test_nested_prefixes(self, monkeypatch):
        monkeypatch.setenv("VILLAGE_CHASE_HEADLESS_RUNS", "5")
        monkeypatch.setenv("VILLAGE_CHASE_DISPLAY_FULLSCREEN", "true")

        assert HeadlessSettings().runs == 5
        assert DisplaySettings().fullscreen

    def test_api_key_alias(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("API_KEY", "from-api-key")
        assert AISettings().gemini_api_key == "from-api-key"

        monkeypatch.setenv("GEMINI_API_KEY", "from-gemini")
        assert AISettings().gemini_api_key == "from-gemini"

    def test_gemini_config_from_settings(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "k")
        monkeypatch.setenv("VILLAGE_CHASE_AI_MAX_RETRIES", "5")
        config = GeminiConfig.from_settings(AISettings())

        assert config.api_key == "k"
        assert config.max_retries == 5
        assert config.image_model == "gemini-2.5-flash-image"
