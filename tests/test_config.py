from dental_opinion.config import DEFAULT_API_BASE, DEFAULT_MODEL, Settings


def test_defaults():
    settings = Settings.from_env({})
    assert settings.gemini_api_key is None
    assert settings.gemini_model == DEFAULT_MODEL == "gemini-2.5-pro"
    assert settings.gemini_api_base == DEFAULT_API_BASE
    assert settings.temperature == 0.3
    assert settings.port == 8000


def test_api_key_sources():
    assert Settings.from_env({"API_KEY": "legacy"}).gemini_api_key == "legacy"
    assert Settings.from_env({"API_KEY": "legacy", "GEMINI_API_KEY": "new"}).gemini_api_key == "new"
    assert Settings.from_env({"GEMINI_API_KEY": "   "}).gemini_api_key is None


def test_overrides():
    settings = Settings.from_env(
        {
            "GEMINI_MODEL": "gemini-2.5-flash",
            "GEMINI_API_BASE": "http://localhost:8080/",
            "GEMINI_TEMPERATURE": "0.1",
            "LOG_LEVEL": "debug",
            "PORT": "9000",
        }
    )
    assert settings.gemini_model == "gemini-2.5-flash"
    assert settings.gemini_api_base == "http://localhost:8080"
    assert settings.temperature == 0.1
    assert settings.log_level == "DEBUG"
    assert settings.port == 9000
