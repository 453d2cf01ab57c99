# config.py
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_MODEL = "gemini-2.5-pro"
DEFAULT_API_BASE = "https://generativelanguage.googleapis.com"
DEFAULT_TEMPERATURE = 0.3


@dataclass(frozen=True)
class Settings:
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    gemini_api_base: str = DEFAULT_API_BASE
    temperature: float = DEFAULT_TEMPERATURE
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "Settings":
        """
        Build settings from an environment mapping.
        GEMINI_API_KEY wins over the legacy API_KEY name; blank values count as unset.
        """
        api_key = (env.get("GEMINI_API_KEY") or env.get("API_KEY") or "").strip() or None
        return cls(
            gemini_api_key=api_key,
            gemini_model=env.get("GEMINI_MODEL", DEFAULT_MODEL),
            gemini_api_base=(env.get("GEMINI_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
            temperature=float(env.get("GEMINI_TEMPERATURE", DEFAULT_TEMPERATURE)),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            host=env.get("HOST", "127.0.0.1"),
            port=int(env.get("PORT", "8000")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Environment variables, with a local .env file filling the gaps."""
    load_dotenv()
    return Settings.from_env(os.environ)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
