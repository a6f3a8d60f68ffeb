"""
Configuration for UniAsset.
Settings come from environment variables or a local .env file via pydantic-settings.
"""

import logging
from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Runtime settings. Field names map to upper-case environment variables,
    e.g. ``OPENAI_API_KEY`` or ``WALLET_SYNC_DELAY_SECONDS``.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    # Hosted OpenAI-compatible model
    openai_api_key: Optional[str] = None
    openai_model: Optional[str] = "gpt-4o-mini"
    openai_base_url: Optional[str] = None

    # "local" talks to an Ollama-style server instead
    llm_mode: Literal["cloud", "local"] = "cloud"
    local_model: str = "qwen2.5:14b"
    local_llm_url: str = "http://localhost:11434/v1"
    llm_temperature: float = 0.4

    # Simulated explorer latency per wallet fetch
    wallet_sync_delay_seconds: float = 1.0

    # Advisory chat
    advisory_history_turns: int = 5
    advisory_max_chars: int = 2000

    log_level: str = "INFO"

    @property
    def is_openai_configured(self) -> bool:
        """True when a hosted model and its key are both set."""
        return bool(self.openai_api_key and self.openai_model)

    @property
    def is_ai_configured(self) -> bool:
        """True when the selected LLM mode has what it needs to run."""
        if self.llm_mode == "local":
            return bool(self.local_model and self.local_llm_url)
        return self.is_openai_configured


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Re-read the environment; tests call this after patching env vars."""
    global _settings
    _settings = Settings()
    return _settings


def configure_logging(level: Optional[str] = None):
    """Set up root logging at LOG_LEVEL unless a level is given."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
