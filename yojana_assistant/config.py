"""
Yojana Assistant Configuration Settings
"""
import logging
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional
from enum import Enum


class SupportedLanguage(str, Enum):
    MARATHI = "marathi"
    HINDI = "hindi"
    ENGLISH = "english"


# Client locale prefix to language mapping
LOCALE_LANGUAGES = {
    "mr": "marathi",
    "hi": "hindi",
    "en": "english",
}

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://localhost:44308",
    "http://192.168.1.41:44308",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # LLM Settings
    llm_provider: str = Field(default="gemini", alias="LLM_PROVIDER")
    llm_model: str = Field(default="gemini-1.5-flash", alias="LLM_MODEL")
    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    anthropic_api_key: Optional[str] = Field(default=None, alias="ANTHROPIC_API_KEY")
    llm_timeout_seconds: float = Field(default=30.0, alias="LLM_TIMEOUT_SECONDS")
    llm_max_retries: int = Field(default=1, alias="LLM_MAX_RETRIES")

    # Ollama Settings (Free Local LLM)
    ollama_base_url: str = Field(default="http://localhost:11434", alias="OLLAMA_BASE_URL")
    ollama_model: str = Field(default="llama3.2", alias="OLLAMA_MODEL")

    # Scheme Source
    scheme_source_url: Optional[str] = Field(
        default="https://mocki.io/v1/b30e9cf8-f692-4715-b2fc-81523b67f6c7",
        alias="SCHEME_SOURCE_URL"
    )
    scheme_source_timeout_seconds: float = Field(default=10.0, alias="SCHEME_SOURCE_TIMEOUT_SECONDS")
    scheme_result_cap: int = Field(default=10, alias="SCHEME_RESULT_CAP")
    scheme_fallback_on_empty: bool = Field(default=False, alias="SCHEME_FALLBACK_ON_EMPTY")

    # Session Memory
    history_window: int = Field(default=10, alias="HISTORY_WINDOW")
    session_idle_minutes: int = Field(default=30, alias="SESSION_IDLE_MINUTES")
    session_sweep_seconds: int = Field(default=300, alias="SESSION_SWEEP_SECONDS")

    # Language Settings
    default_language: SupportedLanguage = Field(
        default=SupportedLanguage.MARATHI,
        alias="DEFAULT_LANGUAGE"
    )

    # Server Settings
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=5000, alias="PORT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    allowed_origins: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS),
        alias="ALLOWED_ORIGINS"
    )
    allowed_origin_regex: Optional[str] = Field(
        default=r"https://.*\.railway\.app",
        alias="ALLOWED_ORIGIN_REGEX"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True

    def get_language_for_locale(self, locale: Optional[str]) -> Optional[str]:
        """Map a client locale such as 'mr-IN' to a supported language"""
        if not locale:
            return None
        prefix = locale.strip().lower().replace("_", "-").split("-")[0]
        return LOCALE_LANGUAGES.get(prefix)


def setup_logging(level: Optional[str] = None):
    """Configure root logging with a rich console handler"""
    from rich.logging import RichHandler

    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True
    )


# Global settings instance
settings = Settings()
