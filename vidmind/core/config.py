from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Video summarization (BibiGPT) ─────────────────────────────────────────
    BIBIGPT_API_KEY: Optional[str] = None
    BIBIGPT_BASE_URL: str = "https://api.bibigpt.co/api/open"

    # ── Text generation ───────────────────────────────────────────────────────
    GENERATION_PROVIDER: str = "deepseek"

    @field_validator("GENERATION_PROVIDER")
    @classmethod
    def validate_generation_provider(cls, v: str) -> str:
        allowed = {"deepseek", "groq", "gemini"}
        if v.lower() not in allowed:
            raise ValueError(f"GENERATION_PROVIDER must be one of {allowed}, got '{v}'")
        return v.lower()

    # DeepSeek (OpenAI-compatible endpoint)
    DEEPSEEK_API_KEY: Optional[str] = None
    DEEPSEEK_BASE_URL: str = "https://api.deepseek.com/v1"
    DEEPSEEK_MODEL: str = "deepseek-chat"

    # Groq (Llama 3 - High Speed)
    GROQ_API_KEY: Optional[str] = None
    GROQ_MODEL: str = "llama-3.3-70b-versatile"

    # Google (Gemini)
    GOOGLE_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.0-flash"

    GENERATION_TEMPERATURE: float = 0.7
    GENERATION_MAX_TOKENS: int = 8000

    # ── Limits ────────────────────────────────────────────────────────────────
    HTTP_TIMEOUT_SECONDS: float = 120.0  # chapter summaries can take a while
    RENDER_TIMEOUT_SECONDS: int = 30
    RENDER_VIEWPORT_WIDTH: int = 1600
    RENDER_VIEWPORT_HEIGHT: int = 1000

    # ── Rendering / output ────────────────────────────────────────────────────
    JSMIND_CDN: str = "https://cdn.jsdelivr.net/npm/jsmind@0.8.7"
    OUTPUT_DIR: Path = Path("./output")

    # ── Core ──────────────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, built once on first use."""
    return Settings()
