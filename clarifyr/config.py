"""Centralised settings for the Clarifyr service.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Explainer model
    # ------------------------------------------------------------------
    llm_provider: str = field(
        default_factory=lambda: os.environ.get("LLM_PROVIDER", "ollama")
    )
    ollama_base_url: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434")
    )
    ollama_chat_model: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_CHAT_MODEL", "ministral-3:8b")
    )
    openai_chat_model: str = field(
        default_factory=lambda: os.environ.get("OPENAI_CHAT_MODEL", "gpt-4o-mini")
    )
    openai_api_key: str = field(
        default_factory=lambda: os.environ.get("OPENAI_API_KEY", "")
    )
    model_timeout: float = field(
        default_factory=lambda: float(os.environ.get("MODEL_TIMEOUT", "60.0"))
    )

    # ------------------------------------------------------------------
    # Content acquisition
    # ------------------------------------------------------------------
    max_content_chars: int = field(
        default_factory=lambda: int(os.environ.get("MAX_CONTENT_CHARS", "15000"))
    )
    fetch_timeout: float = field(
        default_factory=lambda: float(os.environ.get("FETCH_TIMEOUT", "10.0"))
    )
    fetch_max_redirects: int = field(
        default_factory=lambda: int(os.environ.get("FETCH_MAX_REDIRECTS", "5"))
    )
    fetch_max_bytes: int = field(
        default_factory=lambda: int(os.environ.get("FETCH_MAX_BYTES", "2000000"))
    )
    fetch_user_agent: str = field(
        default_factory=lambda: os.environ.get("FETCH_USER_AGENT", _BROWSER_USER_AGENT)
    )

    # ------------------------------------------------------------------
    # Auth collaborator (Supabase)
    # ------------------------------------------------------------------
    supabase_url: str = field(
        default_factory=lambda: os.environ.get("SUPABASE_URL", "")
    )
    supabase_service_key: str = field(
        default_factory=lambda: os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )


# Module-level singleton — import this everywhere:
#   from clarifyr.config import settings
settings = Settings()
