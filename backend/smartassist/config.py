# smartassist/config.py
"""
Runtime settings, read once from the environment.

backend/.env is loaded first when it exists (local dev); in deployment the
variables come straight from the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

DOTENV_PATH = Path(__file__).resolve().parent.parent / ".env"

DEFAULT_DATABASE_URL = "sqlite:///./smartassist.db"
PLACEHOLDER_USER_ID = "temp-user-001"


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class Settings:
    database_url: str = DEFAULT_DATABASE_URL

    # AI delegate (OpenAI-compatible chat completions)
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-5"
    openai_base_url: str = "https://api.openai.com/v1"
    openai_timeout: float = 60.0
    openai_max_tokens: int = 2048

    # Payment delegate
    stripe_secret_key: Optional[str] = None
    stripe_api_base: str = "https://api.stripe.com/v1"
    payment_currency: str = "usd"

    placeholder_user_id: str = PLACEHOLDER_USER_ID
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"]
    )

    @classmethod
    def from_env(cls) -> "Settings":
        if DOTENV_PATH.exists():
            load_dotenv(DOTENV_PATH, override=False)

        s = cls()
        s.database_url = os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL
        s.openai_api_key = os.getenv("OPENAI_API_KEY") or None
        s.openai_model = os.getenv("OPENAI_MODEL", s.openai_model)
        s.openai_base_url = os.getenv("OPENAI_BASE_URL", s.openai_base_url).rstrip("/")
        s.openai_timeout = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "60"))
        s.openai_max_tokens = int(os.getenv("OPENAI_MAX_TOKENS", "2048"))
        s.stripe_secret_key = os.getenv("STRIPE_SECRET_KEY") or None
        s.stripe_api_base = os.getenv("STRIPE_API_BASE", s.stripe_api_base).rstrip("/")
        s.payment_currency = os.getenv("PAYMENT_CURRENCY", s.payment_currency).lower()
        s.placeholder_user_id = os.getenv("PLACEHOLDER_USER_ID", PLACEHOLDER_USER_ID)
        origins = os.getenv("CORS_ORIGINS")
        if origins:
            s.cors_origins = _split_csv(origins)
        return s


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings; tests call get_settings.cache_clear() after changing env."""
    return Settings.from_env()
