"""Configuration constants, audio defaults, and .env loading.

WHY: Centralizes every configurable value (provider credentials, model
names, the device API key, audio header defaults) so they are easy to
find and override per deployment without touching code.

HOW: python-dotenv loads the .env file on import. Constants are plain
module-level values read from the environment with defaults. The
load_account_id()/load_api_token() helpers give a clear error when the
provider credentials are missing.

RULES:
- Provider credentials come from .env / environment, never hardcoded
- An empty API_KEY disables device authentication (dev/testing mode)
- Audio defaults match what Willow devices send when a header is absent
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

SERVICE_NAME = "willow-wis-cf"
"""Service identifier reported by the health endpoints."""

# ---------------------------------------------------------------------------
# Workers AI (inference provider)
# ---------------------------------------------------------------------------

CF_AI_BASE_URL = os.getenv("CF_AI_BASE_URL", "https://api.cloudflare.com/client/v4")
WHISPER_MODEL = os.getenv("WHISPER_MODEL", "@cf/openai/whisper-large-v3-turbo")
WHISPER_LANGUAGE = os.getenv("WHISPER_LANGUAGE", "en")
TTS_MODEL = os.getenv("TTS_MODEL", "@cf/deepgram/aura-2-en")
TTS_SPEAKER = os.getenv("TTS_SPEAKER", "luna")

# ---------------------------------------------------------------------------
# Device-facing settings
# ---------------------------------------------------------------------------

API_KEY = os.getenv("API_KEY", "").strip()
"""Shared secret devices pass as ?key=. Empty means auth is disabled."""

DEFAULT_CODEC = os.getenv("DEFAULT_CODEC", "pcm")
DEFAULT_SAMPLE_RATE = int(os.getenv("DEFAULT_SAMPLE_RATE", "16000"))
DEFAULT_BITS = int(os.getenv("DEFAULT_BITS", "16"))
DEFAULT_CHANNELS = int(os.getenv("DEFAULT_CHANNELS", "1"))

# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def load_account_id() -> str:
    """Load the Cloudflare account ID from the environment.

    RULES:
    - Raises ValueError if the ID is missing or empty
    """
    account_id = os.getenv("CF_ACCOUNT_ID", "").strip()
    if not account_id:
        raise ValueError(
            "Cloudflare account ID not configured. "
            "Add CF_ACCOUNT_ID to the .env file in the app folder."
        )
    return account_id


def load_api_token() -> str:
    """Load the Workers AI API token from the environment.

    WHY: The token is required for every inference call. Loading it from
    the environment (via .env) keeps it out of source code.

    RULES:
    - Raises ValueError if the token is missing or empty
    - Never returns a default/placeholder value
    """
    token = os.getenv("CF_API_TOKEN", "").strip()
    if not token:
        raise ValueError(
            "Workers AI API token not configured. "
            "Add CF_API_TOKEN to the .env file in the app folder."
        )
    return token
