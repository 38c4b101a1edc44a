"""Shared test fixtures for the willow_wis test suite.

WHY: The router tests all need the same stand-in for the Workers AI
client and the same sample PCM, and every test must start with device
auth disabled so one test's API key never leaks into another.

HOW: FakeWorkersAIClient mimics the async context manager interface of
WorkersAIClient and records every call. The fake_ai fixture patches it
into the server module; client wraps the app in a FastAPI TestClient.

RULES:
- Workers AI is never called (the client class is always patched)
- API_KEY is reset to "" before each test
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from willow_wis import config
from willow_wis.api.models import TranscriptionResult
from willow_wis.server import app as app_module

# 4 frames of 16-bit mono silence/ramp
SAMPLE_PCM = b"\x00\x00\x01\x00\x02\x00\x03\x00"

SAMPLE_TTS_WAV = b"RIFF\x24\x00\x00\x00WAVEfmt " + b"\x00" * 28


class FakeWorkersAIClient:
    """Stand-in for WorkersAIClient that records calls instead of using HTTP."""

    def __init__(
        self,
        transcript: str = "turn on the lights",
        audio: bytes = SAMPLE_TTS_WAV,
        error: Optional[Exception] = None,
    ) -> None:
        self.transcript = transcript
        self.audio = audio
        self.error = error
        self.calls: List[Tuple[str, Any]] = []

    def __call__(self, *args, **kwargs) -> "FakeWorkersAIClient":
        return self

    async def __aenter__(self) -> "FakeWorkersAIClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    async def transcribe(self, audio: bytes, language=None, model=None) -> TranscriptionResult:
        self.calls.append(("transcribe", audio))
        if self.error is not None:
            raise self.error
        return TranscriptionResult(text=self.transcript)

    async def synthesize_speech(self, text: str, speaker=None, model=None) -> bytes:
        self.calls.append(("synthesize_speech", text))
        if self.error is not None:
            raise self.error
        return self.audio


@pytest.fixture(autouse=True)
def _no_api_key(monkeypatch):
    """Run every test with device auth disabled unless it opts in."""
    monkeypatch.setattr(config, "API_KEY", "")


@pytest.fixture
def fake_ai(monkeypatch):
    """Patch the server's Workers AI client with a recording fake."""
    fake = FakeWorkersAIClient()
    monkeypatch.setattr(app_module, "WorkersAIClient", fake)
    return fake


@pytest.fixture
def client(fake_ai):
    """TestClient for the FastAPI app with the provider faked out."""
    return TestClient(app_module.app)


@pytest.fixture
def sample_pcm():
    return SAMPLE_PCM
