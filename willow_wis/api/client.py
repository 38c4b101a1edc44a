"""Async HTTP client for the Workers AI REST API.

WHY: The router forwards ASR and TTS requests to models hosted on
Cloudflare Workers AI. This module hides the REST details (account-scoped
URL, bearer auth, base64 audio, response envelope) behind one client
class so the request handlers stay small.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. WorkersAIClient is an
async context manager: enter it to get an authenticated client, exit to
close the connection pool. Every model call goes through
POST /accounts/{account_id}/ai/run/{model}.

RULES:
- Always use the async context manager (async with WorkersAIClient() as client:)
- Audio is sent base64-encoded in the JSON body, never as multipart
- Non-2xx responses raise WorkersAIError with the status and body text
- A JSON envelope with success=false also raises WorkersAIError
- TTS returns the raw audio body (WAV, linear16)
"""

from __future__ import annotations

import base64
import logging

import httpx

from willow_wis.api.models import AIEnvelope, TranscriptionResult
from willow_wis.config import (
    CF_AI_BASE_URL,
    TTS_MODEL,
    TTS_SPEAKER,
    WHISPER_LANGUAGE,
    WHISPER_MODEL,
    load_account_id,
    load_api_token,
)

logger = logging.getLogger(__name__)

_TIMEOUT = httpx.Timeout(60.0, connect=10.0)


class WorkersAIError(Exception):
    """Raised when Workers AI returns an error response.

    WHY: Callers need a typed exception to tell provider failures apart
    from request-validation errors and network errors.

    RULES:
    - Always include status_code and message
    - status_code is the upstream HTTP status (200 for envelope failures)
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Workers AI error {status_code}: {message}")


class WorkersAIClient:
    """Async client for running Workers AI models.

    RULES:
    - Use as: async with WorkersAIClient() as client: ...
    - account_id / api_token default to the values in .env
    - transport is only for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        account_id: str | None = None,
        api_token: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._account_id = account_id or load_account_id()
        self._api_token = api_token or load_api_token()
        self._base_url = (base_url or CF_AI_BASE_URL).rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> WorkersAIClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_token}"},
            timeout=_TIMEOUT,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "WorkersAIClient must be used as an async context manager: "
                "async with WorkersAIClient() as client: ..."
            )
        return self._client

    def _run_path(self, model: str) -> str:
        return f"/accounts/{self._account_id}/ai/run/{model}"

    async def run(self, model: str, inputs: dict) -> httpx.Response:
        """POST ``inputs`` to a model and return the successful response.

        Raises:
            WorkersAIError: on any non-2xx status.
        """
        client = self._ensure_client()
        resp = await client.post(self._run_path(model), json=inputs)
        if resp.status_code < 200 or resp.status_code >= 300:
            logger.warning("Workers AI %s returned %d", model, resp.status_code)
            raise WorkersAIError(resp.status_code, resp.text)
        return resp

    # ------------------------------------------------------------------
    # ASR
    # ------------------------------------------------------------------

    async def transcribe(
        self,
        audio: bytes,
        language: str | None = None,
        model: str | None = None,
    ) -> TranscriptionResult:
        """Transcribe a complete audio clip with Whisper.

        HOW: Base64-encodes the audio, posts it with task=transcribe, and
        unwraps the result from the response envelope.

        Args:
            audio: Container-formatted audio (WAV, or whatever the device sent).
            language: Language hint; defaults to WHISPER_LANGUAGE.
            model: Model name; defaults to WHISPER_MODEL.

        Returns:
            The parsed TranscriptionResult.
        """
        model = model or WHISPER_MODEL
        resp = await self.run(
            model,
            {
                "audio": base64.b64encode(audio).decode("ascii"),
                "task": "transcribe",
                "language": language or WHISPER_LANGUAGE,
            },
        )
        envelope = AIEnvelope.from_dict(resp.json())
        if not envelope.success:
            raise WorkersAIError(resp.status_code, envelope.error_message())
        return TranscriptionResult.from_dict(envelope.result)

    # ------------------------------------------------------------------
    # TTS
    # ------------------------------------------------------------------

    async def synthesize_speech(
        self,
        text: str,
        speaker: str | None = None,
        model: str | None = None,
    ) -> bytes:
        """Synthesize ``text`` to WAV audio and return the raw bytes.

        RULES:
        - Requests linear16 encoding in a wav container
        - A JSON body instead of audio is treated as an error envelope
        """
        model = model or TTS_MODEL
        resp = await self.run(
            model,
            {
                "text": text,
                "speaker": speaker or TTS_SPEAKER,
                "encoding": "linear16",
                "container": "wav",
            },
        )
        content_type = resp.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            envelope = AIEnvelope.from_dict(resp.json())
            raise WorkersAIError(resp.status_code, envelope.error_message())
        return resp.content
