"""FastAPI application exposing the Willow Inference Server endpoints.

WHY: Willow devices (and the Willow Application Server) talk to a WIS
over a small fixed HTTP surface. This app speaks that surface and
forwards the actual work to Workers AI, reshaping payloads both ways.

HOW: One FastAPI app with five routes:
  POST /api/willow  raw audio in, {"text": ...} out (ASR)
  GET  /api/tts     ?text=... in, WAV audio out (TTS)
  POST /api/echo    WAS REST command endpoint, echoes the utterance
  ANY  / and /api/health  liveness check
An HTTP middleware answers CORS preflight and stamps CORS headers on
every response. Exception handlers render all errors as {"error": ...}.

RULES:
- /api/willow, /api/tts and /api/echo require ?key= matching API_KEY
  (auth is skipped entirely when API_KEY is empty)
- Raw PCM (x-audio-codec: pcm) is wrapped in a WAV header before
  forwarding; any other codec is passed through untouched
- Empty audio bodies are rejected with 400 before any provider call
- Protected paths check the key before the method, so a wrong method
  without a valid key is 401, not 404
- Unknown paths and unsupported methods both return 404 {"error": "Not found"}
- Provider failures return 502; anything unexpected returns 500
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import logging
import secrets
from typing import Annotated, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from willow_wis import __version__, config
from willow_wis.api.client import WorkersAIClient, WorkersAIError
from willow_wis.audio.wav import is_wav, synthesize
from willow_wis.server.models import ASRResponse, EchoRequest, ErrorResponse, HealthResponse

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": (
        "Content-Type, x-audio-codec, x-audio-sample-rate, x-audio-bits, x-audio-channel"
    ),
}

PROTECTED_PATHS = frozenset({"/api/willow", "/api/tts", "/api/echo"})
"""Paths that require ?key= when API_KEY is configured."""

HEALTH_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]

app = FastAPI(
    title="Willow Inference Server (Workers AI)",
    description=(
        "Drop-in Willow Inference Server replacement. Accepts audio from "
        "Willow devices for speech recognition and returns synthesized "
        "speech, backed by Cloudflare Workers AI."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Middleware and error envelope
# ---------------------------------------------------------------------------


@app.middleware("http")
async def cors_middleware(request: Request, call_next):
    """Answer preflight requests and add CORS headers to every response."""
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=CORS_HEADERS)
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


def _error_response(message: str, status_code: int) -> JSONResponse:
    """Build an {"error": ...} JSON response with CORS headers."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=CORS_HEADERS,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Protected paths authenticate before the method is looked at.
    if exc.status_code == 405 and request.url.path in PROTECTED_PATHS:
        if not _key_is_valid(request.query_params.get("key")):
            logger.warning("Rejected request with missing or invalid API key")
            return _error_response("Unauthorized", 401)
    # Routing misses (unknown path or wrong method) all look alike to devices.
    if exc.status_code in (404, 405):
        return _error_response("Not found", 404)
    return _error_response(str(exc.detail), exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response("Invalid request", 400)


@app.exception_handler(WorkersAIError)
async def provider_exception_handler(request: Request, exc: WorkersAIError) -> JSONResponse:
    logger.error("Request to %s failed upstream: %s", request.url.path, exc)
    return _error_response(str(exc), 502)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Request failed: %s", exc)
    return _error_response(str(exc) or "Unknown error", 500)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _key_is_valid(key: Optional[str]) -> bool:
    """Check a device-supplied key against API_KEY.

    RULES:
    - No API_KEY configured means every key (or none) is accepted
    - Comparison is constant-time
    """
    expected = config.API_KEY
    if not expected:
        return True
    if not key:
        return False
    return secrets.compare_digest(key.encode("utf-8"), expected.encode("utf-8"))


def require_api_key(
    key: Annotated[
        Optional[str],
        Query(description="Shared API key configured on the device."),
    ] = None,
) -> None:
    """Reject the request with 401 unless ?key= matches API_KEY."""
    if not _key_is_valid(key):
        logger.warning("Rejected request with missing or invalid API key")
        raise HTTPException(status_code=401, detail="Unauthorized")


def _parse_format_header(name: str, raw: Optional[str], default: int) -> int:
    """Parse a numeric x-audio-* header, falling back to ``default``.

    RULES:
    - Absent or blank header means the default
    - Non-integer or negative values raise 400
    """
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid {} header: {!r}".format(name, raw))
    if value < 0:
        raise HTTPException(status_code=400, detail="Invalid {} header: {!r}".format(name, raw))
    return value


# ---------------------------------------------------------------------------
# Endpoints: ASR
# ---------------------------------------------------------------------------


@app.post(
    "/api/willow",
    response_model=ASRResponse,
    dependencies=[Depends(require_api_key)],
    tags=["asr"],
    summary="Transcribe device audio",
    description=(
        "Accepts the raw request body as audio. Format is described by the "
        "x-audio-* headers; raw PCM is wrapped in a WAV header before being "
        "sent to Whisper."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Empty body or malformed audio headers"},
        401: {"model": ErrorResponse, "description": "Missing or invalid API key"},
        502: {"model": ErrorResponse, "description": "Transcription backend failed"},
    },
)
async def transcribe_audio(
    request: Request,
    x_audio_codec: Annotated[Optional[str], Header(description="Audio codec (pcm, wav, amrwb).")] = None,
    x_audio_sample_rate: Annotated[Optional[str], Header(description="Sample rate in Hz.")] = None,
    x_audio_bits: Annotated[Optional[str], Header(description="Bits per sample.")] = None,
    x_audio_channel: Annotated[Optional[str], Header(description="Channel count.")] = None,
) -> ASRResponse:
    codec = (x_audio_codec or config.DEFAULT_CODEC).strip().lower()
    sample_rate = _parse_format_header("x-audio-sample-rate", x_audio_sample_rate, config.DEFAULT_SAMPLE_RATE)
    bits = _parse_format_header("x-audio-bits", x_audio_bits, config.DEFAULT_BITS)
    channels = _parse_format_header("x-audio-channel", x_audio_channel, config.DEFAULT_CHANNELS)

    raw_body = await request.body()
    if not raw_body:
        raise HTTPException(status_code=400, detail="Empty audio body")

    if codec == "pcm" and not is_wav(raw_body):
        audio = synthesize(raw_body, sample_rate, bits, channels)
    else:
        audio = raw_body

    logger.debug(
        "ASR request: codec=%s rate=%d bits=%d channels=%d bytes=%d",
        codec, sample_rate, bits, channels, len(raw_body),
    )

    async with WorkersAIClient() as client:
        result = await client.transcribe(audio)

    logger.info("ASR result: %r", result.text)
    return ASRResponse(text=result.text or "")


# ---------------------------------------------------------------------------
# Endpoints: TTS
# ---------------------------------------------------------------------------


@app.get(
    "/api/tts",
    dependencies=[Depends(require_api_key)],
    tags=["tts"],
    summary="Synthesize speech",
    description="Returns WAV audio (linear16) speaking the given text.",
    responses={
        200: {"content": {"audio/wav": {}}, "description": "Synthesized speech"},
        400: {"model": ErrorResponse, "description": "Missing text parameter"},
        401: {"model": ErrorResponse, "description": "Missing or invalid API key"},
        502: {"model": ErrorResponse, "description": "Speech backend failed"},
    },
)
async def text_to_speech(
    text: Annotated[Optional[str], Query(description="Text to speak.")] = None,
) -> Response:
    if not text:
        raise HTTPException(status_code=400, detail="Missing 'text' query parameter")

    async with WorkersAIClient() as client:
        audio = await client.synthesize_speech(text)

    return Response(content=audio, media_type="audio/wav")


# ---------------------------------------------------------------------------
# Endpoints: Echo
# ---------------------------------------------------------------------------


@app.post(
    "/api/echo",
    dependencies=[Depends(require_api_key)],
    response_class=PlainTextResponse,
    tags=["command"],
    summary="Echo the transcribed command",
    description=(
        "REST command endpoint for WAS. Responds with text that the device "
        "speaks back. Malformed bodies are treated as an empty utterance."
    ),
)
async def echo_command(request: Request) -> PlainTextResponse:
    raw = await request.body()
    try:
        body = EchoRequest.model_validate_json(raw)
    except ValidationError:
        body = EchoRequest()

    text = str(body.text) if body.text else ""
    logger.info("Echo request: %r", text)
    speech = "You said: {}".format(text) if text else "I didn't catch that."
    return PlainTextResponse(speech)


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.api_route("/", methods=HEALTH_METHODS, response_model=HealthResponse, include_in_schema=False)
@app.api_route(
    "/api/health",
    methods=HEALTH_METHODS,
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check for load balancers and uptime monitors. Answers any method.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", service=config.SERVICE_NAME)


def run_api() -> None:
    """Entry point for the willow-wis console script."""
    import uvicorn

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=config.HOST, port=config.PORT)
