"""Workers AI response dataclasses.

WHY: The Workers AI REST API wraps every model result in a common
envelope ({success, result, errors, messages}). Typed dataclasses make
the fields we rely on explicit and keep dict-poking out of the router.

HOW: Each dataclass has a from_dict() factory that parses the raw JSON.

RULES:
- AIEnvelope mirrors the REST envelope; errors is a list of {code, message}
- TranscriptionResult.text is "" when Whisper returns no text
- Optional Whisper metadata (word_count, vtt, language) may be absent
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class AIEnvelope:
    """The common REST envelope around a Workers AI model result."""

    success: bool
    result: Any = None
    errors: list[dict] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> AIEnvelope:
        return cls(
            success=bool(data.get("success", False)),
            result=data.get("result"),
            errors=list(data.get("errors") or []),
        )

    def error_message(self) -> str:
        """Join the envelope's error messages into one line."""
        messages = [str(e.get("message", e)) for e in self.errors if e]
        return "; ".join(messages) or "Unknown Workers AI error"


@dataclass
class TranscriptionResult:
    """Whisper output for one audio clip.

    RULES:
    - text: full transcript, "" when missing or null
    - word_count: number of words if the model reports it, else None
    - vtt: WebVTT rendering if the model reports it, else None
    - language: detected language from transcription_info, else None
    """

    text: str
    word_count: int | None = None
    vtt: str | None = None
    language: str | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> TranscriptionResult:
        data = data or {}
        info = data.get("transcription_info") or {}
        return cls(
            text=data.get("text") or "",
            word_count=data.get("word_count"),
            vtt=data.get("vtt"),
            language=info.get("language"),
        )
