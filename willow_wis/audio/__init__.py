"""Audio container helpers for raw PCM coming off Willow devices.

WHY: Devices send headerless PCM; the transcription backend wants WAV.
This package owns the one bit-exact format concern in the project.

RULES:
- Everything here is pure (no I/O), safe to call from any request
"""

from willow_wis.audio.wav import HEADER_SIZE, build_header, is_wav, synthesize

__all__ = ["HEADER_SIZE", "build_header", "is_wav", "synthesize"]
